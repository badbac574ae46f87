"""Admin API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from buylow.database import get_session
from buylow.schemas.admin import (
    AccountCreate,
    AccountListItem,
    AccountResponse,
    AuditCheckResponse,
    AuditResponse,
    PlayerCreate,
    PlayerPriceUpdate,
    PlayerResponse,
)
from buylow.services import admin as admin_service
from buylow.services import audit as audit_service

router = APIRouter()


# ============================================================================
# Account endpoints
# ============================================================================


@router.post(
    "/accounts",
    response_model=AccountResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Onboard a new account",
)
async def create_account(
    data: AccountCreate,
    session: AsyncSession = Depends(get_session),
) -> AccountResponse:
    """Register a new account credited with its starting capital.

    Returns the account details including the API key.
    **Store the API key securely - it cannot be retrieved later.**

    - **account_id**: Unique account identifier
    - **team_name**: Name shown on the leaderboard
    - **starting_cash**: Starting capital (default: 10,000.00)
    """
    try:
        account, api_key = await admin_service.create_account(session, data)
    except IntegrityError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Account with ID '{data.account_id}' already exists",
        )
    return AccountResponse(
        account_id=account.id,
        team_name=account.team_name,
        cash_balance=account.cash_balance,
        starting_cash=account.starting_cash,
        api_key=api_key,
        created_at=account.created_at,
    )


@router.get(
    "/accounts",
    response_model=list[AccountListItem],
    summary="List all accounts",
)
async def list_accounts(
    session: AsyncSession = Depends(get_session),
) -> list[AccountListItem]:
    """Get all accounts."""
    accounts = await admin_service.list_accounts(session)
    return [
        AccountListItem(
            account_id=a.id,
            team_name=a.team_name,
            cash_balance=a.cash_balance,
            starting_cash=a.starting_cash,
            created_at=a.created_at,
        )
        for a in accounts
    ]


# ============================================================================
# Player endpoints
# ============================================================================


@router.post(
    "/players",
    response_model=PlayerResponse,
    status_code=status.HTTP_201_CREATED,
    summary="List a new player",
)
async def create_player(
    data: PlayerCreate,
    session: AsyncSession = Depends(get_session),
) -> PlayerResponse:
    """Make a player tradable.

    - **player_id**: Unique slug, e.g. `josh-allen`
    - **baseline_price**: Reference price for performance display
    - **current_price**: Trading price (default: the baseline)
    """
    try:
        player = await admin_service.create_player(session, data)
    except IntegrityError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Player with ID '{data.player_id}' already exists",
        )
    return PlayerResponse.model_validate(player)


@router.get(
    "/players",
    response_model=list[PlayerResponse],
    summary="List all players",
)
async def list_players(
    session: AsyncSession = Depends(get_session),
) -> list[PlayerResponse]:
    """Get all players."""
    players = await admin_service.list_players(session)
    return [PlayerResponse.model_validate(p) for p in players]


@router.put(
    "/players/{player_id}/price",
    response_model=PlayerResponse,
    summary="Set a player's current price",
)
async def set_player_price(
    player_id: str,
    data: PlayerPriceUpdate,
    session: AsyncSession = Depends(get_session),
) -> PlayerResponse:
    """Price-update hook used by the daily price job."""
    player = await admin_service.set_player_price(session, player_id, data.current_price)
    if player is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Player '{player_id}' not found",
        )
    return PlayerResponse.model_validate(player)


# ============================================================================
# Audit
# ============================================================================


@router.get(
    "/audit",
    response_model=AuditResponse,
    summary="Check ledger consistency",
)
async def audit(
    session: AsyncSession = Depends(get_session),
) -> AuditResponse:
    """Recompute cash and holdings from the transaction history."""
    report = await audit_service.audit_ledger(session)
    return AuditResponse(
        passed=report.passed,
        checks=[
            AuditCheckResponse(name=c.name, passed=c.passed, details=c.details)
            for c in report.checks
        ],
    )
