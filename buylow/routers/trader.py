"""Trader API endpoints - requires authentication."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from buylow.auth import get_current_account
from buylow.database import get_session
from buylow.errors import TradeError
from buylow.models import Account, TradeSide
from buylow.schemas.trader import (
    AccountInfoResponse,
    HoldingResponse,
    HoldingsListResponse,
    SettlementResponse,
    TradeRequest,
    TransactionListResponse,
    TransactionResponse,
)
from buylow.services import trader as trader_service
from buylow.services.trading import TradeEngine, TradeIntent, get_trade_engine

router = APIRouter()


# ============================================================================
# Account endpoints
# ============================================================================


@router.get(
    "/account",
    response_model=AccountInfoResponse,
    summary="Get my account info",
)
async def get_account(
    account: Account = Depends(get_current_account),
) -> AccountInfoResponse:
    """Get the authenticated account's cash position."""
    return AccountInfoResponse(
        account_id=account.id,
        team_name=account.team_name,
        cash_balance=account.cash_balance,
        starting_cash=account.starting_cash,
        created_at=account.created_at,
    )


@router.get(
    "/holdings",
    response_model=HoldingsListResponse,
    summary="Get my holdings",
)
async def get_holdings(
    account: Account = Depends(get_current_account),
    session: AsyncSession = Depends(get_session),
) -> HoldingsListResponse:
    """Get every open position of the authenticated account."""
    holdings = await trader_service.get_account_holdings(session, account.id)
    return HoldingsListResponse(
        holdings=[HoldingResponse.model_validate(h) for h in holdings]
    )


@router.get(
    "/transactions",
    response_model=TransactionListResponse,
    summary="List my transactions",
)
async def list_transactions(
    player_id: str | None = Query(default=None, description="Filter by player"),
    limit: int | None = Query(default=None, ge=1, le=1000, description="Maximum records"),
    account: Account = Depends(get_current_account),
    session: AsyncSession = Depends(get_session),
) -> TransactionListResponse:
    """Get settled trades of the authenticated account, newest first."""
    transactions = await trader_service.get_account_transactions(
        session, account.id, player_id=player_id, limit=limit
    )
    return TransactionListResponse(
        transactions=[TransactionResponse.model_validate(t) for t in transactions]
    )


# ============================================================================
# Trade endpoints
# ============================================================================


async def _settle(
    engine: TradeEngine, account: Account, side: TradeSide, data: TradeRequest
) -> SettlementResponse:
    intent = TradeIntent(
        account_id=account.id,
        player_id=data.player_id,
        side=side,
        quantity=data.quantity,
    )
    try:
        result = await engine.execute(intent)
    except TradeError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return SettlementResponse(**result.as_dict())


@router.post(
    "/rpc/buy_player",
    response_model=SettlementResponse,
    summary="Buy shares of a player",
)
async def buy_player(
    data: TradeRequest,
    account: Account = Depends(get_current_account),
    engine: TradeEngine = Depends(get_trade_engine),
) -> SettlementResponse:
    """Buy shares at the current market-maker price.

    The order fills in full or not at all.

    - **player_id**: Player to buy
    - **quantity**: Number of shares (default: 1)
    """
    return await _settle(engine, account, TradeSide.BUY, data)


@router.post(
    "/rpc/sell_player",
    response_model=SettlementResponse,
    summary="Sell shares of a player",
)
async def sell_player(
    data: TradeRequest,
    account: Account = Depends(get_current_account),
    engine: TradeEngine = Depends(get_trade_engine),
) -> SettlementResponse:
    """Sell shares at the current market-maker price.

    Selling every share closes the position.

    - **player_id**: Player to sell
    - **quantity**: Number of shares (default: 1)
    """
    return await _settle(engine, account, TradeSide.SELL, data)
