"""Public API endpoints - no authentication required."""

from datetime import datetime, UTC

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from buylow.database import get_session
from buylow.schemas.public import (
    LeaderboardEntryResponse,
    LeaderboardResponse,
    LeaderboardStatsResponse,
    MostOwnedPlayer,
    PlayerListResponse,
    PlayerPublic,
)
from buylow.services import leaderboard as leaderboard_service
from buylow.services import public as public_service
from buylow.services.public import PlayerQuote

router = APIRouter()


def _player_public(quote: PlayerQuote) -> PlayerPublic:
    return PlayerPublic(
        id=quote.id,
        name=quote.name,
        position=quote.position,
        team=quote.team,
        current_price=quote.current_price,
        baseline_price=quote.baseline_price,
        change=quote.change,
        change_pct=quote.change_pct,
        price_updated_at=quote.price_updated_at,
    )


# ============================================================================
# Player endpoints
# ============================================================================


@router.get(
    "/players",
    response_model=PlayerListResponse,
    summary="List all players",
)
async def list_players(
    session: AsyncSession = Depends(get_session),
) -> PlayerListResponse:
    """Get every tradable player with its price change since baseline."""
    players = await public_service.get_players(session)
    return PlayerListResponse(players=[_player_public(p) for p in players])


@router.get(
    "/players/{player_id}",
    response_model=PlayerPublic,
    summary="Get player details",
)
async def get_player(
    player_id: str,
    session: AsyncSession = Depends(get_session),
) -> PlayerPublic:
    """Get one player's current price and change since baseline."""
    player = await public_service.get_player(session, player_id)
    if not player:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Player '{player_id}' not found",
        )
    return _player_public(player)


# ============================================================================
# Leaderboard endpoints
# ============================================================================


@router.get(
    "/leaderboard",
    response_model=LeaderboardResponse,
    summary="Get the leaderboard",
)
async def get_leaderboard(
    limit: int | None = Query(default=None, ge=1, le=1000, description="Top N entries"),
    session: AsyncSession = Depends(get_session),
) -> LeaderboardResponse:
    """Rank accounts by total portfolio value (cash + holdings at current prices).

    Ties share a rank and the next rank is skipped (1, 2, 2, 4).
    """
    entries = await leaderboard_service.get_leaderboard(session, limit=limit)
    return LeaderboardResponse(
        entries=[
            LeaderboardEntryResponse(
                rank=e.rank,
                account_id=e.account_id,
                team_name=e.team_name,
                cash_balance=e.cash_balance,
                holdings_value=e.holdings_value,
                total_value=e.total_value,
                change_from_start=e.change_from_start,
                change_pct=e.change_pct,
            )
            for e in entries
        ],
        timestamp=datetime.now(UTC),
    )


@router.get(
    "/leaderboard/stats",
    response_model=LeaderboardStatsResponse,
    summary="Get leaderboard statistics",
)
async def get_leaderboard_stats(
    session: AsyncSession = Depends(get_session),
) -> LeaderboardStatsResponse:
    """Total users, average portfolio value, trades today and most-owned player."""
    stats = await leaderboard_service.get_leaderboard_stats(session)
    most_owned = None
    if stats.most_owned_player is not None:
        most_owned = MostOwnedPlayer(
            player_id=stats.most_owned_player.player_id,
            name=stats.most_owned_player.name,
            owner_count=stats.most_owned_player.owner_count,
        )
    return LeaderboardStatsResponse(
        total_users=stats.total_users,
        avg_portfolio_value=stats.avg_portfolio_value,
        trades_today=stats.trades_today,
        most_owned_player=most_owned,
    )
