"""Pydantic schemas for public endpoints."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


# ============================================================================
# Player schemas
# ============================================================================


class PlayerPublic(BaseModel):
    """Public player info with price performance."""

    id: str
    name: str
    position: str
    team: str
    current_price: Decimal
    baseline_price: Decimal
    change: Decimal
    change_pct: Decimal
    price_updated_at: datetime


class PlayerListResponse(BaseModel):
    """Response for listing all players."""

    players: list[PlayerPublic] = Field(default_factory=list)


# ============================================================================
# Leaderboard schemas
# ============================================================================


class LeaderboardEntryResponse(BaseModel):
    """One ranked account."""

    rank: int
    account_id: str
    team_name: str
    cash_balance: Decimal
    holdings_value: Decimal
    total_value: Decimal
    change_from_start: Decimal
    change_pct: Decimal


class LeaderboardResponse(BaseModel):
    """Ranked accounts, best first."""

    entries: list[LeaderboardEntryResponse] = Field(default_factory=list)
    timestamp: datetime


class MostOwnedPlayer(BaseModel):
    player_id: str
    name: str
    owner_count: int


class LeaderboardStatsResponse(BaseModel):
    """Aggregate figures shown above the leaderboard."""

    total_users: int
    avg_portfolio_value: Decimal
    trades_today: int
    most_owned_player: MostOwnedPlayer | None = None
