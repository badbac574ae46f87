"""Pydantic schemas for request/response validation."""

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
from buylow.schemas.portfolio import (
    HoldingWithPnLResponse,
    PortfolioHoldingsResponse,
    PortfolioSummaryResponse,
)
from buylow.schemas.public import (
    LeaderboardEntryResponse,
    LeaderboardResponse,
    LeaderboardStatsResponse,
    MostOwnedPlayer,
    PlayerListResponse,
    PlayerPublic,
)
from buylow.schemas.trader import (
    AccountInfoResponse,
    HoldingResponse,
    HoldingsListResponse,
    SettlementResponse,
    TradeRequest,
    TradeSide,
    TransactionListResponse,
    TransactionResponse,
)

__all__ = [
    # Admin schemas
    "AccountCreate",
    "AccountResponse",
    "AccountListItem",
    "PlayerCreate",
    "PlayerPriceUpdate",
    "PlayerResponse",
    "AuditCheckResponse",
    "AuditResponse",
    # Portfolio schemas
    "HoldingWithPnLResponse",
    "PortfolioHoldingsResponse",
    "PortfolioSummaryResponse",
    # Public schemas
    "PlayerPublic",
    "PlayerListResponse",
    "LeaderboardEntryResponse",
    "LeaderboardResponse",
    "LeaderboardStatsResponse",
    "MostOwnedPlayer",
    # Trader schemas
    "TradeRequest",
    "TradeSide",
    "SettlementResponse",
    "AccountInfoResponse",
    "HoldingResponse",
    "HoldingsListResponse",
    "TransactionResponse",
    "TransactionListResponse",
]
