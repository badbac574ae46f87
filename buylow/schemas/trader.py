"""Pydantic schemas for trader endpoints."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class TradeSide(str, Enum):
    """Buy or sell (matching the model enum)."""

    BUY = "BUY"
    SELL = "SELL"


# ============================================================================
# Trade schemas
# ============================================================================


class TradeRequest(BaseModel):
    """Request body for `buy_player` and `sell_player`.

    Quantity is passed through unconverted and checked by the trade
    engine, so `true`, `2.0` or `"3"` are rejected with the same message
    as zero or a negative count.
    """

    player_id: str = Field(..., min_length=1, description="Player to trade")
    quantity: Any = Field(
        default=1,
        description="Number of shares",
        json_schema_extra={"type": "integer", "minimum": 1},
    )


class SettlementResponse(BaseModel):
    """Fill details of a settled trade."""

    price_per_share: Decimal
    quantity: int
    total: Decimal
    cash_remaining: Decimal


# ============================================================================
# Account schemas
# ============================================================================


class AccountInfoResponse(BaseModel):
    """Response schema for account info (trader view)."""

    account_id: str
    team_name: str
    cash_balance: Decimal
    starting_cash: Decimal
    created_at: datetime


# ============================================================================
# Holding schemas
# ============================================================================


class HoldingResponse(BaseModel):
    """Response schema for a single holding."""

    player_id: str
    quantity: int
    avg_purchase_price: Decimal

    model_config = {"from_attributes": True}


class HoldingsListResponse(BaseModel):
    """Response for listing holdings."""

    holdings: list[HoldingResponse] = Field(default_factory=list)


# ============================================================================
# Transaction schemas
# ============================================================================


class TransactionResponse(BaseModel):
    """Response schema for one settled trade."""

    id: int
    player_id: str
    side: TradeSide
    quantity: int
    price_per_share: Decimal
    total_price: Decimal
    created_at: datetime

    model_config = {"from_attributes": True}


class TransactionListResponse(BaseModel):
    """Response for listing transactions."""

    transactions: list[TransactionResponse] = Field(default_factory=list)
