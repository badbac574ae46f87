"""Pydantic schemas for admin endpoints."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from buylow.config import STARTING_CASH


class AccountCreate(BaseModel):
    """Request schema for onboarding an account."""

    account_id: str = Field(..., min_length=1, max_length=255, description="Unique account ID")
    team_name: str = Field(..., min_length=1, max_length=100, description="Leaderboard name")
    starting_cash: Decimal = Field(
        default=STARTING_CASH,
        ge=0,
        decimal_places=2,
        description="Capital credited at onboarding",
    )


class AccountResponse(BaseModel):
    """Response schema for newly created account (includes API key)."""

    account_id: str
    team_name: str
    cash_balance: Decimal
    starting_cash: Decimal
    api_key: str
    created_at: datetime


class AccountListItem(BaseModel):
    """Response schema for account in list view."""

    account_id: str
    team_name: str
    cash_balance: Decimal
    starting_cash: Decimal
    created_at: datetime


class PlayerCreate(BaseModel):
    """Request schema for listing a new player."""

    player_id: str = Field(..., min_length=1, max_length=100, description="Slug, e.g. josh-allen")
    name: str = Field(..., min_length=1, max_length=100)
    position: str = Field(..., min_length=1, max_length=8)
    team: str = Field(..., min_length=1, max_length=8)
    baseline_price: Decimal = Field(..., gt=0, decimal_places=2)
    current_price: Decimal | None = Field(
        default=None,
        gt=0,
        decimal_places=2,
        description="Defaults to the baseline price",
    )


class PlayerPriceUpdate(BaseModel):
    """Request schema for the price-update job."""

    current_price: Decimal = Field(..., gt=0, decimal_places=2)


class PlayerResponse(BaseModel):
    """Response schema for player data (admin view)."""

    id: str
    name: str
    position: str
    team: str
    current_price: Decimal
    baseline_price: Decimal
    price_updated_at: datetime

    model_config = {"from_attributes": True}


class AuditCheckResponse(BaseModel):
    """One named consistency check."""

    name: str
    passed: bool
    details: list[str] = Field(default_factory=list)


class AuditResponse(BaseModel):
    """Consistency report over the whole ledger."""

    passed: bool
    checks: list[AuditCheckResponse] = Field(default_factory=list)
