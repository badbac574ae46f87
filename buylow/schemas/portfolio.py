"""Pydantic schemas for portfolio endpoints."""

from decimal import Decimal

from pydantic import BaseModel, Field


class HoldingWithPnLResponse(BaseModel):
    """Response schema for a holding with P/L calculations."""

    player_id: str = Field(..., description="Player identifier")
    player_name: str = Field(..., description="Player display name")
    quantity: int = Field(..., description="Number of shares owned")
    average_cost: Decimal = Field(..., description="Average cost per share")
    cost_basis: Decimal = Field(..., description="Total amount paid for shares")
    current_price: Decimal = Field(..., description="Current market-maker price")
    current_value: Decimal = Field(..., description="Current market value")
    unrealized_pnl: Decimal = Field(
        ..., description="Unrealized profit/loss (current value - cost basis)"
    )
    unrealized_pnl_percent: Decimal = Field(
        ..., description="Unrealized P/L as percentage"
    )


class PortfolioHoldingsResponse(BaseModel):
    """Response for listing holdings with P/L."""

    holdings: list[HoldingWithPnLResponse] = Field(default_factory=list)


class PortfolioSummaryResponse(BaseModel):
    """Response schema for portfolio summary."""

    account_id: str = Field(..., description="Account identifier")
    team_name: str = Field(..., description="Leaderboard name")
    cash_balance: Decimal = Field(..., description="Available cash")
    holdings_value: Decimal = Field(..., description="Total market value of holdings")
    total_value: Decimal = Field(..., description="Total portfolio value (cash + holdings)")
    total_cost_basis: Decimal = Field(..., description="Total amount invested in holdings")
    unrealized_pnl: Decimal = Field(..., description="Total unrealized profit/loss")
    unrealized_pnl_percent: Decimal = Field(
        ..., description="Total unrealized P/L as percentage"
    )
    starting_cash: Decimal = Field(..., description="Capital credited at onboarding")
    change_from_start: Decimal = Field(..., description="Total value minus starting cash")
    change_pct: Decimal = Field(..., description="Change from start as percentage")
