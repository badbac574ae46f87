"""Portfolio API endpoints - requires authentication."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from buylow.auth import get_current_account
from buylow.database import get_session
from buylow.models import Account
from buylow.schemas.portfolio import (
    HoldingWithPnLResponse,
    PortfolioHoldingsResponse,
    PortfolioSummaryResponse,
)
from buylow.services import portfolio as portfolio_service

router = APIRouter()


@router.get(
    "/portfolio/summary",
    response_model=PortfolioSummaryResponse,
    summary="Get portfolio summary",
)
async def get_portfolio_summary(
    account: Account = Depends(get_current_account),
    session: AsyncSession = Depends(get_session),
) -> PortfolioSummaryResponse:
    """Get a summary of your portfolio.

    **What the numbers mean:**
    - **cash_balance**: Money available to buy players
    - **holdings_value**: What your shares are worth at current prices
    - **total_value**: Cash + holdings, the number the leaderboard ranks
    - **change_from_start**: Total value minus your starting capital
    """
    summary = await portfolio_service.get_portfolio_summary(session, account.id)

    if summary is None:
        raise HTTPException(status_code=404, detail="Account not found")

    return PortfolioSummaryResponse(
        account_id=summary.account_id,
        team_name=summary.team_name,
        cash_balance=summary.cash_balance,
        holdings_value=summary.holdings_value,
        total_value=summary.total_value,
        total_cost_basis=summary.total_cost_basis,
        unrealized_pnl=summary.unrealized_pnl,
        unrealized_pnl_percent=summary.unrealized_pnl_percent,
        starting_cash=summary.starting_cash,
        change_from_start=summary.change_from_start,
        change_pct=summary.change_pct,
    )


@router.get(
    "/portfolio/holdings",
    response_model=PortfolioHoldingsResponse,
    summary="Get holdings with P/L",
)
async def get_portfolio_holdings(
    account: Account = Depends(get_current_account),
    session: AsyncSession = Depends(get_session),
) -> PortfolioHoldingsResponse:
    """Get every position with its profit/loss at current prices."""
    holdings = await portfolio_service.get_holdings_with_pnl(session, account.id)

    return PortfolioHoldingsResponse(
        holdings=[
            HoldingWithPnLResponse(
                player_id=h.player_id,
                player_name=h.player_name,
                quantity=h.quantity,
                average_cost=h.average_cost,
                cost_basis=h.cost_basis,
                current_price=h.current_price,
                current_value=h.current_value,
                unrealized_pnl=h.unrealized_pnl,
                unrealized_pnl_percent=h.unrealized_pnl_percent,
            )
            for h in holdings
        ]
    )
