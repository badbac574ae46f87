"""Portfolio service - P/L calculations and portfolio analytics."""

from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from buylow import telemetry
from buylow.models import Account, Holding, Player
from buylow.money import to_money


def percent_of(amount: Decimal, base: Decimal) -> Decimal:
    """`amount` as a percentage of `base`, zero when there is no base."""
    if base <= 0:
        return Decimal("0.00")
    return to_money(amount / base * 100)


@dataclass
class HoldingWithPnL:
    """A holding with current value and profit/loss calculations."""

    player_id: str
    player_name: str
    quantity: int
    average_cost: Decimal
    current_price: Decimal

    @property
    def cost_basis(self) -> Decimal:
        return to_money(self.average_cost * self.quantity)

    @property
    def current_value(self) -> Decimal:
        return to_money(self.current_price * self.quantity)

    @property
    def unrealized_pnl(self) -> Decimal:
        return self.current_value - self.cost_basis

    @property
    def unrealized_pnl_percent(self) -> Decimal:
        return percent_of(self.unrealized_pnl, self.cost_basis)


@dataclass
class PortfolioSummary:
    """Summary of an account's portfolio."""

    account_id: str
    team_name: str
    cash_balance: Decimal
    starting_cash: Decimal
    holdings_value: Decimal
    total_cost_basis: Decimal

    @property
    def total_value(self) -> Decimal:
        return self.cash_balance + self.holdings_value

    @property
    def unrealized_pnl(self) -> Decimal:
        return self.holdings_value - self.total_cost_basis

    @property
    def unrealized_pnl_percent(self) -> Decimal:
        return percent_of(self.unrealized_pnl, self.total_cost_basis)

    @property
    def change_from_start(self) -> Decimal:
        return self.total_value - self.starting_cash

    @property
    def change_pct(self) -> Decimal:
        return percent_of(self.change_from_start, self.starting_cash)


async def get_holdings_with_pnl(
    session: AsyncSession, account_id: str
) -> list[HoldingWithPnL]:
    """Get all holdings for an account valued at the current price.

    Args:
        session: Database session
        account_id: Account ID

    Returns:
        List of holdings with current values and unrealized P/L
    """
    result = await session.execute(
        select(Holding, Player)
        .join(Player, Player.id == Holding.player_id)
        .where(Holding.account_id == account_id)
        .order_by(Holding.player_id)
    )

    return [
        HoldingWithPnL(
            player_id=holding.player_id,
            player_name=player.name,
            quantity=holding.quantity,
            average_cost=to_money(holding.avg_purchase_price),
            current_price=to_money(player.current_price),
        )
        for holding, player in result.all()
    ]


async def get_portfolio_summary(
    session: AsyncSession, account_id: str
) -> PortfolioSummary | None:
    """Get portfolio summary for an account.

    Args:
        session: Database session
        account_id: Account ID

    Returns:
        Portfolio summary or None if account not found
    """
    account = await session.get(Account, account_id)
    if account is None:
        return None

    holdings = await get_holdings_with_pnl(session, account_id)

    summary = PortfolioSummary(
        account_id=account.id,
        team_name=account.team_name,
        cash_balance=to_money(account.cash_balance),
        starting_cash=to_money(account.starting_cash),
        holdings_value=sum((h.current_value for h in holdings), Decimal("0.00")),
        total_cost_basis=sum((h.cost_basis for h in holdings), Decimal("0.00")),
    )

    telemetry.record_portfolio_value(
        account.id, float(summary.total_value), float(summary.unrealized_pnl)
    )
    return summary
