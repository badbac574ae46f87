"""Leaderboard read model.

Total value is cash plus every holding valued at the player's current
price. Accounts are ranked by total value with standard competition
ranking: equal values share a rank and the next distinct value skips
ahead (1, 2, 2, 4).

All account, holding and price data for the board is read with one
SELECT, so a trade committing concurrently is seen either completely or
not at all.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, UTC
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from buylow.models import Account, Holding, Player, Transaction
from buylow.money import to_money
from buylow.services.portfolio import percent_of


@dataclass(frozen=True)
class LeaderboardEntry:
    rank: int
    account_id: str
    team_name: str
    cash_balance: Decimal
    holdings_value: Decimal
    total_value: Decimal
    change_from_start: Decimal
    change_pct: Decimal


@dataclass(frozen=True)
class MostOwned:
    player_id: str
    name: str
    owner_count: int


@dataclass(frozen=True)
class LeaderboardStats:
    total_users: int
    avg_portfolio_value: Decimal
    trades_today: int
    most_owned_player: MostOwned | None


def assign_competition_ranks(values: Sequence[Decimal]) -> list[int]:
    """Rank values already sorted in descending order.

    >>> assign_competition_ranks([300, 200, 200, 100])
    [1, 2, 2, 4]
    """
    ranks = []
    for position, value in enumerate(values, start=1):
        if position > 1 and value == values[position - 2]:
            ranks.append(ranks[-1])
        else:
            ranks.append(position)
    return ranks


def build_leaderboard(rows: Iterable[tuple]) -> list[LeaderboardEntry]:
    """Aggregate joined rows into ranked entries.

    Each row is (account_id, team_name, cash_balance, starting_cash,
    quantity, current_price); quantity and price are None for an account
    without holdings.
    """
    accounts: dict[str, dict] = {}
    for account_id, team_name, cash, starting, quantity, price in rows:
        totals = accounts.setdefault(
            account_id,
            {
                "team_name": team_name,
                "cash": to_money(cash),
                "starting": to_money(starting),
                "holdings": Decimal("0.00"),
            },
        )
        if quantity is not None and price is not None:
            totals["holdings"] += to_money(to_money(price) * quantity)

    ordered = sorted(
        accounts.items(),
        key=lambda item: (
            -(item[1]["cash"] + item[1]["holdings"]),
            item[1]["team_name"],
            item[0],
        ),
    )
    totals_desc = [t["cash"] + t["holdings"] for _, t in ordered]
    ranks = assign_competition_ranks(totals_desc)

    entries = []
    for rank, (account_id, totals), total_value in zip(ranks, ordered, totals_desc):
        change = total_value - totals["starting"]
        entries.append(
            LeaderboardEntry(
                rank=rank,
                account_id=account_id,
                team_name=totals["team_name"],
                cash_balance=totals["cash"],
                holdings_value=totals["holdings"],
                total_value=total_value,
                change_from_start=change,
                change_pct=percent_of(change, totals["starting"]),
            )
        )
    return entries


async def get_leaderboard(
    session: AsyncSession, limit: int | None = None
) -> list[LeaderboardEntry]:
    """Rank every account by total portfolio value.

    Args:
        session: Database session
        limit: Return only the top entries (optional)

    Returns:
        Ranked entries, best first
    """
    result = await session.execute(
        select(
            Account.id,
            Account.team_name,
            Account.cash_balance,
            Account.starting_cash,
            Holding.quantity,
            Player.current_price,
        )
        .outerjoin(Holding, Holding.account_id == Account.id)
        .outerjoin(Player, Player.id == Holding.player_id)
    )
    entries = build_leaderboard(result.all())
    if limit is not None:
        entries = entries[:limit]
    return entries


async def get_leaderboard_stats(session: AsyncSession) -> LeaderboardStats:
    """Aggregate figures for the leaderboard header."""
    entries = await get_leaderboard(session)
    total_users = len(entries)
    if total_users:
        avg_value = to_money(sum(e.total_value for e in entries) / total_users)
    else:
        avg_value = Decimal("0.00")

    # created_at is stored as naive UTC
    midnight = datetime.now(UTC).replace(
        hour=0, minute=0, second=0, microsecond=0, tzinfo=None
    )
    trades_today = await session.scalar(
        select(func.count(Transaction.id)).where(Transaction.created_at >= midnight)
    )

    owners = func.count(func.distinct(Holding.account_id))
    result = await session.execute(
        select(Player.id, Player.name, owners.label("owner_count"))
        .join(Holding, Holding.player_id == Player.id)
        .group_by(Player.id, Player.name)
        .order_by(owners.desc(), Player.name)
        .limit(1)
    )
    row = result.first()
    most_owned = MostOwned(row.id, row.name, row.owner_count) if row else None

    return LeaderboardStats(
        total_users=total_users,
        avg_portfolio_value=avg_value,
        trades_today=trades_today or 0,
        most_owned_player=most_owned,
    )
