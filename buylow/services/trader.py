"""Trader service - read-side queries for a trader's own account."""

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from buylow.models import Holding, Transaction


async def get_account_holdings(session: AsyncSession, account_id: str) -> list[Holding]:
    """Get all holdings for an account.

    Args:
        session: Database session
        account_id: Account ID

    Returns:
        List of holdings ordered by player id
    """
    result = await session.execute(
        select(Holding)
        .where(Holding.account_id == account_id)
        .order_by(Holding.player_id)
    )
    return list(result.scalars().all())


async def get_holding(
    session: AsyncSession, account_id: str, player_id: str
) -> Holding | None:
    """Get a specific holding for an account.

    Returns:
        Holding or None if the account owns no shares of the player
    """
    result = await session.execute(
        select(Holding).where(
            and_(Holding.account_id == account_id, Holding.player_id == player_id)
        )
    )
    return result.scalar_one_or_none()


async def get_account_transactions(
    session: AsyncSession,
    account_id: str,
    player_id: str | None = None,
    limit: int | None = None,
) -> list[Transaction]:
    """Get an account's settled trades, newest first.

    Args:
        session: Database session
        account_id: Account ID
        player_id: Filter by player (optional)
        limit: Maximum number of records (optional)

    Returns:
        List of transactions
    """
    query = select(Transaction).where(Transaction.account_id == account_id)

    if player_id:
        query = query.where(Transaction.player_id == player_id)

    query = query.order_by(Transaction.id.desc())
    if limit is not None:
        query = query.limit(limit)

    result = await session.execute(query)
    return list(result.scalars().all())
