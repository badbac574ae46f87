"""Pricing oracles - where the trade engine gets the fill price.

An oracle answers one question: what is the current tradable price of a
player right now. The engine calls it once per trade attempt and never
holds a lock on the player while doing so.
"""

from decimal import Decimal
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from buylow.errors import PriceUnavailable
from buylow.models import Player
from buylow.money import to_money


class PriceOracle(Protocol):
    """Source of the authoritative current price for a player."""

    async def get_current_price(self, player_id: str) -> Decimal:
        """Return a positive price or raise `PriceUnavailable`."""
        ...


class DatabasePriceOracle:
    """Reads `Player.current_price` as last written by the price-update job.

    Uses its own short-lived session so the read is independent of the
    trade's ledger transaction.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get_current_price(self, player_id: str) -> Decimal:
        async with self._session_factory() as session:
            result = await session.execute(
                select(Player.current_price).where(Player.id == player_id)
            )
            price = result.scalar_one_or_none()

        if price is None:
            raise PriceUnavailable(player_id)
        return to_money(price)


class StaticPriceOracle:
    """In-memory price table.

    Used for scenario seeding (fills at historical prices) and tests.
    """

    def __init__(self, prices: dict[str, Decimal] | None = None):
        self._prices: dict[str, Decimal] = {}
        for player_id, price in (prices or {}).items():
            self.set_price(player_id, price)

    def set_price(self, player_id: str, price) -> None:
        self._prices[player_id] = to_money(price)

    def clear_price(self, player_id: str) -> None:
        self._prices.pop(player_id, None)

    async def get_current_price(self, player_id: str) -> Decimal:
        try:
            return self._prices[player_id]
        except KeyError:
            raise PriceUnavailable(player_id) from None
