"""Public service - query functions for public player data."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from buylow.models import Player
from buylow.money import to_money
from buylow.services.portfolio import percent_of


@dataclass
class PlayerQuote:
    """A player's current price against its baseline."""

    id: str
    name: str
    position: str
    team: str
    current_price: Decimal
    baseline_price: Decimal
    price_updated_at: datetime

    @property
    def change(self) -> Decimal:
        return self.current_price - self.baseline_price

    @property
    def change_pct(self) -> Decimal:
        return percent_of(self.change, self.baseline_price)

    @classmethod
    def from_player(cls, player: Player) -> "PlayerQuote":
        return cls(
            id=player.id,
            name=player.name,
            position=player.position,
            team=player.team,
            current_price=to_money(player.current_price),
            baseline_price=to_money(player.baseline_price),
            price_updated_at=player.price_updated_at,
        )


async def get_players(session: AsyncSession) -> list[PlayerQuote]:
    """Get all players, most expensive first.

    Args:
        session: Database session

    Returns:
        List of player quotes
    """
    result = await session.execute(
        select(Player).order_by(Player.current_price.desc(), Player.id)
    )
    return [PlayerQuote.from_player(p) for p in result.scalars().all()]


async def get_player(session: AsyncSession, player_id: str) -> PlayerQuote | None:
    """Get a single player's quote.

    Args:
        session: Database session
        player_id: Player slug

    Returns:
        Player quote or None if not found
    """
    player = await session.get(Player, player_id)
    if player is None:
        return None
    return PlayerQuote.from_player(player)
