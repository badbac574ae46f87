"""Admin service - onboarding and the price-update hook."""

import hashlib
import logging
import secrets
from datetime import datetime, UTC

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from buylow.models import Account, Player
from buylow.money import to_money
from buylow.schemas.admin import AccountCreate, PlayerCreate

logger = logging.getLogger(__name__)


def generate_api_key() -> str:
    """Generate a secure API key for an account.

    Returns:
        A URL-safe random string (sk_ prefix + 43 characters)
    """
    return f"sk_{secrets.token_urlsafe(32)}"


def hash_api_key(api_key: str) -> str:
    """Hash an API key for secure storage.

    Args:
        api_key: The plain API key

    Returns:
        SHA-256 hash of the API key (64 hex characters)
    """
    return hashlib.sha256(api_key.encode()).hexdigest()


async def create_account(
    session: AsyncSession, data: AccountCreate, api_key: str | None = None
) -> tuple[Account, str]:
    """Onboard a new account with its starting capital.

    Args:
        session: Database session
        data: Account creation data
        api_key: Use this key instead of generating one (scenario seeding)

    Returns:
        Tuple of (created account, API key)

    Raises:
        IntegrityError: If account_id already exists
    """
    api_key = api_key or generate_api_key()
    starting_cash = to_money(data.starting_cash)

    account = Account(
        id=data.account_id,
        team_name=data.team_name,
        api_key_hash=hash_api_key(api_key),
        cash_balance=starting_cash,
        starting_cash=starting_cash,
    )
    session.add(account)
    await session.commit()
    await session.refresh(account)

    logger.info(
        "Account created",
        extra={"account_id": account.id, "starting_cash": float(starting_cash)},
    )
    return account, api_key


async def list_accounts(session: AsyncSession) -> list[Account]:
    """Get all accounts, oldest first."""
    result = await session.execute(
        select(Account).order_by(Account.created_at, Account.id)
    )
    return list(result.scalars().all())


async def create_player(session: AsyncSession, data: PlayerCreate) -> Player:
    """List a new tradable player.

    Raises:
        IntegrityError: If player_id already exists
    """
    baseline = to_money(data.baseline_price)
    current = to_money(data.current_price) if data.current_price is not None else baseline

    player = Player(
        id=data.player_id,
        name=data.name,
        position=data.position,
        team=data.team,
        baseline_price=baseline,
        current_price=current,
    )
    session.add(player)
    await session.commit()
    await session.refresh(player)
    return player


async def list_players(session: AsyncSession) -> list[Player]:
    """Get all players ordered by id."""
    result = await session.execute(select(Player).order_by(Player.id))
    return list(result.scalars().all())


async def set_player_price(
    session: AsyncSession, player_id: str, price
) -> Player | None:
    """Set a player's current price, as the daily price job does.

    Trades already settled keep their fill price; only later trades and
    valuations see the new price.

    Returns:
        The updated player, or None if it does not exist
    """
    player = await session.get(Player, player_id)
    if player is None:
        return None

    old_price = player.current_price
    player.current_price = to_money(price)
    player.price_updated_at = datetime.now(UTC).replace(tzinfo=None)
    await session.commit()
    await session.refresh(player)

    logger.info(
        "Player price updated",
        extra={
            "player_id": player_id,
            "old_price": float(old_price),
            "new_price": float(player.current_price),
        },
    )
    return player
