"""Scenario seeding - build a known ledger from a YAML file.

A scenario lists players, accounts and historical trades. Seeding
creates the players and accounts, replays every trade through the trade
engine at its historical fill price, and finally moves each player to
its current price. The resulting ledger is therefore exactly what live
trading would have produced.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, model_validator
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from buylow.config import STARTING_CASH
from buylow.models import Player, TradeSide
from buylow.schemas.admin import AccountCreate
from buylow.services import admin as admin_service
from buylow.services.pricing import StaticPriceOracle
from buylow.services.trading import TradeEngine, TradeIntent

logger = logging.getLogger(__name__)


class ScenarioPlayer(BaseModel):
    """Player definition in a scenario."""

    id: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=100)
    position: str = Field(..., min_length=1, max_length=8)
    team: str = Field(..., min_length=1, max_length=8)
    baseline_price: Decimal = Field(..., gt=0)
    current_price: Decimal | None = Field(default=None, gt=0)


class ScenarioAccount(BaseModel):
    """Account definition in a scenario."""

    id: str = Field(..., min_length=1, max_length=255)
    team_name: str = Field(..., min_length=1, max_length=100)
    starting_cash: Decimal = Field(default=STARTING_CASH, ge=0)
    api_key: str | None = Field(default=None, description="Fixed key for demos")


class ScenarioTrade(BaseModel):
    """A historical trade replayed during seeding."""

    account: str
    player: str
    side: TradeSide
    quantity: int = Field(..., gt=0)
    price: Decimal | None = Field(
        default=None, gt=0, description="Fill price, defaults to the baseline"
    )


class ScenarioConfig(BaseModel):
    """Complete scenario configuration."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(default="")
    players: list[ScenarioPlayer] = Field(default_factory=list)
    accounts: list[ScenarioAccount] = Field(default_factory=list)
    trades: list[ScenarioTrade] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_references(self) -> "ScenarioConfig":
        player_ids = {p.id for p in self.players}
        account_ids = {a.id for a in self.accounts}
        for index, trade in enumerate(self.trades, start=1):
            if trade.account not in account_ids:
                raise ValueError(f"Trade #{index} references unknown account '{trade.account}'")
            if trade.player not in player_ids:
                raise ValueError(f"Trade #{index} references unknown player '{trade.player}'")
        return self


def load_scenario(path: Path) -> ScenarioConfig:
    """Load and validate a scenario YAML file."""
    with open(path) as f:
        data = yaml.safe_load(f)

    return ScenarioConfig(**data)


@dataclass
class SeedResult:
    """What a seeding run created."""

    players: int = 0
    trades: int = 0
    api_keys: dict[str, str] = field(default_factory=dict)


async def seed_scenario(
    session_factory: async_sessionmaker[AsyncSession], config: ScenarioConfig
) -> SeedResult:
    """Create a scenario's players and accounts and replay its trades.

    Raises:
        TradeError: If a trade is rejected; earlier trades stay settled
        IntegrityError: If a player or account already exists
    """
    result = SeedResult()

    async with session_factory() as session:
        for p in config.players:
            session.add(
                Player(
                    id=p.id,
                    name=p.name,
                    position=p.position,
                    team=p.team,
                    baseline_price=p.baseline_price,
                    current_price=p.baseline_price,
                )
            )
        await session.commit()
        result.players = len(config.players)

        for a in config.accounts:
            account, api_key = await admin_service.create_account(
                session,
                AccountCreate(
                    account_id=a.id, team_name=a.team_name, starting_cash=a.starting_cash
                ),
                api_key=a.api_key,
            )
            result.api_keys[account.id] = api_key

    baselines = {p.id: p.baseline_price for p in config.players}
    oracle = StaticPriceOracle()
    engine = TradeEngine(session_factory, oracle, timeout=None)

    for trade in config.trades:
        oracle.set_price(trade.player, trade.price or baselines[trade.player])
        await engine.execute(
            TradeIntent(trade.account, trade.player, trade.side, trade.quantity)
        )
        result.trades += 1

    async with session_factory() as session:
        for p in config.players:
            if p.current_price is not None:
                await admin_service.set_player_price(session, p.id, p.current_price)

    logger.info(
        "Scenario seeded",
        extra={
            "scenario": config.name,
            "players": result.players,
            "accounts": len(result.api_keys),
            "trades": result.trades,
        },
    )
    return result
