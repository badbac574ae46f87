"""
Shared pytest fixtures for testing BuyLow.

Uses an in-memory SQLite database for fast, isolated tests, and a
file-backed SQLite database for tests that run trades concurrently.
"""

from dataclasses import dataclass
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from buylow.database import Base, get_session
from buylow.main import app
from buylow.models import Account, Holding, Player, Transaction
from buylow.services.admin import generate_api_key, hash_api_key
from buylow.services.pricing import DatabasePriceOracle, StaticPriceOracle
from buylow.services.trading import TradeEngine, get_trade_engine


# Use in-memory SQLite for tests (fast, isolated)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture(scope="session")
def anyio_backend():
    """Use asyncio backend for pytest-asyncio."""
    return "asyncio"


@pytest_asyncio.fixture
async def test_engine():
    """Create a test database engine.

    Creates tables at the start, drops them at the end.
    Each test gets a fresh database.
    """
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    """Session factory bound to the in-memory test database."""
    return async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture
async def test_session(session_factory):
    """Provide a database session for a test.

    Rolls back the session after each test for isolation.
    """
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def file_engine(tmp_path):
    """File-backed database where every session gets its own connection.

    Needed when trades run concurrently: the in-memory database shares a
    single connection between all sessions.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'buylow.db'}",
        echo=False,
        poolclass=NullPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def file_session_factory(file_engine):
    return async_sessionmaker(
        bind=file_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
def oracle():
    """Static prices for the sample players."""
    return StaticPriceOracle(
        {"josh-allen": Decimal("670.00"), "saquon-barkley": Decimal("625.00")}
    )


@pytest.fixture
def trade_engine(session_factory, oracle):
    """Trade engine over the in-memory database and static prices."""
    return TradeEngine(session_factory, oracle)


@pytest_asyncio.fixture
async def test_client(session_factory):
    """Provide a FastAPI test client with test database.

    Overrides the get_session dependency to use our test database, and the
    trade engine to price from the test database's players.
    """

    async def override_get_session():
        async with session_factory() as session:
            yield session

    engine = TradeEngine(session_factory, DatabasePriceOracle(session_factory))

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_trade_engine] = lambda: engine

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client

    app.dependency_overrides.clear()


# --- Helper fixtures for creating test data ---


async def add_players(session: AsyncSession) -> list[Player]:
    players = [
        Player(
            id="josh-allen",
            name="Josh Allen",
            position="QB",
            team="BUF",
            current_price=Decimal("670.00"),
            baseline_price=Decimal("650.00"),
        ),
        Player(
            id="saquon-barkley",
            name="Saquon Barkley",
            position="RB",
            team="PHI",
            current_price=Decimal("625.00"),
            baseline_price=Decimal("625.00"),
        ),
    ]
    session.add_all(players)
    await session.commit()
    return players


async def add_account(
    session: AsyncSession,
    account_id: str = "trader1",
    cash: Decimal = Decimal("10000.00"),
) -> tuple[Account, str]:
    api_key = generate_api_key()
    account = Account(
        id=account_id,
        team_name=f"Team {account_id}",
        api_key_hash=hash_api_key(api_key),
        cash_balance=cash,
        starting_cash=cash,
    )
    session.add(account)
    await session.commit()
    await session.refresh(account)
    return account, api_key


@pytest_asyncio.fixture
async def players(test_session):
    """Josh Allen at 670.00 and Saquon Barkley at 625.00."""
    return await add_players(test_session)


@pytest_asyncio.fixture
async def trader_account(test_session):
    """Create an account with 10,000.00 cash; returns (account, api_key)."""
    return await add_account(test_session)


@dataclass
class LedgerState:
    cash: Decimal
    holdings: dict[str, tuple[int, Decimal]]
    transactions: int


async def read_ledger(factory, account_id: str) -> LedgerState:
    """Read an account's cash, holdings and transaction count in a fresh session."""
    async with factory() as session:
        account = await session.get(Account, account_id)
        result = await session.execute(
            select(Holding).where(Holding.account_id == account_id)
        )
        holdings = {
            h.player_id: (h.quantity, h.avg_purchase_price) for h in result.scalars()
        }
        count = await session.scalar(
            select(func.count(Transaction.id)).where(Transaction.account_id == account_id)
        )
        return LedgerState(account.cash_balance, holdings, count)


@pytest.fixture
def ledger_state(session_factory):
    """Async callable returning the current `LedgerState` of an account."""

    async def read(account_id: str = "trader1") -> LedgerState:
        return await read_ledger(session_factory, account_id)

    return read


@pytest_asyncio.fixture
async def file_accounts(file_session_factory):
    """Sample players plus accounts trader1 and trader2 in the file database."""
    async with file_session_factory() as session:
        await add_players(session)
        first = await add_account(session, "trader1")
        second = await add_account(session, "trader2")
    return first, second


@pytest.fixture
def file_ledger_state(file_session_factory):
    async def read(account_id: str = "trader1") -> LedgerState:
        return await read_ledger(file_session_factory, account_id)

    return read
