"""Trade engine - validates and settles buy and sell orders.

Every order fills in full against the single market-maker price supplied
by the pricing oracle, or is rejected with no effect at all:
1. BUY is rejected unless cash covers quantity * price (no partial fills)
2. SELL is rejected unless the account holds at least `quantity` shares
3. BUY updates the holding's average cost by volume weighting
4. SELL leaves the average cost of the remaining shares unchanged
5. A holding that reaches zero shares is deleted
6. Every settled trade appends exactly one transaction record

Concurrency: trades by the same account are serialized in-process by a
per-account lock, and across processes by the account's optimistic
version stamp. A version conflict is retried with a fresh read a bounded
number of times. Trades by different accounts never wait on each other.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from buylow import telemetry
from buylow.config import TRADE_MAX_ATTEMPTS, TRADE_TIMEOUT_SECONDS
from buylow.database import AsyncSessionLocal
from buylow.errors import (
    AccountNotFound,
    ConcurrentModification,
    InstrumentNotFound,
    InsufficientFunds,
    InsufficientShares,
    InvalidQuantity,
    PriceUnavailable,
    TradeError,
    TradeTimeout,
)
from buylow.models import Account, Holding, TradeSide
from buylow.money import to_money
from buylow.services.ledger import LedgerStore, TradeMutation
from buylow.services.pricing import DatabasePriceOracle, PriceOracle
from buylow.services.settlement import SettlementResult

logger = logging.getLogger(__name__)

# Sentinel so that an explicit timeout=None can mean "no deadline"
_DEFAULT = object()


@dataclass(frozen=True)
class TradeIntent:
    """A request to buy or sell a number of shares of one player."""

    account_id: str
    player_id: str
    side: TradeSide
    quantity: int


def validate_quantity(quantity) -> int:
    """Accept only positive integers (bool is not a quantity)."""
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidQuantity(quantity)
    if quantity <= 0:
        raise InvalidQuantity(quantity)
    return quantity


def plan_buy(
    account: Account,
    player_id: str,
    holding: Holding | None,
    price: Decimal,
    quantity: int,
) -> TradeMutation:
    """Compute the effects of buying `quantity` shares at `price`.

    Raises:
        InsufficientFunds: If the total cost exceeds the cash balance
    """
    total_cost = to_money(price * quantity)
    if total_cost > account.cash_balance:
        raise InsufficientFunds(account.cash_balance, total_cost)

    if holding is None:
        new_quantity = quantity
        avg_price = price
    else:
        new_quantity = holding.quantity + quantity
        # Full precision first, rounded to cents for storage
        weighted = holding.quantity * holding.avg_purchase_price + quantity * price
        avg_price = to_money(weighted / new_quantity)

    return TradeMutation(
        account_id=account.id,
        player_id=player_id,
        side=TradeSide.BUY,
        quantity=quantity,
        price_per_share=price,
        total_price=total_cost,
        cash_delta=-total_cost,
        holding_quantity=new_quantity,
        avg_purchase_price=avg_price,
    )


def plan_sell(
    account: Account,
    player_id: str,
    holding: Holding | None,
    price: Decimal,
    quantity: int,
) -> TradeMutation:
    """Compute the effects of selling `quantity` shares at `price`.

    Raises:
        InsufficientShares: If the account holds fewer than `quantity` shares
    """
    owned = holding.quantity if holding is not None else 0
    if quantity > owned:
        raise InsufficientShares(owned, quantity)

    proceeds = to_money(price * quantity)
    remaining = owned - quantity

    return TradeMutation(
        account_id=account.id,
        player_id=player_id,
        side=TradeSide.SELL,
        quantity=quantity,
        price_per_share=price,
        total_price=proceeds,
        cash_delta=proceeds,
        holding_quantity=remaining,
        avg_purchase_price=holding.avg_purchase_price if remaining else None,
    )


class AccountLocks:
    """Registry of per-account locks.

    Entries exist only while someone holds or waits for the lock, so the
    registry does not grow with the number of accounts ever traded.
    """

    def __init__(self):
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, account_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(account_id, asyncio.Lock())
        self._users[account_id] = self._users.get(account_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[account_id] -= 1
            if self._users[account_id] == 0:
                del self._users[account_id]
                del self._locks[account_id]

    def __contains__(self, account_id: str) -> bool:
        return account_id in self._locks


class TradeEngine:
    """Executes trade intents against the ledger and a pricing oracle."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        price_oracle: PriceOracle,
        max_attempts: int = TRADE_MAX_ATTEMPTS,
        timeout: float | None = TRADE_TIMEOUT_SECONDS,
    ):
        self.session_factory = session_factory
        self.price_oracle = price_oracle
        self.max_attempts = max(1, max_attempts)
        self.timeout = timeout
        self.locks = AccountLocks()

    async def buy(
        self, account_id: str, player_id: str, quantity: int, *, timeout=_DEFAULT
    ) -> SettlementResult:
        """Buy `quantity` shares of a player at the current price."""
        intent = TradeIntent(account_id, player_id, TradeSide.BUY, quantity)
        return await self.execute(intent, timeout=timeout)

    async def sell(
        self, account_id: str, player_id: str, quantity: int, *, timeout=_DEFAULT
    ) -> SettlementResult:
        """Sell `quantity` shares of a player at the current price."""
        intent = TradeIntent(account_id, player_id, TradeSide.SELL, quantity)
        return await self.execute(intent, timeout=timeout)

    async def execute(self, intent: TradeIntent, *, timeout=_DEFAULT) -> SettlementResult:
        """Validate and settle a trade intent.

        Args:
            intent: What to trade
            timeout: Seconds until the trade must reach its commit point;
                defaults to the engine's timeout, None disables it

        Returns:
            The settlement result

        Raises:
            TradeError: Any rejection; the ledger is left unchanged
        """
        limit = self.timeout if timeout is _DEFAULT else timeout
        side = intent.side.value

        try:
            validate_quantity(intent.quantity)
            try:
                async with asyncio.timeout(limit) as deadline:
                    async with self.locks.hold(intent.account_id):
                        result = await self._execute_with_retry(intent, deadline)
            except TimeoutError:
                raise TradeTimeout(limit) from None
        except TradeError as e:
            telemetry.record_trade_rejected(side, e.code)
            logger.warning(
                "Trade rejected",
                extra={
                    "account_id": intent.account_id,
                    "player_id": intent.player_id,
                    "side": side,
                    "quantity": intent.quantity,
                    "reason": e.code,
                },
            )
            raise

        telemetry.record_trade(side, result.quantity, result.total)
        logger.info(
            "Trade settled",
            extra={
                "account_id": intent.account_id,
                "player_id": intent.player_id,
                "side": side,
                "quantity": result.quantity,
                "price": float(result.price_per_share),
                "total": float(result.total),
            },
        )
        return result

    async def _execute_with_retry(
        self, intent: TradeIntent, deadline: asyncio.Timeout
    ) -> SettlementResult:
        for attempt in range(1, self.max_attempts + 1):
            try:
                return await self._attempt(intent, deadline)
            except StaleDataError:
                telemetry.record_trade_retry(intent.side.value)
                logger.info(
                    "Account modified concurrently, retrying trade",
                    extra={
                        "account_id": intent.account_id,
                        "attempt": attempt,
                        "max_attempts": self.max_attempts,
                    },
                )

        raise ConcurrentModification(intent.account_id, self.max_attempts)

    async def _attempt(
        self, intent: TradeIntent, deadline: asyncio.Timeout
    ) -> SettlementResult:
        """One read-validate-write pass in a fresh session.

        Leaving the session without committing rolls everything back.
        """
        async with self.session_factory() as session:
            ledger = LedgerStore(session)

            account = await ledger.get_account(intent.account_id)
            if account is None:
                raise AccountNotFound(intent.account_id)

            player = await ledger.get_player(intent.player_id)
            if player is None:
                raise InstrumentNotFound(intent.player_id)

            holding = await ledger.get_holding(intent.account_id, intent.player_id)

            # Shares are checked before asking for a price
            if intent.side == TradeSide.SELL:
                owned = holding.quantity if holding is not None else 0
                if intent.quantity > owned:
                    raise InsufficientShares(owned, intent.quantity)

            price = await self._fetch_price(intent.player_id)

            if intent.side == TradeSide.BUY:
                mutation = plan_buy(account, player.id, holding, price, intent.quantity)
            else:
                mutation = plan_sell(account, player.id, holding, price, intent.quantity)

            transaction = await ledger.apply_trade(mutation, deadline)

            return SettlementResult(
                price_per_share=transaction.price_per_share,
                quantity=transaction.quantity,
                total=transaction.total_price,
                cash_remaining=to_money(account.cash_balance),
            )

    async def _fetch_price(self, player_id: str) -> Decimal:
        try:
            price = await self.price_oracle.get_current_price(player_id)
        except TradeError:
            raise
        except Exception as e:
            raise PriceUnavailable(player_id, str(e) or type(e).__name__) from e

        if price is None:
            raise PriceUnavailable(player_id)
        price = to_money(price)
        if price <= 0:
            raise PriceUnavailable(player_id, f"non-positive price {price}")
        return price


_default_engine: TradeEngine | None = None


def get_trade_engine() -> TradeEngine:
    """Dependency that provides the process-wide trade engine.

    A single instance is shared so that every request uses the same
    per-account lock registry.
    """
    global _default_engine
    if _default_engine is None:
        _default_engine = TradeEngine(
            AsyncSessionLocal, DatabasePriceOracle(AsyncSessionLocal)
        )
    return _default_engine
