"""Ledger store - durable storage for accounts, holdings and transactions.

Holds no business rules. The trade engine computes a `TradeMutation` and
the ledger applies it as a single all-or-nothing database transaction, so
a concurrent reader sees either none or all of a trade's effects.
"""

import asyncio
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from buylow.models import Account, Holding, Player, Transaction, TradeSide


@dataclass(frozen=True)
class TradeMutation:
    """Everything one settled trade changes.

    `holding_quantity` is the position size after the trade; zero means
    the holding row is removed.
    """

    account_id: str
    player_id: str
    side: TradeSide
    quantity: int
    price_per_share: Decimal
    total_price: Decimal
    cash_delta: Decimal
    holding_quantity: int
    avg_purchase_price: Decimal | None


class LedgerStore:
    """Ledger operations scoped to one database session.

    The session is expected to be dedicated to a single trade attempt;
    `apply_trade` commits it.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_account(self, account_id: str) -> Account | None:
        return await self.session.get(Account, account_id)

    async def get_player(self, player_id: str) -> Player | None:
        return await self.session.get(Player, player_id)

    async def get_holding(self, account_id: str, player_id: str) -> Holding | None:
        result = await self.session.execute(
            select(Holding).where(
                and_(Holding.account_id == account_id, Holding.player_id == player_id)
            )
        )
        return result.scalar_one_or_none()

    async def apply_trade(
        self,
        mutation: TradeMutation,
        deadline: asyncio.Timeout | None = None,
    ) -> Transaction:
        """Apply a trade's cash, holding and history changes atomically.

        Changes are flushed first so that constraint violations and
        optimistic-lock conflicts surface before the commit. The optional
        deadline is disarmed right before committing: once the commit
        starts, the trade is settled regardless of the caller's timeout.

        Args:
            mutation: The computed effects of the trade
            deadline: Active `asyncio.timeout` context of the caller

        Returns:
            The appended transaction record

        Raises:
            StaleDataError: If the account was written by someone else
                since it was read
        """
        account = await self.get_account(mutation.account_id)
        account.cash_balance = account.cash_balance + mutation.cash_delta

        holding = await self.get_holding(mutation.account_id, mutation.player_id)
        if mutation.holding_quantity == 0:
            if holding is not None:
                await self.session.delete(holding)
        elif holding is None:
            self.session.add(
                Holding(
                    account_id=mutation.account_id,
                    player_id=mutation.player_id,
                    quantity=mutation.holding_quantity,
                    avg_purchase_price=mutation.avg_purchase_price,
                )
            )
        else:
            holding.quantity = mutation.holding_quantity
            holding.avg_purchase_price = mutation.avg_purchase_price

        transaction = Transaction(
            account_id=mutation.account_id,
            player_id=mutation.player_id,
            side=mutation.side,
            quantity=mutation.quantity,
            price_per_share=mutation.price_per_share,
            total_price=mutation.total_price,
        )
        self.session.add(transaction)

        await self.session.flush()

        # Commit point
        if deadline is not None:
            deadline.reschedule(None)
        await self.session.commit()

        return transaction
