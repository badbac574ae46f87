"""
Transaction model - historical record of settled trades.

Single source of truth for trading history. Transactions are append-only
(never modified or deleted) and snapshot the fill price, so later price
moves never change what a trade cost.
"""

import enum
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from buylow.database import Base


class TradeSide(enum.Enum):
    """Buy or sell."""

    BUY = "BUY"
    SELL = "SELL"


class Transaction(Base):
    """A settled buy or sell against the market-maker price."""

    __tablename__ = "transactions"

    # Auto-incrementing id gives a monotonic history order
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    account_id: Mapped[str] = mapped_column(
        String, ForeignKey("accounts.id"), nullable=False, index=True
    )
    player_id: Mapped[str] = mapped_column(
        String, ForeignKey("players.id"), nullable=False, index=True
    )

    side: Mapped[TradeSide] = mapped_column(Enum(TradeSide), nullable=False)

    # Number of shares traded
    quantity: Mapped[int] = mapped_column(BigInteger, nullable=False)

    # Fill price at execution time
    price_per_share: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    # quantity * price_per_share: cash paid (BUY) or received (SELL)
    total_price: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )

    # Relationships
    account: Mapped["Account"] = relationship(back_populates="transactions")
    player: Mapped["Player"] = relationship(back_populates="transactions")

    # Fetch created_at on insert; the record is returned after commit
    __mapper_args__ = {"eager_defaults": True}

    # Database constraints
    __table_args__ = (
        CheckConstraint("quantity > 0", name="check_transaction_quantity_positive"),
        CheckConstraint("price_per_share > 0", name="check_transaction_price_positive"),
        CheckConstraint("total_price > 0", name="check_transaction_total_positive"),
    )

    def __repr__(self) -> str:
        return (
            f"Transaction(id={self.id!r}, {self.side.value} {self.quantity} "
            f"{self.player_id} @ {self.price_per_share}, account={self.account_id!r})"
        )


# Import at end to avoid circular imports
from buylow.models.account import Account
from buylow.models.player import Player
