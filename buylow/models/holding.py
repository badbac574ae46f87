"""
Holding model - tracks share ownership.

Represents how many shares of each player an account owns.
Uses a composite primary key (account_id, player_id).
"""

from decimal import Decimal

from sqlalchemy import BigInteger, CheckConstraint, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from buylow.database import Base


class Holding(Base):
    """Share ownership record - links an account to shares of a player."""

    __tablename__ = "holdings"

    # Composite primary key: account + player
    account_id: Mapped[str] = mapped_column(
        String, ForeignKey("accounts.id"), primary_key=True
    )
    player_id: Mapped[str] = mapped_column(
        String, ForeignKey("players.id"), primary_key=True
    )

    # Number of shares owned (must be positive)
    # When quantity reaches 0, the row is deleted
    quantity: Mapped[int] = mapped_column(BigInteger, nullable=False)

    # Volume-weighted average price paid per share
    # Selling never changes it for the remaining shares
    avg_purchase_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    # Relationships
    account: Mapped["Account"] = relationship(back_populates="holdings")
    player: Mapped["Player"] = relationship(back_populates="holdings")

    # Database constraints
    __table_args__ = (
        CheckConstraint("quantity > 0", name="check_quantity_positive"),
        CheckConstraint("avg_purchase_price > 0", name="check_avg_price_positive"),
    )

    @property
    def cost_basis(self) -> Decimal:
        """Total amount paid for the shares still held."""
        return self.avg_purchase_price * self.quantity

    def __repr__(self) -> str:
        return (
            f"Holding(account={self.account_id!r}, player={self.player_id!r}, "
            f"quantity={self.quantity}, avg_purchase_price={self.avg_purchase_price})"
        )


# Import at end to avoid circular imports
from buylow.models.account import Account
from buylow.models.player import Player
