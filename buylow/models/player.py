"""
Player model - a tradable instrument.

The current price is owned by the price-update job; the trade engine
only ever reads it.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from buylow.database import Base


class Player(Base):
    """An NFL player whose shares can be bought and sold."""

    __tablename__ = "players"

    # Primary key: slug such as "josh-allen"
    id: Mapped[str] = mapped_column(String, primary_key=True)

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    position: Mapped[str] = mapped_column(String(8), nullable=False)
    team: Mapped[str] = mapped_column(String(8), nullable=False)

    # Authoritative trading price
    current_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    # Reference price for performance display
    baseline_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    price_updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )

    # Relationships
    holdings: Mapped[list["Holding"]] = relationship(back_populates="player")
    transactions: Mapped[list["Transaction"]] = relationship(back_populates="player")

    # Database constraints
    __table_args__ = (
        CheckConstraint("current_price > 0", name="check_current_price_positive"),
        CheckConstraint("baseline_price > 0", name="check_baseline_price_positive"),
    )

    def __repr__(self) -> str:
        return f"Player(id={self.id!r}, name={self.name!r}, current_price={self.current_price})"


# Import at end to avoid circular imports
from buylow.models.holding import Holding
from buylow.models.transaction import Transaction
