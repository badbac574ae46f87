"""
Account model - a fantasy team owner's cash position.

Accounts are created once at onboarding with a fixed starting balance:
- Cash balance cannot go negative (no margin/credit)
- Only the trade engine changes the balance after creation
- Every write bumps `version_id`, which is what detects concurrent writers
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from buylow.database import Base


class Account(Base):
    """A player of the game, identified by the external user id."""

    __tablename__ = "accounts"

    # Primary key: opaque user identifier
    id: Mapped[str] = mapped_column(String, primary_key=True)

    # Leaderboard display name
    team_name: Mapped[str] = mapped_column(String(100), nullable=False)

    # API key hash for authentication (SHA-256 hash of the API key)
    api_key_hash: Mapped[str] = mapped_column(String(64), nullable=False)

    # Available cash for trading
    cash_balance: Mapped[Decimal] = mapped_column(
        Numeric(15, 2), nullable=False, default=Decimal("0.00")
    )

    # Capital credited at onboarding, the baseline for audits and P/L
    starting_cash: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)

    # Optimistic lock version, managed by SQLAlchemy
    version_id: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )

    # Relationships
    holdings: Mapped[list["Holding"]] = relationship(back_populates="account")
    transactions: Mapped[list["Transaction"]] = relationship(back_populates="account")

    __mapper_args__ = {"version_id_col": version_id}

    # Database constraints
    __table_args__ = (
        CheckConstraint("cash_balance >= 0", name="check_cash_non_negative"),
        CheckConstraint("starting_cash >= 0", name="check_starting_cash_non_negative"),
    )

    def __repr__(self) -> str:
        return f"Account(id={self.id!r}, cash_balance={self.cash_balance})"


# Import at end to avoid circular imports
from buylow.models.holding import Holding
from buylow.models.transaction import Transaction
