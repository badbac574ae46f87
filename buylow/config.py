"""
Runtime configuration for BuyLow.

Every setting comes from the environment and falls back to a default
suitable for local development.
"""

import os
from decimal import Decimal

# Database URL, defaults to SQLite for local development
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./buylow.db")

# Set SQLALCHEMY_ECHO=1 to enable SQL logging
SQLALCHEMY_ECHO = os.getenv("SQLALCHEMY_ECHO") == "1"

# Capital credited to every account at onboarding
STARTING_CASH = Decimal(os.getenv("STARTING_CASH", "10000.00"))

# Attempts per trade before an optimistic-lock conflict is surfaced
TRADE_MAX_ATTEMPTS = max(1, int(os.getenv("TRADE_MAX_ATTEMPTS", "3")))

# Default deadline for a single trade, 0 disables it
_timeout = float(os.getenv("TRADE_TIMEOUT_SECONDS", "5"))
TRADE_TIMEOUT_SECONDS: float | None = _timeout if _timeout > 0 else None
