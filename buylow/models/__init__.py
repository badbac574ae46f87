"""
SQLAlchemy models for BuyLow.

This module exports all models and the Base class for easy imports:
    from buylow.models import Base, Account, Player, Holding, Transaction
"""

from buylow.database import Base
from buylow.models.player import Player
from buylow.models.account import Account
from buylow.models.holding import Holding
from buylow.models.transaction import Transaction, TradeSide

__all__ = [
    "Base",
    "Player",
    "Account",
    "Holding",
    "Transaction",
    "TradeSide",
]
