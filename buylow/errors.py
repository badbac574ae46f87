"""
Trade failure taxonomy.

Every failure is terminal for a single trade attempt and leaves the
account, its holdings and the transaction history untouched. Messages are
human-readable and surfaced verbatim to API callers.
"""

from decimal import Decimal


class TradeError(Exception):
    """Base class for all trade rejections."""

    code = "TRADE_ERROR"
    status_code = 400


class InvalidQuantity(TradeError):
    """Quantity is zero, negative or not a whole number of shares."""

    code = "INVALID_QUANTITY"

    def __init__(self, quantity):
        self.quantity = quantity
        if isinstance(quantity, int) and not isinstance(quantity, bool):
            message = f"Quantity must be positive, got {quantity}"
        else:
            message = f"Quantity must be a whole number of shares, got {quantity!r}"
        super().__init__(message)


class AccountNotFound(TradeError):
    code = "ACCOUNT_NOT_FOUND"
    status_code = 404

    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__(f"Account '{account_id}' not found")


class InstrumentNotFound(TradeError):
    code = "INSTRUMENT_NOT_FOUND"
    status_code = 404

    def __init__(self, player_id: str):
        self.player_id = player_id
        super().__init__(f"Player '{player_id}' not found")


class InsufficientFunds(TradeError):
    code = "INSUFFICIENT_FUNDS"

    def __init__(self, available: Decimal, required: Decimal):
        self.available = available
        self.required = required
        super().__init__(
            f"Insufficient funds: have {available:.2f} available, need {required:.2f}"
        )


class InsufficientShares(TradeError):
    code = "INSUFFICIENT_SHARES"

    def __init__(self, available: int, requested: int):
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient shares: have {available} available, need {requested}"
        )


class PriceUnavailable(TradeError):
    code = "PRICE_UNAVAILABLE"
    status_code = 503

    def __init__(self, player_id: str, reason: str = "no current price"):
        self.player_id = player_id
        super().__init__(f"Price unavailable for player '{player_id}': {reason}")


class ConcurrentModification(TradeError):
    """Optimistic-lock retries were exhausted."""

    code = "CONCURRENT_MODIFICATION"
    status_code = 409

    def __init__(self, account_id: str, attempts: int):
        self.account_id = account_id
        self.attempts = attempts
        super().__init__(
            f"Account '{account_id}' was modified concurrently; "
            f"gave up after {attempts} attempts, please retry"
        )


class TradeTimeout(TradeError, TimeoutError):
    """The trade did not reach its commit point before the deadline."""

    code = "TRADE_TIMEOUT"
    status_code = 504

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"Trade timed out after {timeout:g}s; no changes were made")
