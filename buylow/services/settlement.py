"""Settlement results - the outcome a caller gets back for a filled trade."""

from dataclasses import dataclass
from decimal import Decimal

from buylow.models import TradeSide
from buylow.money import format_currency, to_money


@dataclass(frozen=True)
class SettlementResult:
    """Fill details of one settled trade."""

    price_per_share: Decimal
    quantity: int
    total: Decimal
    cash_remaining: Decimal

    @classmethod
    def from_payload(cls, data: dict) -> "SettlementResult":
        """Build a result from a `buy_player`/`sell_player` JSON response."""
        return cls(
            price_per_share=to_money(data["price_per_share"]),
            quantity=int(data["quantity"]),
            total=to_money(data["total"]),
            cash_remaining=to_money(data["cash_remaining"]),
        )

    def as_dict(self) -> dict:
        return {
            "price_per_share": self.price_per_share,
            "quantity": self.quantity,
            "total": self.total,
            "cash_remaining": self.cash_remaining,
        }


def describe_settlement(side: TradeSide, player_name: str, result: SettlementResult) -> str:
    """One-line human summary for CLI output, e.g.

        Bought 4 shares of Josh Allen at $670.00 for $2,680.00 (cash remaining: $7,320.00)
    """
    verb = "Bought" if side == TradeSide.BUY else "Sold"
    noun = "share" if result.quantity == 1 else "shares"
    return (
        f"{verb} {result.quantity} {noun} of {player_name} "
        f"at {format_currency(result.price_per_share)} "
        f"for {format_currency(result.total)} "
        f"(cash remaining: {format_currency(result.cash_remaining)})"
    )
