"""Tests for money formatting and settlement results."""

from decimal import Decimal

import pytest

from buylow.models import TradeSide
from buylow.money import format_currency, format_percent, to_money
from buylow.services.settlement import SettlementResult, describe_settlement


@pytest.mark.parametrize(
    "value,expected",
    [
        ("686.665", Decimal("686.67")),
        ("686.664", Decimal("686.66")),
        (0.1 + 0.2, Decimal("0.30")),
        (670, Decimal("670.00")),
        (Decimal("-1.005"), Decimal("-1.01")),
    ],
)
def test_to_money(value, expected):
    assert to_money(value) == expected


@pytest.mark.parametrize(
    "value,expected",
    [
        (Decimal("2680"), "$2,680.00"),
        (Decimal("0.5"), "$0.50"),
        (Decimal("-15.5"), "-$15.50"),
    ],
)
def test_format_currency(value, expected):
    assert format_currency(value) == expected


@pytest.mark.parametrize(
    "value,expected",
    [
        (Decimal("4.25"), "+4.25%"),
        (Decimal("0"), "0.00%"),
        (Decimal("-8.5"), "-8.50%"),
    ],
)
def test_format_percent(value, expected):
    assert format_percent(value) == expected


def test_from_payload():
    result = SettlementResult.from_payload(
        {
            "price_per_share": "670.00",
            "quantity": 4,
            "total": "2680.00",
            "cash_remaining": "7320.00",
        }
    )

    assert result == SettlementResult(
        price_per_share=Decimal("670.00"),
        quantity=4,
        total=Decimal("2680.00"),
        cash_remaining=Decimal("7320.00"),
    )
    assert result.as_dict()["total"] == Decimal("2680.00")


def test_describe_buy():
    result = SettlementResult(
        Decimal("670.00"), 4, Decimal("2680.00"), Decimal("7320.00")
    )
    assert describe_settlement(TradeSide.BUY, "Josh Allen", result) == (
        "Bought 4 shares of Josh Allen at $670.00 for $2,680.00 "
        "(cash remaining: $7,320.00)"
    )


def test_describe_single_share_sell():
    result = SettlementResult(
        Decimal("720.00"), 1, Decimal("720.00"), Decimal("8040.00")
    )
    assert describe_settlement(TradeSide.SELL, "Josh Allen", result).startswith(
        "Sold 1 share of Josh Allen at $720.00"
    )
