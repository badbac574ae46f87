"""Tests for the pricing oracles."""

from decimal import Decimal

import pytest

from buylow.errors import PriceUnavailable
from buylow.services import admin as admin_service
from buylow.services.pricing import DatabasePriceOracle, StaticPriceOracle


class TestDatabasePriceOracle:

    @pytest.mark.asyncio
    async def test_reads_current_price(self, session_factory, players):
        oracle = DatabasePriceOracle(session_factory)
        assert await oracle.get_current_price("josh-allen") == Decimal("670.00")

    @pytest.mark.asyncio
    async def test_sees_price_updates(self, session_factory, test_session, players):
        oracle = DatabasePriceOracle(session_factory)
        await admin_service.set_player_price(test_session, "josh-allen", Decimal("701.25"))

        assert await oracle.get_current_price("josh-allen") == Decimal("701.25")

    @pytest.mark.asyncio
    async def test_unknown_player(self, session_factory):
        oracle = DatabasePriceOracle(session_factory)

        with pytest.raises(PriceUnavailable) as exc_info:
            await oracle.get_current_price("nobody")
        assert exc_info.value.player_id == "nobody"


class TestStaticPriceOracle:

    @pytest.mark.asyncio
    async def test_prices_are_quantized(self):
        oracle = StaticPriceOracle({"josh-allen": "670.005"})
        assert await oracle.get_current_price("josh-allen") == Decimal("670.01")

    @pytest.mark.asyncio
    async def test_set_and_clear(self):
        oracle = StaticPriceOracle()
        oracle.set_price("saquon-barkley", 625)
        assert await oracle.get_current_price("saquon-barkley") == Decimal("625.00")

        oracle.clear_price("saquon-barkley")
        with pytest.raises(PriceUnavailable):
            await oracle.get_current_price("saquon-barkley")
