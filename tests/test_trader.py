"""Tests for trader API endpoints."""

import pytest

from buylow.main import app
from buylow.services.pricing import StaticPriceOracle
from buylow.services.trading import TradeEngine, get_trade_engine


def auth(api_key: str) -> dict:
    return {"X-API-Key": api_key}


# --- Authentication Tests ---


class TestAuthentication:
    """Tests for API key authentication."""

    @pytest.mark.asyncio
    async def test_missing_api_key(self, test_client):
        """Returns 401 when API key is missing."""
        response = await test_client.get("/api/v1/account")
        assert response.status_code == 401
        assert "Missing API key" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_invalid_api_key(self, test_client):
        """Returns 401 when API key is invalid."""
        response = await test_client.get(
            "/api/v1/account",
            headers=auth("sk_invalid_key_12345"),
        )
        assert response.status_code == 401
        assert "Invalid API key" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_trade_requires_api_key(self, test_client, players):
        response = await test_client.post(
            "/api/v1/rpc/buy_player", json={"player_id": "josh-allen"}
        )
        assert response.status_code == 401


# --- Account Endpoint Tests ---


class TestAccount:
    """Tests for GET /account."""

    @pytest.mark.asyncio
    async def test_get_account(self, test_client, trader_account):
        account, api_key = trader_account
        response = await test_client.get("/api/v1/account", headers=auth(api_key))
        assert response.status_code == 200
        data = response.json()
        assert data["account_id"] == "trader1"
        assert data["team_name"] == "Team trader1"
        assert data["cash_balance"] == "10000.00"
        assert data["starting_cash"] == "10000.00"
        assert "created_at" in data


# --- Trade Endpoint Tests ---


class TestBuyPlayer:
    """Tests for POST /rpc/buy_player."""

    @pytest.mark.asyncio
    async def test_buy(self, test_client, players, trader_account):
        account, api_key = trader_account
        response = await test_client.post(
            "/api/v1/rpc/buy_player",
            headers=auth(api_key),
            json={"player_id": "josh-allen", "quantity": 4},
        )
        assert response.status_code == 200
        assert response.json() == {
            "price_per_share": "670.00",
            "quantity": 4,
            "total": "2680.00",
            "cash_remaining": "7320.00",
        }

    @pytest.mark.asyncio
    async def test_quantity_defaults_to_one(self, test_client, players, trader_account):
        account, api_key = trader_account
        response = await test_client.post(
            "/api/v1/rpc/buy_player",
            headers=auth(api_key),
            json={"player_id": "saquon-barkley"},
        )
        assert response.status_code == 200
        assert response.json()["quantity"] == 1
        assert response.json()["cash_remaining"] == "9375.00"

    @pytest.mark.asyncio
    async def test_insufficient_funds(self, test_client, players, trader_account):
        account, api_key = trader_account
        response = await test_client.post(
            "/api/v1/rpc/buy_player",
            headers=auth(api_key),
            json={"player_id": "josh-allen", "quantity": 15},
        )
        assert response.status_code == 400
        assert response.json()["detail"] == (
            "Insufficient funds: have 10000.00 available, need 10050.00"
        )

    @pytest.mark.asyncio
    @pytest.mark.parametrize("quantity", [0, -3, True, 2.0, 2.5, "3"])
    async def test_invalid_quantity(self, test_client, players, trader_account, quantity):
        account, api_key = trader_account
        response = await test_client.post(
            "/api/v1/rpc/buy_player",
            headers=auth(api_key),
            json={"player_id": "josh-allen", "quantity": quantity},
        )
        assert response.status_code == 400
        assert f"got {quantity!r}" in response.json()["detail"]

        # Rejected before settlement: nothing was bought
        response = await test_client.get("/api/v1/account", headers=auth(api_key))
        assert response.json()["cash_balance"] == "10000.00"

    @pytest.mark.asyncio
    async def test_unknown_player(self, test_client, players, trader_account):
        account, api_key = trader_account
        response = await test_client.post(
            "/api/v1/rpc/buy_player",
            headers=auth(api_key),
            json={"player_id": "tom-brady", "quantity": 1},
        )
        assert response.status_code == 404
        assert response.json()["detail"] == "Player 'tom-brady' not found"

    @pytest.mark.asyncio
    async def test_fills_at_updated_price(self, test_client, players, trader_account):
        """The price job's latest price is the fill price."""
        account, api_key = trader_account
        response = await test_client.put(
            "/admin/players/josh-allen/price", json={"current_price": "701.25"}
        )
        assert response.status_code == 200

        response = await test_client.post(
            "/api/v1/rpc/buy_player",
            headers=auth(api_key),
            json={"player_id": "josh-allen", "quantity": 2},
        )
        assert response.json()["price_per_share"] == "701.25"
        assert response.json()["total"] == "1402.50"


class TestSellPlayer:
    """Tests for POST /rpc/sell_player."""

    @pytest.mark.asyncio
    async def test_buy_then_sell(self, test_client, players, trader_account):
        """Buy 4 @ 670, price moves to 720, sell 1."""
        account, api_key = trader_account
        await test_client.post(
            "/api/v1/rpc/buy_player",
            headers=auth(api_key),
            json={"player_id": "josh-allen", "quantity": 4},
        )
        await test_client.put(
            "/admin/players/josh-allen/price", json={"current_price": "720"}
        )

        response = await test_client.post(
            "/api/v1/rpc/sell_player",
            headers=auth(api_key),
            json={"player_id": "josh-allen", "quantity": 1},
        )
        assert response.status_code == 200
        assert response.json() == {
            "price_per_share": "720.00",
            "quantity": 1,
            "total": "720.00",
            "cash_remaining": "8040.00",
        }

        response = await test_client.get("/api/v1/holdings", headers=auth(api_key))
        assert response.json()["holdings"] == [
            {"player_id": "josh-allen", "quantity": 3, "avg_purchase_price": "670.00"}
        ]

    @pytest.mark.asyncio
    async def test_sell_without_holding(self, test_client, players, trader_account):
        account, api_key = trader_account
        response = await test_client.post(
            "/api/v1/rpc/sell_player",
            headers=auth(api_key),
            json={"player_id": "josh-allen", "quantity": 1},
        )
        assert response.status_code == 400
        assert response.json()["detail"] == (
            "Insufficient shares: have 0 available, need 1"
        )


# --- Holdings and Transactions ---


class TestHistory:
    """Tests for GET /holdings and GET /transactions."""

    @pytest.mark.asyncio
    async def test_empty_holdings(self, test_client, trader_account):
        account, api_key = trader_account
        response = await test_client.get("/api/v1/holdings", headers=auth(api_key))
        assert response.status_code == 200
        assert response.json()["holdings"] == []

    @pytest.mark.asyncio
    async def test_transactions_newest_first(self, test_client, players, trader_account):
        account, api_key = trader_account
        for path, player_id, quantity in [
            ("buy_player", "josh-allen", 2),
            ("buy_player", "saquon-barkley", 1),
            ("sell_player", "josh-allen", 1),
        ]:
            response = await test_client.post(
                f"/api/v1/rpc/{path}",
                headers=auth(api_key),
                json={"player_id": player_id, "quantity": quantity},
            )
            assert response.status_code == 200

        response = await test_client.get("/api/v1/transactions", headers=auth(api_key))
        transactions = response.json()["transactions"]
        assert [(t["side"], t["player_id"], t["quantity"]) for t in transactions] == [
            ("SELL", "josh-allen", 1),
            ("BUY", "saquon-barkley", 1),
            ("BUY", "josh-allen", 2),
        ]
        assert transactions[2]["total_price"] == "1340.00"

        response = await test_client.get(
            "/api/v1/transactions",
            headers=auth(api_key),
            params={"player_id": "josh-allen", "limit": 1},
        )
        transactions = response.json()["transactions"]
        assert len(transactions) == 1
        assert transactions[0]["side"] == "SELL"

    @pytest.mark.asyncio
    async def test_price_unavailable_is_503(self, test_client, session_factory, players, trader_account):
        account, api_key = trader_account
        app.dependency_overrides[get_trade_engine] = lambda: TradeEngine(
            session_factory, StaticPriceOracle()
        )

        response = await test_client.post(
            "/api/v1/rpc/buy_player",
            headers=auth(api_key),
            json={"player_id": "josh-allen", "quantity": 1},
        )
        assert response.status_code == 503
        assert "Price unavailable for player 'josh-allen'" in response.json()["detail"]

        response = await test_client.get("/api/v1/account", headers=auth(api_key))
        assert response.json()["cash_balance"] == "10000.00"
