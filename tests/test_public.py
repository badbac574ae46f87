"""Tests for public API endpoints."""

import pytest


# ============================================================================
# Player Endpoint Tests
# ============================================================================


@pytest.mark.asyncio
async def test_list_players(test_client, players):
    """Players are listed most expensive first with change since baseline."""
    response = await test_client.get("/api/v1/players")

    assert response.status_code == 200
    data = response.json()["players"]
    assert [p["id"] for p in data] == ["josh-allen", "saquon-barkley"]
    assert data[0]["change"] == "20.00"
    assert data[0]["change_pct"] == "3.08"
    assert data[1]["change"] == "0.00"


@pytest.mark.asyncio
async def test_get_player(test_client, players):
    response = await test_client.get("/api/v1/players/josh-allen")

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Josh Allen"
    assert data["current_price"] == "670.00"
    assert data["baseline_price"] == "650.00"


@pytest.mark.asyncio
async def test_get_player_not_found(test_client):
    response = await test_client.get("/api/v1/players/nobody")

    assert response.status_code == 404
    assert response.json()["detail"] == "Player 'nobody' not found"


# ============================================================================
# Leaderboard Endpoint Tests
# ============================================================================


@pytest.mark.asyncio
async def test_leaderboard_empty(test_client):
    response = await test_client.get("/api/v1/leaderboard")

    assert response.status_code == 200
    assert response.json()["entries"] == []


@pytest.mark.asyncio
async def test_leaderboard_values_holdings_at_current_price(test_client, trade_engine, players, trader_account):
    await trade_engine.buy("trader1", "josh-allen", 4)
    await test_client.put(
        "/admin/players/josh-allen/price", json={"current_price": "720.00"}
    )
    await test_client.post(
        "/admin/accounts", json={"account_id": "idle", "team_name": "Idle"}
    )

    response = await test_client.get("/api/v1/leaderboard")

    entries = response.json()["entries"]
    assert [(e["rank"], e["account_id"]) for e in entries] == [
        (1, "trader1"),
        (2, "idle"),
    ]
    assert entries[0]["cash_balance"] == "7320.00"
    assert entries[0]["holdings_value"] == "2880.00"
    assert entries[0]["total_value"] == "10200.00"
    assert entries[0]["change_from_start"] == "200.00"
    assert entries[0]["change_pct"] == "2.00"
    assert entries[1]["holdings_value"] == "0.00"


@pytest.mark.asyncio
async def test_leaderboard_limit(test_client):
    for account_id in ["a", "b", "c"]:
        await test_client.post(
            "/admin/accounts", json={"account_id": account_id, "team_name": account_id}
        )

    response = await test_client.get("/api/v1/leaderboard", params={"limit": 2})

    entries = response.json()["entries"]
    assert len(entries) == 2
    assert [e["rank"] for e in entries] == [1, 1]


@pytest.mark.asyncio
async def test_leaderboard_stats(test_client, trade_engine, players, trader_account):
    await test_client.post(
        "/admin/accounts", json={"account_id": "idle", "team_name": "Idle"}
    )
    await trade_engine.buy("trader1", "saquon-barkley", 2)

    response = await test_client.get("/api/v1/leaderboard/stats")

    assert response.status_code == 200
    data = response.json()
    assert data["total_users"] == 2
    assert data["avg_portfolio_value"] == "10000.00"
    assert data["trades_today"] == 1
    assert data["most_owned_player"] == {
        "player_id": "saquon-barkley",
        "name": "Saquon Barkley",
        "owner_count": 1,
    }


@pytest.mark.asyncio
async def test_leaderboard_stats_empty(test_client):
    response = await test_client.get("/api/v1/leaderboard/stats")

    data = response.json()
    assert data["total_users"] == 0
    assert data["avg_portfolio_value"] == "0.00"
    assert data["trades_today"] == 0
    assert data["most_owned_player"] is None


# ============================================================================
# Health
# ============================================================================


@pytest.mark.asyncio
async def test_health(test_client):
    response = await test_client.get("/health")
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_version(test_client):
    response = await test_client.get("/api/version")
    assert response.json()["api_version"] == "v1"
