#!/usr/bin/env python3
"""
Management script for BuyLow.

Usage (via API):
    python manage.py leaderboard show [--limit 10] [--base-url http://localhost:8000]
    python manage.py trade buy josh-allen --quantity 4 --api-key sk_...
    python manage.py trade sell josh-allen --quantity 1 --api-key sk_...

Usage (direct DB access):
    python manage.py db seed [-f data/scenarios/leaderboard.yaml]
    python manage.py db audit
    python manage.py db clear
    python manage.py db status
"""

import asyncio
from pathlib import Path

import click
import httpx
from sqlalchemy import func, select

from buylow.database import AsyncSessionLocal, Base, engine
from buylow.errors import TradeError
from buylow.models import Account, Holding, Player, TradeSide, Transaction
from buylow.money import format_currency, format_percent
from buylow.scenario import load_scenario, seed_scenario
from buylow.services.audit import audit_ledger
from buylow.services.settlement import SettlementResult, describe_settlement


DEFAULT_BASE_URL = "http://localhost:8000"
DEFAULT_SCENARIO = "data/scenarios/leaderboard.yaml"


# ============================================================================
# Direct database operations (internal)
# ============================================================================


async def _init_db():
    """Initialize the database tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def _clear_db():
    """Drop and recreate all tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


async def _count_records():
    """Count records in each table."""
    async with AsyncSessionLocal() as session:
        counts = {}
        for model, name in [
            (Player, "players"),
            (Account, "accounts"),
            (Holding, "holdings"),
            (Transaction, "transactions"),
        ]:
            counts[name] = await session.scalar(select(func.count()).select_from(model))
        return counts


async def _audit():
    async with AsyncSessionLocal() as session:
        return await audit_ledger(session)


# ============================================================================
# API operations
# ============================================================================


def _connect_error(base_url: str):
    click.echo(f"\nError: Could not connect to {base_url}", err=True)
    click.echo("Is the server running? Start it with: uvicorn buylow.main:app", err=True)
    raise SystemExit(1)


def _api_leaderboard(base_url: str, limit: int | None):
    """Get the leaderboard and its stats via API."""
    params = {"limit": limit} if limit else {}
    with httpx.Client(base_url=base_url, timeout=30) as client:
        response = client.get("/api/v1/leaderboard", params=params)
        if response.status_code == 404:
            raise click.ClickException(
                f"Endpoint not found. Is the BuyLow API running at {base_url}?"
            )
        response.raise_for_status()
        stats = client.get("/api/v1/leaderboard/stats")
        stats.raise_for_status()
        return response.json()["entries"], stats.json()


def _api_trade(base_url: str, api_key: str, side: TradeSide, player_id: str, quantity: int):
    """Submit a trade via API; returns (player name, settlement)."""
    path = "/api/v1/rpc/buy_player" if side == TradeSide.BUY else "/api/v1/rpc/sell_player"
    with httpx.Client(
        base_url=base_url, timeout=30, headers={"X-API-Key": api_key}
    ) as client:
        response = client.post(path, json={"player_id": player_id, "quantity": quantity})
        if response.status_code != 200:
            detail = response.json().get("detail", response.text)
            raise click.ClickException(f"Trade rejected: {detail}")
        result = SettlementResult.from_payload(response.json())

        player = client.get(f"/api/v1/players/{player_id}")
        name = player.json()["name"] if player.status_code == 200 else player_id
        return name, result


# ============================================================================
# CLI: Main group
# ============================================================================


@click.group()
def cli():
    """BuyLow management commands."""
    pass


# ============================================================================
# CLI: leaderboard (via API)
# ============================================================================


@cli.group()
def leaderboard():
    """Leaderboard (via API)."""
    pass


@leaderboard.command("show")
@click.option("--limit", "-n", type=int, default=None, help="Show only the top N")
@click.option(
    "--base-url", "-u",
    default=DEFAULT_BASE_URL,
    help=f"API base URL (default: {DEFAULT_BASE_URL})",
)
def leaderboard_show(limit, base_url):
    """Show the ranked leaderboard."""
    try:
        entries, stats = _api_leaderboard(base_url, limit)
    except httpx.ConnectError:
        _connect_error(base_url)

    if not entries:
        click.echo("No accounts found.")
        return

    click.echo(f"\n{'Rank':>4}  {'Team':<24} {'Cash':>12} {'Holdings':>12} {'Total':>12} {'Change':>9}")
    click.echo("-" * 78)
    for e in entries:
        click.echo(
            f"{e['rank']:>4}  {e['team_name']:<24} "
            f"{format_currency(e['cash_balance']):>12} "
            f"{format_currency(e['holdings_value']):>12} "
            f"{format_currency(e['total_value']):>12} "
            f"{format_percent(e['change_pct']):>9}"
        )
    click.echo("-" * 78)

    most_owned = stats.get("most_owned_player")
    click.echo(f"  Users: {stats['total_users']}  "
               f"Average: {format_currency(stats['avg_portfolio_value'])}  "
               f"Trades today: {stats['trades_today']}")
    if most_owned:
        click.echo(f"  Most owned: {most_owned['name']} ({most_owned['owner_count']} teams)")


# ============================================================================
# CLI: trade (via API)
# ============================================================================


@cli.group()
def trade():
    """Buy and sell players (via API)."""
    pass


def _trade_command(side: TradeSide):
    @click.argument("player_id")
    @click.option("--quantity", "-q", type=int, default=1, show_default=True)
    @click.option("--api-key", "-k", envvar="BUYLOW_API_KEY", required=True,
                  help="Account API key (or set BUYLOW_API_KEY)")
    @click.option(
        "--base-url", "-u",
        default=DEFAULT_BASE_URL,
        help=f"API base URL (default: {DEFAULT_BASE_URL})",
    )
    def command(player_id, quantity, api_key, base_url):
        try:
            name, result = _api_trade(base_url, api_key, side, player_id, quantity)
        except httpx.ConnectError:
            _connect_error(base_url)
        click.echo(describe_settlement(side, name, result))

    return command


trade.command("buy", help="Buy shares of a player at the current price.")(
    _trade_command(TradeSide.BUY)
)
trade.command("sell", help="Sell shares of a player at the current price.")(
    _trade_command(TradeSide.SELL)
)


# ============================================================================
# CLI: db (direct database access)
# ============================================================================


@cli.group()
def db():
    """Direct database management (bypasses API)."""
    pass


@db.command("clear")
@click.confirmation_option(prompt="Are you sure you want to clear all data?")
def db_clear():
    """Clear all data from the database (destructive!)."""
    click.echo("Clearing database...")
    asyncio.run(_clear_db())
    click.echo("Database cleared and tables recreated.")


@db.command("status")
def db_status():
    """Show database status and record counts."""

    async def run():
        await _init_db()
        return await _count_records()

    counts = asyncio.run(run())

    click.echo("\nDatabase Status:")
    click.echo("-" * 30)
    for table, count in counts.items():
        click.echo(f"  {table:<15} {count:>10,}")
    click.echo("-" * 30)
    click.echo(f"  {'Total':<15} {sum(counts.values()):>10,}")


@db.command("seed")
@click.option(
    "--file", "-f",
    default=DEFAULT_SCENARIO,
    type=click.Path(exists=True),
    help="Scenario YAML file",
)
def db_seed(file):
    """Seed players, accounts and trades from a scenario file."""
    try:
        config = load_scenario(Path(file))
    except Exception as e:
        click.echo(f"Error parsing scenario: {e}", err=True)
        raise SystemExit(1)

    click.echo(f"Seeding scenario '{config.name}' (direct DB)...")

    async def run():
        await _init_db()
        return await seed_scenario(AsyncSessionLocal, config)

    try:
        result = asyncio.run(run())
    except TradeError as e:
        click.echo(f"\nError: trade rejected while seeding: {e}", err=True)
        raise SystemExit(1)

    click.echo(f"\nDone: {result.players} players, {len(result.api_keys)} accounts, "
               f"{result.trades} trades")
    click.echo("\nAPI keys (shown once):")
    for account_id, api_key in result.api_keys.items():
        click.echo(f"  {account_id:<20} {api_key}")


@db.command("audit")
def db_audit():
    """Check ledger consistency; exits with status 1 on any failure."""

    async def run():
        await _init_db()
        return await _audit()

    report = asyncio.run(run())

    for check in report.checks:
        click.echo(f"  [{'PASS' if check.passed else 'FAIL'}] {check.name}")
        for line in check.details:
            click.echo(f"         {line}")

    if not report.passed:
        click.echo("\nAudit failed.", err=True)
        raise SystemExit(1)
    click.echo("\nAll checks passed.")


if __name__ == "__main__":
    cli()
