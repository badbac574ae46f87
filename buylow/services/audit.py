"""Consistency checker - recomputes the ledger from transaction history.

Checks that hold after every committed trade:
- cash_consistency: cash == starting cash - BUY totals + SELL totals
- holding_reconciliation: holding quantity == BUY shares - SELL shares,
  and (account, player) pairs without a holding net to zero
- positive_quantities: no holding has a quantity of zero or less
- open_position_spend: quantity * average cost over all holdings never
  exceeds the account's starting cash
"""

from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal

from sqlalchemy import Numeric, String, cast, func, literal, null, select, union_all
from sqlalchemy.ext.asyncio import AsyncSession

from buylow.models import Account, Holding, TradeSide, Transaction
from buylow.money import to_money


@dataclass
class CheckResult:
    name: str
    passed: bool
    details: list[str] = field(default_factory=list)


@dataclass
class AuditReport:
    checks: list[CheckResult]

    @property
    def passed(self) -> bool:
        return all(c.passed for c in self.checks)


@dataclass
class LedgerSnapshot:
    """Aggregated ledger state the checks run against.

    Attributes:
        accounts: account_id -> (cash_balance, starting_cash)
        holdings: (account_id, player_id) -> (quantity, avg_purchase_price)
        cash_flows: (account_id, side) -> summed total_price
        share_flows: (account_id, player_id, side) -> summed quantity
    """

    accounts: dict[str, tuple[Decimal, Decimal]]
    holdings: dict[tuple[str, str], tuple[int, Decimal]]
    cash_flows: dict[tuple[str, TradeSide], Decimal]
    share_flows: dict[tuple[str, str, TradeSide], int]


def check_cash(snapshot: LedgerSnapshot) -> CheckResult:
    details = []
    for account_id, (cash, starting) in sorted(snapshot.accounts.items()):
        spent = snapshot.cash_flows.get((account_id, TradeSide.BUY), Decimal("0"))
        received = snapshot.cash_flows.get((account_id, TradeSide.SELL), Decimal("0"))
        expected = to_money(starting - spent + received)
        if to_money(cash) != expected:
            details.append(f"{account_id}: cash {to_money(cash)} != expected {expected}")
    return CheckResult("cash_consistency", not details, details)


def check_holdings(snapshot: LedgerSnapshot) -> CheckResult:
    nets: dict[tuple[str, str], int] = defaultdict(int)
    for (account_id, player_id, side), quantity in snapshot.share_flows.items():
        sign = 1 if side == TradeSide.BUY else -1
        nets[(account_id, player_id)] += sign * quantity

    details = []
    for pair in sorted(set(nets) | set(snapshot.holdings)):
        account_id, player_id = pair
        held = snapshot.holdings[pair][0] if pair in snapshot.holdings else 0
        net = nets.get(pair, 0)
        if held != net:
            if pair in snapshot.holdings:
                details.append(
                    f"{account_id}/{player_id}: holding {held} != net transactions {net}"
                )
            else:
                details.append(
                    f"{account_id}/{player_id}: no holding but transactions net {net}"
                )
    return CheckResult("holding_reconciliation", not details, details)


def check_positive_quantities(snapshot: LedgerSnapshot) -> CheckResult:
    details = [
        f"{account_id}/{player_id}: quantity {quantity}"
        for (account_id, player_id), (quantity, _) in sorted(snapshot.holdings.items())
        if quantity <= 0
    ]
    return CheckResult("positive_quantities", not details, details)


def check_open_position_spend(snapshot: LedgerSnapshot) -> CheckResult:
    spend: dict[str, Decimal] = defaultdict(Decimal)
    for (account_id, _), (quantity, avg_price) in snapshot.holdings.items():
        spend[account_id] += to_money(avg_price) * quantity

    details = []
    for account_id, total in sorted(spend.items()):
        _, starting = snapshot.accounts.get(account_id, (None, Decimal("0")))
        if total > starting:
            details.append(
                f"{account_id}: open positions cost {to_money(total)} "
                f"> starting cash {to_money(starting)}"
            )
    return CheckResult("open_position_spend", not details, details)


def run_checks(snapshot: LedgerSnapshot) -> AuditReport:
    return AuditReport(
        checks=[
            check_cash(snapshot),
            check_holdings(snapshot),
            check_positive_quantities(snapshot),
            check_open_position_spend(snapshot),
        ]
    )


def snapshot_query():
    """One compound SELECT over accounts, holdings and transaction sums.

    Each row is (kind, account_id, player_id, side, amount, extra). A single
    statement reads from one database snapshot, so a trade committing
    meanwhile is seen either completely or not at all.
    """
    no_text = cast(null(), String)
    no_amount = cast(null(), Numeric(15, 2))

    accounts = select(
        literal("account").label("kind"),
        Account.id.label("account_id"),
        no_text.label("player_id"),
        no_text.label("side"),
        Account.cash_balance.label("amount"),
        Account.starting_cash.label("extra"),
    )
    holdings = select(
        literal("holding"),
        Holding.account_id,
        Holding.player_id,
        no_text,
        Holding.quantity,
        Holding.avg_purchase_price,
    )
    cash_flows = select(
        literal("cash"),
        Transaction.account_id,
        no_text,
        Transaction.side,
        func.sum(Transaction.total_price),
        no_amount,
    ).group_by(Transaction.account_id, Transaction.side)
    share_flows = select(
        literal("shares"),
        Transaction.account_id,
        Transaction.player_id,
        Transaction.side,
        func.sum(Transaction.quantity),
        no_amount,
    ).group_by(Transaction.account_id, Transaction.player_id, Transaction.side)

    return union_all(accounts, holdings, cash_flows, share_flows)


async def load_snapshot(session: AsyncSession) -> LedgerSnapshot:
    """Read the aggregates the checks need in a single statement."""
    snapshot = LedgerSnapshot(accounts={}, holdings={}, cash_flows={}, share_flows={})

    for row in await session.execute(snapshot_query()):
        if row.kind == "account":
            snapshot.accounts[row.account_id] = (row.amount, row.extra)
        elif row.kind == "holding":
            snapshot.holdings[(row.account_id, row.player_id)] = (
                int(row.amount),
                row.extra,
            )
        elif row.kind == "cash":
            snapshot.cash_flows[(row.account_id, TradeSide(row.side))] = row.amount
        else:
            snapshot.share_flows[(row.account_id, row.player_id, TradeSide(row.side))] = (
                int(row.amount)
            )
    return snapshot


async def audit_ledger(session: AsyncSession) -> AuditReport:
    """Run every consistency check against the database."""
    return run_checks(await load_snapshot(session))
