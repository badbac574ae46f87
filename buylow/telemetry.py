"""OpenTelemetry metrics and logs for BuyLow."""

import logging
import os
from decimal import Decimal

from opentelemetry import metrics
from opentelemetry._logs import set_logger_provider
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.http._log_exporter import OTLPLogExporter
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource

from buylow._version import VERSION

# Module-level state
_initialized = False
_meter = None
_log_handler = None

# Counters (cumulative)
_trades_total = None
_trade_shares_total = None
_trade_value_total = None
_trade_rejections_total = None
_trade_retries_total = None

_portfolio_gauges_registered = False


def setup_telemetry() -> bool:
    """Initialize OpenTelemetry metrics and log export.

    Returns True if telemetry was initialized, False if disabled.
    """
    global _initialized, _meter, _log_handler
    global _trades_total, _trade_shares_total, _trade_value_total
    global _trade_rejections_total, _trade_retries_total

    if _initialized:
        return True

    if os.getenv("OTLP_ENABLED", "true").lower() == "false":
        return False

    otlp_endpoint = os.getenv("OTLP_ENDPOINT", "http://localhost:4318/v1/metrics")
    export_interval = int(os.getenv("OTLP_EXPORT_INTERVAL", "5000"))

    resource = Resource.create({
        "service.name": "buylow",
        "service.version": VERSION,
    })

    exporter = OTLPMetricExporter(endpoint=otlp_endpoint)
    reader = PeriodicExportingMetricReader(
        exporter,
        export_interval_millis=export_interval,
    )
    provider = MeterProvider(resource=resource, metric_readers=[reader])
    metrics.set_meter_provider(provider)

    _meter = metrics.get_meter("buylow", VERSION)

    _trades_total = _meter.create_counter(
        "buylow_trades_total",
        description="Total number of trades settled",
        unit="1",
    )

    _trade_shares_total = _meter.create_counter(
        "buylow_trade_shares_total",
        description="Total number of shares traded",
        unit="shares",
    )

    _trade_value_total = _meter.create_counter(
        "buylow_trade_value_total",
        description="Total cash value of settled trades",
        unit="currency",
    )

    _trade_rejections_total = _meter.create_counter(
        "buylow_trade_rejections_total",
        description="Trades rejected, by reason",
        unit="1",
    )

    _trade_retries_total = _meter.create_counter(
        "buylow_trade_retries_total",
        description="Trade attempts retried after an optimistic-lock conflict",
        unit="1",
    )

    # === LOGS ===
    logs_endpoint = otlp_endpoint.replace("/v1/metrics", "/v1/logs")
    log_exporter = OTLPLogExporter(endpoint=logs_endpoint)
    logger_provider = LoggerProvider(resource=resource)
    logger_provider.add_log_record_processor(BatchLogRecordProcessor(log_exporter))
    set_logger_provider(logger_provider)

    _log_handler = LoggingHandler(
        level=logging.INFO,
        logger_provider=logger_provider,
    )

    _initialized = True
    return True


def get_log_handler() -> LoggingHandler | None:
    """Get the OTLP logging handler to attach to Python loggers."""
    return _log_handler


# --- Counter update functions ---

def record_trade(side: str, quantity: int, total: Decimal) -> None:
    """Record a settled trade."""
    if not _initialized:
        return

    attributes = {"side": side}
    _trades_total.add(1, attributes)
    _trade_shares_total.add(quantity, attributes)
    _trade_value_total.add(float(total), attributes)


def record_trade_rejected(side: str, reason: str) -> None:
    """Record a rejected trade, `reason` is the error code."""
    if not _initialized:
        return

    _trade_rejections_total.add(1, {"side": side, "reason": reason})


def record_trade_retry(side: str) -> None:
    """Record a retried trade attempt."""
    if not _initialized:
        return

    _trade_retries_total.add(1, {"side": side})


# --- Portfolio gauges ---
# Latest values per account, read by the observable gauges on export
_portfolio_values: dict[str, float] = {}  # account_id -> total_value
_portfolio_pnl: dict[str, float] = {}  # account_id -> unrealized_pnl


def _observe_portfolio_values(options):
    for account_id, value in list(_portfolio_values.items()):
        yield metrics.Observation(value, {"account_id": account_id})


def _observe_portfolio_pnl(options):
    for account_id, pnl in list(_portfolio_pnl.items()):
        yield metrics.Observation(pnl, {"account_id": account_id})


def setup_portfolio_metrics() -> None:
    """Register the portfolio gauges.

    Call this after setup_telemetry(); repeated calls are ignored.
    """
    global _portfolio_gauges_registered

    if not _initialized or _meter is None or _portfolio_gauges_registered:
        return

    _meter.create_observable_gauge(
        "buylow_portfolio_total_value",
        callbacks=[_observe_portfolio_values],
        description="Total portfolio value (cash + holdings)",
        unit="currency",
    )
    _meter.create_observable_gauge(
        "buylow_portfolio_unrealized_pnl",
        callbacks=[_observe_portfolio_pnl],
        description="Unrealized profit/loss on holdings",
        unit="currency",
    )
    _portfolio_gauges_registered = True


def record_portfolio_value(account_id: str, total_value: float, unrealized_pnl: float) -> None:
    """Record portfolio value metrics for an account.

    Called when a portfolio summary is served via the API.
    """
    if not _initialized:
        return

    _portfolio_values[account_id] = total_value
    _portfolio_pnl[account_id] = unrealized_pnl
