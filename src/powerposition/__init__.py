"""powerposition: intra-day power position reporting service.

Pulls the current day's power trades on a fixed interval, aggregates
their hourly volumes into 24 local-time buckets, and writes each result
to a ``PowerPosition_YYYYMMDD_HHmm.csv`` report.

Quick start::

    from powerposition import CancellationToken, PowerPositionConfig, create_scheduler
    scheduler = create_scheduler(PowerPositionConfig(output_folder="reports"))
    scheduler.run(CancellationToken())
"""

from __future__ import annotations

import logging

from powerposition.aggregation import aggregate_trades
from powerposition.cancellation import CancellationToken, SignalCancellation
from powerposition.config import PeriodIndexPolicy, PowerPositionConfig
from powerposition.errors import (
    DataIntegrityError,
    OperationCancelled,
    PowerPositionError,
    PowerPositionErrorCode,
    PowerServiceError,
    ReportWriteError,
    SettingsError,
)
from powerposition.fetcher import ResilientFetcher
from powerposition.models.bucket import PERIOD_LABELS, TOTAL_PERIODS, AggregationBucket
from powerposition.models.trade import Trade, TradePeriod
from powerposition.providers import create_provider
from powerposition.providers.base import BasePowerProvider
from powerposition.report import ReportWriter, render_csv, report_filename
from powerposition.scheduler import PeriodicScheduler, SchedulerState
from powerposition.settings import ServiceSettings, default_strategies, resolve_settings

__version__ = "0.1.0"

__all__ = [
    # Service
    "PeriodicScheduler",
    "SchedulerState",
    "create_scheduler",
    # Pipeline
    "ResilientFetcher",
    "aggregate_trades",
    "ReportWriter",
    "render_csv",
    "report_filename",
    # Providers
    "BasePowerProvider",
    "create_provider",
    # Config / settings
    "PowerPositionConfig",
    "PeriodIndexPolicy",
    "ServiceSettings",
    "default_strategies",
    "resolve_settings",
    # Cancellation
    "CancellationToken",
    "SignalCancellation",
    # Errors
    "PowerPositionError",
    "PowerPositionErrorCode",
    "PowerServiceError",
    "DataIntegrityError",
    "ReportWriteError",
    "SettingsError",
    "OperationCancelled",
    # Models
    "Trade",
    "TradePeriod",
    "AggregationBucket",
    "PERIOD_LABELS",
    "TOTAL_PERIODS",
]


def create_scheduler(
    config: PowerPositionConfig,
    logger: logging.Logger | None = None,
    provider: BasePowerProvider | None = None,
) -> PeriodicScheduler:
    """Wire provider, fetcher, writer and scheduler from a config.

    Args:
        config: Service configuration.
        logger: Logger shared by every component (default: package logger).
        provider: Trade source; built from ``config.provider`` when omitted.
    """
    logger = logger or logging.getLogger(__name__)
    source = provider or create_provider(config.provider)
    fetcher = ResilientFetcher(
        source,
        logger=logger,
        retry_delay=config.retry_delay_seconds,
        max_retry_delay=config.max_retry_delay_seconds,
    )
    writer = ReportWriter(config.output_folder, logger=logger)
    return PeriodicScheduler(
        fetcher,
        writer,
        interval_seconds=config.interval_seconds,
        period_index_policy=config.period_index_policy,
        logger=logger,
    )
