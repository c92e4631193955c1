"""Periodic scheduler: fetch, aggregate and write once per interval."""

from __future__ import annotations

import logging
import math
import time
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable

from powerposition.aggregation import aggregate_trades
from powerposition.cancellation import CancellationToken
from powerposition.config import PeriodIndexPolicy
from powerposition.errors import OperationCancelled
from powerposition.fetcher import ResilientFetcher
from powerposition.report import ReportWriter


class SchedulerState(Enum):
    """Lifecycle of a :class:`PeriodicScheduler`."""

    IDLE = "idle"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"


def next_tick_delay(started: float, interval: float, now: float) -> float:
    """Seconds from ``now`` until the next tick boundary strictly after it.

    Boundaries are ``started + k * interval``. Boundaries already passed
    during an overrunning tick are skipped rather than replayed.
    """
    elapsed = max(now - started, 0.0)
    k = math.floor(elapsed / interval) + 1
    return started + k * interval - now


class PeriodicScheduler:
    """Run one tick immediately, then one per interval, until cancelled.

    A tick is fetch -> aggregate -> write. Ticks never overlap: the next one
    is only considered after the current one has finished, failed, or been
    cancelled. Any failure other than :class:`OperationCancelled` is logged
    and the loop carries on at the next boundary.

    Usage::

        scheduler = PeriodicScheduler(fetcher, writer, interval_seconds=900)
        scheduler.run(token)  # returns once the token is cancelled
    """

    def __init__(
        self,
        fetcher: ResilientFetcher,
        writer: ReportWriter,
        interval_seconds: float,
        period_index_policy: PeriodIndexPolicy = PeriodIndexPolicy.FAIL,
        logger: logging.Logger | None = None,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.fetcher = fetcher
        self.writer = writer
        self.interval_seconds = interval_seconds
        self.period_index_policy = period_index_policy
        self.logger = logger or logging.getLogger(__name__)
        self._monotonic = monotonic

        self.state = SchedulerState.IDLE
        self.ticks_started = 0
        self.ticks_succeeded = 0
        self.ticks_failed = 0
        self.last_report: Path | None = None

    # ------------------------------------------------------------------ loop

    def run(self, token: CancellationToken) -> None:
        """Block until ``token`` is cancelled and the loop has unwound."""
        if self.state is not SchedulerState.IDLE:
            raise RuntimeError(f"Scheduler cannot start from state {self.state.value}")
        self.state = SchedulerState.RUNNING
        started = self._monotonic()

        try:
            while not token.cancelled:
                try:
                    self.run_once(token)
                except OperationCancelled:
                    self.state = SchedulerState.STOPPING
                    break
                except Exception:
                    self.ticks_failed += 1
                    self.logger.exception("Error: tick %d failed", self.ticks_started)

                delay = next_tick_delay(started, self.interval_seconds, self._monotonic())
                if token.wait(delay):
                    self.state = SchedulerState.STOPPING
                    break
        finally:
            self.state = SchedulerState.STOPPING
            self.fetcher.close()
            self.state = SchedulerState.STOPPED

    # ------------------------------------------------------------------ tick

    def run_once(self, token: CancellationToken) -> Path:
        """Execute a single tick and return the written report path."""
        self.ticks_started += 1
        self.logger.info("Next execution...")
        self.logger.info("Task started at %s", datetime.now())

        trades = self.fetcher.fetch(token)
        buckets = aggregate_trades(trades, self.period_index_policy, self.logger)
        token.raise_if_cancelled()
        path = self.writer.write(buckets)

        self.ticks_succeeded += 1
        self.last_report = path
        self.logger.info("Task finished at %s", datetime.now())
        return path
