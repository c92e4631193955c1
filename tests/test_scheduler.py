"""Tests for the periodic scheduler, including end-to-end ticks."""

import logging
import re
import threading
import time
from datetime import date

import pytest

from powerposition import create_scheduler
from powerposition.config import PeriodIndexPolicy, PowerPositionConfig
from powerposition.fetcher import ResilientFetcher
from powerposition.models.trade import Trade, TradePeriod
from powerposition.providers.base import BasePowerProvider
from powerposition.report import ReportWriter
from powerposition.scheduler import PeriodicScheduler, SchedulerState, next_tick_delay

FILENAME_RE = re.compile(r"^PowerPosition_\d{8}_\d{4}\.csv$")


class SingleTradeProvider(BasePowerProvider):
    """Returns one trade with period 1 = 100 for any date."""

    def __init__(self, period: int = 1) -> None:
        self.period = period
        self.calls = 0

    def get_trades(self, day: date) -> list[Trade]:
        self.calls += 1
        return [Trade(date=day, periods=(TradePeriod(self.period, 100.0),))]


class BlockingProvider(BasePowerProvider):
    def __init__(self) -> None:
        self.entered = threading.Event()
        self.release = threading.Event()

    def get_trades(self, day: date) -> list[Trade]:
        self.entered.set()
        self.release.wait(5)
        return []


def _scheduler(provider, output_dir, clock, interval_seconds=60.0, **kwargs) -> PeriodicScheduler:
    fetcher = ResilientFetcher(provider, retry_delay=0.0, max_retry_delay=0.0, poll_interval=0.01, clock=clock)
    writer = ReportWriter(output_dir, clock=clock)
    return PeriodicScheduler(fetcher, writer, interval_seconds=interval_seconds, **kwargs)


def _run_until(scheduler, token, predicate, timeout=5.0):
    thread = threading.Thread(target=scheduler.run, args=(token,), daemon=True)
    thread.start()
    deadline = time.monotonic() + timeout
    while not predicate() and time.monotonic() < deadline:
        time.sleep(0.01)
    reached = predicate()
    token.cancel("test done")
    thread.join(timeout)
    assert not thread.is_alive()
    return reached


class TestNextTickDelay:
    def test_right_after_start(self):
        assert next_tick_delay(100.0, 60.0, 100.5) == pytest.approx(59.5)

    def test_on_boundary_waits_full_interval(self):
        assert next_tick_delay(100.0, 60.0, 160.0) == pytest.approx(60.0)

    def test_overrun_skips_missed_boundaries(self):
        # Tick started at 0 ran for 150s: boundaries 60 and 120 are skipped.
        assert next_tick_delay(0.0, 60.0, 150.0) == pytest.approx(30.0)

    def test_clock_before_start(self):
        assert next_tick_delay(10.0, 5.0, 9.0) == pytest.approx(6.0)


class TestSchedulerLifecycle:
    def test_initial_state(self, tmp_path, fixed_clock):
        scheduler = _scheduler(SingleTradeProvider(), tmp_path, fixed_clock)
        assert scheduler.state is SchedulerState.IDLE

    def test_rejects_non_positive_interval(self, tmp_path, fixed_clock):
        with pytest.raises(ValueError):
            _scheduler(SingleTradeProvider(), tmp_path, fixed_clock, interval_seconds=0)

    def test_pre_cancelled_token(self, tmp_path, fixed_clock, token):
        scheduler = _scheduler(SingleTradeProvider(), tmp_path, fixed_clock)
        token.cancel()
        scheduler.run(token)
        assert scheduler.state is SchedulerState.STOPPED
        assert scheduler.ticks_started == 0
        assert list(tmp_path.iterdir()) == []

    def test_cannot_run_twice(self, tmp_path, fixed_clock, token):
        scheduler = _scheduler(SingleTradeProvider(), tmp_path, fixed_clock)
        token.cancel()
        scheduler.run(token)
        with pytest.raises(RuntimeError):
            scheduler.run(token)

    def test_running_state_while_waiting(self, tmp_path, fixed_clock, token):
        scheduler = _scheduler(SingleTradeProvider(), tmp_path, fixed_clock)
        states = []

        def first_tick_done():
            if scheduler.ticks_succeeded >= 1:
                states.append(scheduler.state)
                return True
            return False

        assert _run_until(scheduler, token, first_tick_done)
        assert states[0] is SchedulerState.RUNNING
        assert scheduler.state is SchedulerState.STOPPED


class TestSchedulerTicks:
    def test_end_to_end_single_tick(self, tmp_path, fixed_clock, token):
        provider = SingleTradeProvider()
        scheduler = _scheduler(provider, tmp_path, fixed_clock)
        assert _run_until(scheduler, token, lambda: scheduler.ticks_succeeded >= 1)

        files = list(tmp_path.iterdir())
        assert [f.name for f in files] == ["PowerPosition_20240115_0905.csv"]
        lines = files[0].read_text(encoding="utf-8").splitlines()
        assert lines[0] == "Local Time,Volume"
        assert lines[1] == "23:00,100"
        assert all(line.endswith(",0") for line in lines[2:])
        assert len(lines) == 25
        assert scheduler.last_report == files[0]
        # Interval is a minute: only the immediate tick ran.
        assert provider.calls == 1

    def test_end_to_end_wall_clock(self, tmp_path, token):
        config = PowerPositionConfig(output_folder=tmp_path, interval_minutes=1, retry_delay_seconds=0.0, max_retry_delay_seconds=0.0)
        scheduler = create_scheduler(config, provider=SingleTradeProvider())
        assert _run_until(scheduler, token, lambda: scheduler.ticks_succeeded >= 1)
        names = [f.name for f in tmp_path.iterdir()]
        assert len(names) == 1
        assert FILENAME_RE.match(names[0])

    def test_failing_ticks_do_not_stop_loop(self, tmp_path, fixed_clock, token, caplog):
        scheduler = _scheduler(SingleTradeProvider(), tmp_path / "missing", fixed_clock, interval_seconds=0.05)
        with caplog.at_level(logging.ERROR):
            assert _run_until(scheduler, token, lambda: scheduler.ticks_failed >= 2)
        assert scheduler.ticks_succeeded == 0
        assert scheduler.state is SchedulerState.STOPPED
        failures = [r for r in caplog.records if "failed" in r.getMessage()]
        assert len(failures) >= 2
        assert failures[0].exc_info is not None

    def test_recovers_after_failed_tick(self, tmp_path, fixed_clock, token):
        out = tmp_path / "late"
        scheduler = _scheduler(SingleTradeProvider(), out, fixed_clock, interval_seconds=0.05)

        def folder_appears_then_success():
            if scheduler.ticks_failed >= 1:
                out.mkdir(exist_ok=True)
            return scheduler.ticks_succeeded >= 1

        assert _run_until(scheduler, token, folder_appears_then_success)
        assert (out / "PowerPosition_20240115_0905.csv").exists()

    def test_invalid_period_fails_tick(self, tmp_path, fixed_clock, token):
        scheduler = _scheduler(SingleTradeProvider(period=0), tmp_path, fixed_clock, interval_seconds=0.05)
        assert _run_until(scheduler, token, lambda: scheduler.ticks_failed >= 1)
        assert list(tmp_path.iterdir()) == []

    def test_invalid_period_skipped(self, tmp_path, fixed_clock, token):
        scheduler = _scheduler(
            SingleTradeProvider(period=25), tmp_path, fixed_clock,
            period_index_policy=PeriodIndexPolicy.SKIP,
        )
        assert _run_until(scheduler, token, lambda: scheduler.ticks_succeeded >= 1)
        lines = (tmp_path / "PowerPosition_20240115_0905.csv").read_text(encoding="utf-8").splitlines()
        assert all(line.endswith(",0") for line in lines[1:])

    def test_cancel_before_first_tick_completes(self, tmp_path, fixed_clock, token):
        provider = BlockingProvider()
        scheduler = _scheduler(provider, tmp_path, fixed_clock)
        try:
            assert _run_until(scheduler, token, provider.entered.is_set)
        finally:
            provider.release.set()
        assert list(tmp_path.iterdir()) == []
        assert scheduler.state is SchedulerState.STOPPED
        assert scheduler.ticks_succeeded == 0
        assert scheduler.ticks_failed == 0

    def test_run_once(self, tmp_path, fixed_clock, token):
        scheduler = _scheduler(SingleTradeProvider(), tmp_path, fixed_clock)
        path = scheduler.run_once(token)
        assert path == tmp_path / "PowerPosition_20240115_0905.csv"
        assert scheduler.ticks_started == 1
        assert scheduler.ticks_succeeded == 1
        scheduler.fetcher.close()

    def test_logs_tick_start_and_finish(self, tmp_path, fixed_clock, token, caplog):
        scheduler = _scheduler(SingleTradeProvider(), tmp_path, fixed_clock)
        with caplog.at_level(logging.INFO):
            scheduler.run_once(token)
        messages = [r.getMessage() for r in caplog.records]
        assert any(m.startswith("Task started at") for m in messages)
        assert any(m.startswith("Task finished at") for m in messages)
        assert any("Wrote CSV" in m for m in messages)
        scheduler.fetcher.close()


class StateRecordingFetcher(ResilientFetcher):
    """Records the scheduler state each time the loop releases the fetcher."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.scheduler: PeriodicScheduler | None = None
        self.states_on_close: list[SchedulerState] = []

    def close(self) -> None:
        if self.scheduler is not None:
            self.states_on_close.append(self.scheduler.state)
        super().close()


def _recording_scheduler(provider, output_dir, clock) -> PeriodicScheduler:
    fetcher = StateRecordingFetcher(provider, retry_delay=0.0, max_retry_delay=0.0, poll_interval=0.01, clock=clock)
    scheduler = PeriodicScheduler(fetcher, ReportWriter(output_dir, clock=clock), interval_seconds=60.0)
    fetcher.scheduler = scheduler
    return scheduler


class TestSchedulerStopping:
    def test_stopping_while_unwinding_from_wait(self, tmp_path, fixed_clock, token):
        scheduler = _recording_scheduler(SingleTradeProvider(), tmp_path, fixed_clock)
        assert _run_until(scheduler, token, lambda: scheduler.ticks_succeeded >= 1)
        assert scheduler.fetcher.states_on_close == [SchedulerState.STOPPING]
        assert scheduler.state is SchedulerState.STOPPED

    def test_stopping_while_unwinding_from_fetch(self, tmp_path, fixed_clock, token):
        provider = BlockingProvider()
        scheduler = _recording_scheduler(provider, tmp_path, fixed_clock)
        try:
            assert _run_until(scheduler, token, provider.entered.is_set)
        finally:
            provider.release.set()
        # The fetcher drops its pool when it abandons the call, then the loop
        # releases it again while stopping.
        assert scheduler.fetcher.states_on_close[-1] is SchedulerState.STOPPING
        assert scheduler.state is SchedulerState.STOPPED
