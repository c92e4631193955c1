"""Mock provider for testing and local runs, no trading service required."""

from __future__ import annotations

import random
import threading
import uuid
from datetime import date

from powerposition.errors import PowerPositionErrorCode, PowerServiceError
from powerposition.models.bucket import TOTAL_PERIODS
from powerposition.models.trade import Trade, TradePeriod
from powerposition.providers.base import BasePowerProvider


class MockPowerProvider(BasePowerProvider):
    """In-memory provider that returns configurable or synthetic trades.

    Use ``set_trades`` to pre-load a date and ``fail_next`` to script
    failures, or leave defaults for seeded synthetic data. ``failure_rate``
    makes calls fail at random the way the real service occasionally does.
    """

    def __init__(
        self,
        seed: int | None = None,
        failure_rate: float = 0.0,
        trade_count: tuple[int, int] = (1, 3),
    ) -> None:
        if not 0.0 <= failure_rate <= 1.0:
            raise ValueError("failure_rate must be within [0, 1]")
        self.failure_rate = failure_rate
        self.trade_count = trade_count
        self.calls: list[date] = []
        self._trades: dict[date, list[Trade]] = {}
        self._failures: list[BaseException] = []
        self._rng = random.Random(seed)
        self._lock = threading.Lock()

    # --- Pre-load helpers ---

    def set_trades(self, day: date, trades: list[Trade]) -> None:
        self._trades[day] = list(trades)

    def fail_next(self, count: int = 1, error: BaseException | None = None) -> None:
        """Make the next ``count`` calls raise ``error`` (a PowerServiceError by default)."""
        for _ in range(count):
            self._failures.append(
                error
                if error is not None
                else PowerServiceError(
                    "Scripted failure", code=PowerPositionErrorCode.UNAVAILABLE
                )
            )

    # --- Provider implementation ---

    def get_trades(self, day: date) -> list[Trade]:
        with self._lock:
            self.calls.append(day)
            if self._failures:
                raise self._failures.pop(0)
            if self.failure_rate and self._rng.random() < self.failure_rate:
                raise PowerServiceError(
                    "Error retrieving power volumes",
                    code=PowerPositionErrorCode.UNAVAILABLE,
                )
            if day in self._trades:
                return list(self._trades[day])
            return self._generate_trades(day)

    # --- Synthetic data generation ---

    def _generate_trades(self, day: date) -> list[Trade]:
        low, high = self.trade_count
        trades: list[Trade] = []
        for _ in range(self._rng.randint(low, high)):
            periods = tuple(
                TradePeriod(period=p, volume=round(self._rng.uniform(-50.0, 250.0), 2))
                for p in range(1, TOTAL_PERIODS + 1)
            )
            trade_id = uuid.UUID(int=self._rng.getrandbits(128)).hex
            trades.append(Trade(date=day, periods=periods, trade_id=trade_id))
        return trades
