"""Power position service configuration."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from powerposition.errors import SettingsError


class PeriodIndexPolicy(Enum):
    """What the aggregator does with a period index outside 1..24."""

    FAIL = "fail"
    SKIP = "skip"


@dataclass
class PowerPositionConfig:
    """Configuration for the power position service.

    Attributes:
        output_folder: Existing directory the CSV reports are written to.
        interval_minutes: Minutes between tick starts.
        provider: Registered provider name or dotted ``module.ClassName`` path.
        period_index_policy: Handling of out-of-range period indexes.
        retry_delay_seconds: First backoff delay between failed fetches.
            ``0`` retries immediately.
        max_retry_delay_seconds: Upper bound for the backoff delay.
        log_dir: Directory for the daily rolling log file.
        log_level: Logging level name.
    """

    output_folder: Path = Path("reports")
    interval_minutes: int = 15
    provider: str = "mock"
    period_index_policy: PeriodIndexPolicy = PeriodIndexPolicy.FAIL
    retry_delay_seconds: float = 1.0
    max_retry_delay_seconds: float = 30.0
    log_dir: Path = Path("logs")
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        self.output_folder = Path(self.output_folder)
        self.log_dir = Path(self.log_dir)
        if not isinstance(self.period_index_policy, PeriodIndexPolicy):
            try:
                self.period_index_policy = PeriodIndexPolicy(
                    str(self.period_index_policy).lower()
                )
            except ValueError:
                raise SettingsError(
                    f"Unknown period index policy '{self.period_index_policy}'. "
                    f"Supported: {', '.join(p.value for p in PeriodIndexPolicy)}"
                ) from None
        if isinstance(self.interval_minutes, bool) or not isinstance(self.interval_minutes, int):
            raise SettingsError("'interval_minutes' must be an integer")
        if self.interval_minutes < 1:
            raise SettingsError("'interval_minutes' must be >= 1")
        if self.retry_delay_seconds < 0:
            raise SettingsError("'retry_delay_seconds' must be >= 0")
        if self.max_retry_delay_seconds < self.retry_delay_seconds:
            raise SettingsError(
                "'max_retry_delay_seconds' must be >= 'retry_delay_seconds'"
            )
        self.log_level = str(self.log_level).upper()

    @property
    def interval_seconds(self) -> float:
        return self.interval_minutes * 60.0
