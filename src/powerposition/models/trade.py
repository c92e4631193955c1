"""Trade and trade-period data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date


@dataclass(frozen=True)
class TradePeriod:
    """One hourly slot of a trade.

    Attributes:
        period: 1-based period index (1..24) as numbered by the trading service.
        volume: Traded volume for the period. May be negative or fractional.
    """

    period: int
    volume: float


@dataclass(frozen=True)
class Trade:
    """A single day-ahead trade and its hourly periods.

    Attributes:
        date: Trading date the trade belongs to.
        periods: Period volumes, usually one per hour of the day.
        trade_id: Provider-assigned identifier, if any.
    """

    date: date
    periods: tuple[TradePeriod, ...] = field(default_factory=tuple)
    trade_id: str | None = None
