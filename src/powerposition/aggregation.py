"""Period aggregation: trades to 24 fixed local-time buckets."""

from __future__ import annotations

import logging
import numbers
from collections.abc import Iterable

from powerposition.config import PeriodIndexPolicy
from powerposition.errors import DataIntegrityError
from powerposition.models.bucket import PERIOD_LABELS, TOTAL_PERIODS, AggregationBucket
from powerposition.models.trade import Trade, TradePeriod


def is_valid_period(period: TradePeriod) -> bool:
    index = period.period
    if isinstance(index, bool) or not isinstance(index, numbers.Integral):
        return False
    return bool(1 <= index <= TOTAL_PERIODS)


def aggregate_trades(
    trades: Iterable[Trade] | None,
    policy: PeriodIndexPolicy = PeriodIndexPolicy.FAIL,
    logger: logging.Logger | None = None,
) -> list[AggregationBucket]:
    """Sum period volumes across trades into 24 buckets ordered by slot.

    Period ``p`` lands in slot ``p - 1``; labels come from the fixed
    rotation table, so slot 0 (period 1) is ``"23:00"``. Identical periods
    from different trades are summed, never deduplicated.

    Args:
        trades: Trades for one query date. ``None`` or empty yields 24
            zero-volume buckets.
        policy: Handling of a period index outside 1..24.
        logger: Receives a warning per skipped period under ``SKIP``.

    Raises:
        DataIntegrityError: Out-of-range period index under ``FAIL``.
    """
    volumes = [0.0] * TOTAL_PERIODS

    for trade in trades or ():
        for period in trade.periods:
            if not is_valid_period(period):
                message = (
                    f"Period index {period.period!r} outside 1..{TOTAL_PERIODS} "
                    f"in trade {trade.trade_id or '<unnamed>'} for {trade.date}"
                )
                if policy is PeriodIndexPolicy.FAIL:
                    raise DataIntegrityError(message)
                (logger or logging.getLogger(__name__)).warning("%s; skipped", message)
                continue
            volumes[period.period - 1] += period.volume

    return [
        AggregationBucket(slot=slot, label=PERIOD_LABELS[slot], volume=volume)
        for slot, volume in enumerate(volumes)
    ]
