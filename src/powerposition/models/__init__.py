"""Power position models."""

from powerposition.models.bucket import (
    PERIOD_LABELS,
    TOTAL_PERIODS,
    AggregationBucket,
    slot_label,
)
from powerposition.models.trade import Trade, TradePeriod

__all__ = [
    "Trade",
    "TradePeriod",
    "AggregationBucket",
    "PERIOD_LABELS",
    "TOTAL_PERIODS",
    "slot_label",
]
