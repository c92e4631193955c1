"""Aggregation bucket model and the fixed local-time label table."""

from __future__ import annotations

from dataclasses import dataclass

TOTAL_PERIODS = 24

# Period 1 of a trading day starts at 23:00 the previous evening, so each
# label is one hour behind its slot index.
PERIOD_LABELS: tuple[str, ...] = tuple(
    f"{(slot + TOTAL_PERIODS - 1) % TOTAL_PERIODS:02d}:00"
    for slot in range(TOTAL_PERIODS)
)


def slot_label(slot: int) -> str:
    """Return the ``HH:00`` label for a 0-based slot index."""
    return PERIOD_LABELS[slot]


@dataclass(frozen=True)
class AggregationBucket:
    """Aggregated volume for one hourly slot.

    Attributes:
        slot: 0-based slot index (0..23).
        label: Local-time label, e.g. ``"23:00"`` for slot 0.
        volume: Summed volume of every trade period mapped to this slot.
    """

    slot: int
    label: str
    volume: float = 0.0
