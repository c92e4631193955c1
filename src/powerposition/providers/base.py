"""Abstract base class for trading service providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from powerposition.models.trade import Trade


class BasePowerProvider(ABC):
    """Abstract base for all power trade sources.

    A provider exposes a single blocking call. It may fail with
    :class:`~powerposition.errors.PowerServiceError` or with any other
    exception; callers treat both as transient.
    """

    @abstractmethod
    def get_trades(self, day: date) -> list[Trade]:
        """Fetch every trade for a trading date.

        Implementations must bound their own I/O with timeouts. A call
        abandoned on shutdown keeps its worker thread alive, and the
        interpreter waits for that thread before exiting.

        Args:
            day: Trading date to query.

        Returns:
            List of Trade objects, possibly empty.
        """
        ...

    def describe(self) -> str:
        """Short human-readable name used in log lines."""
        return type(self).__name__
