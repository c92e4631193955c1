"""Resilient fetcher: retries the trading service until success or cancellation."""

from __future__ import annotations

import logging
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from datetime import date, datetime
from typing import Callable

from powerposition.cancellation import CancellationToken
from powerposition.errors import OperationCancelled, PowerServiceError
from powerposition.models.trade import Trade
from powerposition.providers.base import BasePowerProvider


class ResilientFetcher:
    """Fetch today's trades, retrying every failure without limit.

    Each provider call runs on a single worker thread so that a shutdown
    request can abandon a call that is still in flight. Between failed
    attempts the fetcher backs off exponentially, starting at
    ``retry_delay`` seconds and capped at ``max_retry_delay``; a
    ``retry_delay`` of 0 retries immediately.

    Usage::

        with ResilientFetcher(provider, logger=logger) as fetcher:
            trades = fetcher.fetch(token)
    """

    def __init__(
        self,
        provider: BasePowerProvider,
        logger: logging.Logger | None = None,
        retry_delay: float = 1.0,
        max_retry_delay: float = 30.0,
        poll_interval: float = 0.1,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        if retry_delay < 0 or max_retry_delay < retry_delay:
            raise ValueError("require 0 <= retry_delay <= max_retry_delay")
        self.provider = provider
        self.logger = logger or logging.getLogger(__name__)
        self.retry_delay = retry_delay
        self.max_retry_delay = max_retry_delay
        self.poll_interval = poll_interval
        self._clock = clock
        self._executor: ThreadPoolExecutor | None = None

    # ------------------------------------------------------------------ api

    def fetch(self, token: CancellationToken) -> list[Trade]:
        """Return every trade for the current local date.

        An empty result is returned as an empty list. Failures are logged
        and retried.

        Raises:
            OperationCancelled: ``token`` was cancelled before a result arrived.
        """
        query_date = self._clock().date()
        attempt = 0
        while True:
            token.raise_if_cancelled()
            attempt += 1
            try:
                trades = self._call(query_date, token)
            except OperationCancelled:
                raise
            except PowerServiceError as e:
                self.logger.error(
                    "Error fetching data from %s: %s. Retrying...",
                    self.provider.describe(), e,
                )
            except Exception as e:
                self.logger.error(
                    "Unexpected error while fetching data: %s. Retrying...", e,
                )
            else:
                return list(trades or [])

            delay = self.backoff(attempt)
            if delay > 0 and token.wait(delay):
                token.raise_if_cancelled()

    def backoff(self, attempt: int) -> float:
        """Delay in seconds after the ``attempt``-th consecutive failure."""
        if self.retry_delay == 0:
            return 0.0
        return min(self.retry_delay * 2 ** (attempt - 1), self.max_retry_delay)

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None

    def __enter__(self) -> ResilientFetcher:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # ------------------------------------------------------------ internal

    def _call(self, query_date: date, token: CancellationToken) -> list[Trade] | None:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=1, thread_name_prefix="power-fetch"
            )
        future: Future = self._executor.submit(self.provider.get_trades, query_date)
        while True:
            done, _ = wait([future], timeout=self.poll_interval, return_when=FIRST_COMPLETED)
            if done:
                return future.result()
            if token.cancelled:
                future.cancel()
                # The abandoned call keeps the worker busy; start a fresh pool
                # if this fetcher is ever used again.
                self.close()
                token.raise_if_cancelled()
