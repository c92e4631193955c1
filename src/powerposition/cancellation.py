"""Cancellation token and signal wiring for graceful shutdown."""

from __future__ import annotations

import logging
import signal
import threading
from typing import Any

from powerposition.errors import OperationCancelled


class CancellationToken:
    """Thread-safe, one-way cancellation flag passed into every blocking wait.

    ``cancel`` may be called from any thread (or a signal handler) and is
    idempotent. Waiting code uses :meth:`wait` instead of ``time.sleep`` so a
    shutdown request interrupts it immediately.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str | None:
        return self._reason

    def cancel(self, reason: str | None = None) -> None:
        if not self._event.is_set():
            self._reason = reason
            self._event.set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block up to ``timeout`` seconds; return True if cancelled."""
        if timeout is not None and timeout <= 0:
            return self._event.is_set()
        return self._event.wait(timeout)

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelled(self._reason or "operation cancelled")


class SignalCancellation:
    """Route OS signals to a :class:`CancellationToken` while in scope.

    The previous handlers are restored on exit. While installed, SIGINT no
    longer raises ``KeyboardInterrupt``; it only cancels the token.

    Usage::

        token = CancellationToken()
        with SignalCancellation(token, logger):
            scheduler.run(token)
    """

    def __init__(
        self,
        token: CancellationToken,
        logger: logging.Logger | None = None,
        signals: tuple[int, ...] | None = None,
    ) -> None:
        self.token = token
        self.logger = logger or logging.getLogger(__name__)
        if signals is None:
            signals = (signal.SIGINT, signal.SIGTERM)
        self.signals = signals
        self._orig_handlers: dict[int, Any] = {}

    def register(self) -> None:
        for sig in self.signals:
            if sig not in self._orig_handlers:
                self._orig_handlers[sig] = signal.getsignal(sig)
                signal.signal(sig, self._handle_signal)

    def unregister(self) -> None:
        for sig, orig in list(self._orig_handlers.items()):
            signal.signal(sig, orig)
            del self._orig_handlers[sig]

    def _handle_signal(self, signum: int, _frame: Any) -> None:
        if not self.token.cancelled:
            self.logger.info("Stopping...")
        self.token.cancel(reason=f"signal {signal.Signals(signum).name}")

    def __enter__(self) -> SignalCancellation:
        self.register()
        return self

    def __exit__(self, *exc: Any) -> None:
        self.unregister()
