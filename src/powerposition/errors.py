"""Power position error types."""

from __future__ import annotations

from enum import Enum


class PowerPositionErrorCode(Enum):
    """Error classification codes."""

    PROVIDER_ERROR = "provider_error"
    TIMEOUT = "timeout"
    UNAVAILABLE = "unavailable"
    INVALID_PERIOD = "invalid_period"
    WRITE_FAILED = "write_failed"
    INVALID_SETTINGS = "invalid_settings"


class PowerPositionError(Exception):
    """Power position exception with error code and retryable flag.

    Attributes:
        message: Human-readable error description.
        code: Structured error code for programmatic handling.
        retryable: Whether the failed operation may succeed if attempted again.
    """

    def __init__(
        self,
        message: str,
        code: PowerPositionErrorCode = PowerPositionErrorCode.PROVIDER_ERROR,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.retryable = retryable


class PowerServiceError(PowerPositionError):
    """The upstream trading service failed to return trades."""

    def __init__(
        self,
        message: str,
        code: PowerPositionErrorCode = PowerPositionErrorCode.PROVIDER_ERROR,
    ) -> None:
        super().__init__(message, code=code, retryable=True)


class DataIntegrityError(PowerPositionError):
    """Upstream data broke its contract (e.g. a period index outside 1..24)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code=PowerPositionErrorCode.INVALID_PERIOD)


class ReportWriteError(PowerPositionError):
    """A report file could not be written."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code=PowerPositionErrorCode.WRITE_FAILED)


class SettingsError(PowerPositionError, ValueError):
    """Invalid or unresolvable service settings."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code=PowerPositionErrorCode.INVALID_SETTINGS)


class OperationCancelled(Exception):
    """Raised when a shutdown request interrupts a fetch or a scheduler wait.

    Not a :class:`PowerPositionError`: cancellation ends the
    service loop and is never reported as a failure.
    """
