"""Shared fixtures for powerposition tests."""

from __future__ import annotations

import logging
import sys
from datetime import date, datetime
from pathlib import Path

import pytest

# Ensure src/ is on the path for editable-style imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from powerposition.cancellation import CancellationToken
from powerposition.log import LOGGER_NAME
from powerposition.models.trade import Trade, TradePeriod
from powerposition.providers.mock import MockPowerProvider

TRADE_DATE = date(2024, 1, 15)
EXTRACT_TIME = datetime(2024, 1, 15, 9, 5, 42)


@pytest.fixture
def mock_provider() -> MockPowerProvider:
    return MockPowerProvider(seed=42)


@pytest.fixture
def token() -> CancellationToken:
    return CancellationToken()


@pytest.fixture
def fixed_clock():
    return lambda: EXTRACT_TIME


@pytest.fixture
def sample_trades() -> list[Trade]:
    """Two full-day trades: flat 100 and a ramp 1..24."""
    flat = Trade(
        date=TRADE_DATE,
        periods=tuple(TradePeriod(p, 100.0) for p in range(1, 25)),
        trade_id="flat",
    )
    ramp = Trade(
        date=TRADE_DATE,
        periods=tuple(TradePeriod(p, float(p)) for p in range(1, 25)),
        trade_id="ramp",
    )
    return [flat, ramp]


@pytest.fixture
def clean_logger():
    """Isolate the package logger from handlers installed by configure_logging."""
    logger = logging.getLogger(LOGGER_NAME)
    saved = (list(logger.handlers), logger.level, logger.propagate)
    logger.handlers.clear()
    yield logger
    for handler in logger.handlers:
        handler.close()
    logger.handlers[:] = saved[0]
    logger.setLevel(saved[1])
    logger.propagate = saved[2]
