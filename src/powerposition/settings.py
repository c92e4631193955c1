"""Service settings resolution: command line, then config file, then defaults.

Each strategy returns a :class:`ServiceSettings` or ``None``; the first one
that yields wins. Invalid input makes a strategy pass, not raise.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Any

from powerposition.errors import SettingsError

CONFIG_FILENAME = "appsettings.json"
DEFAULT_FOLDER_NAME = "reports"
DEFAULT_INTERVAL_MINUTES = 15

SettingsStrategy = Callable[[], "ServiceSettings | None"]


@dataclass(frozen=True)
class ServiceSettings:
    """Resolved output folder and tick interval.

    Attributes:
        output_folder: Existing directory for report files.
        interval_minutes: Positive tick interval in minutes.
        source: Which strategy produced the settings ("args", "config", "defaults").
    """

    output_folder: Path
    interval_minutes: int
    source: str


def parse_interval(raw: Any) -> int | None:
    """Positive integer minutes from an int or numeric string, else None."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, str):
        try:
            value = int(raw.strip())
        except ValueError:
            return None
    else:
        return None
    return value if value > 0 else None


def _existing_folder(raw: Any) -> Path | None:
    if not isinstance(raw, str) or not raw.strip():
        return None
    folder = Path(raw)
    return folder if folder.is_dir() else None


def settings_from_args(
    output_folder: str | None,
    interval: str | None,
) -> ServiceSettings | None:
    """Use positional command-line values when both are present and valid."""
    if output_folder is None or interval is None:
        return None
    folder = _existing_folder(output_folder)
    minutes = parse_interval(interval)
    if folder is None or minutes is None:
        return None
    return ServiceSettings(folder, minutes, source="args")


def settings_from_config_file(path: Path | str) -> ServiceSettings | None:
    """Read ``OutputFolder`` and ``IntervalMinutes`` from a JSON file.

    A missing file, unparseable JSON, missing keys or invalid values all
    yield ``None``.
    """
    config_path = Path(path)
    if not config_path.is_file():
        return None
    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return None
    if not isinstance(raw, dict):
        return None

    folder = _existing_folder(raw.get("OutputFolder"))
    minutes = parse_interval(raw.get("IntervalMinutes"))
    if folder is None or minutes is None:
        return None
    return ServiceSettings(folder, minutes, source="config")


def settings_from_defaults(cwd: Path | str | None = None) -> ServiceSettings:
    """``<cwd>/reports`` (created if missing) every 15 minutes."""
    root = Path(cwd) if cwd else Path.cwd()
    folder = root / DEFAULT_FOLDER_NAME
    folder.mkdir(parents=True, exist_ok=True)
    return ServiceSettings(folder, DEFAULT_INTERVAL_MINUTES, source="defaults")


def default_strategies(
    output_folder: str | None = None,
    interval: str | None = None,
    config_path: Path | str | None = None,
    cwd: Path | str | None = None,
) -> list[SettingsStrategy]:
    """The standard args -> config file -> defaults chain."""
    root = Path(cwd) if cwd else Path.cwd()
    config_file = Path(config_path) if config_path else root / CONFIG_FILENAME
    return [
        partial(settings_from_args, output_folder, interval),
        partial(settings_from_config_file, config_file),
        partial(settings_from_defaults, root),
    ]


def resolve_settings(strategies: Sequence[SettingsStrategy]) -> ServiceSettings:
    """Return the first settings any strategy yields."""
    for strategy in strategies:
        settings = strategy()
        if settings is not None:
            return settings
    raise SettingsError("No settings strategy produced a usable output folder and interval")


__all__ = [
    "ServiceSettings",
    "SettingsStrategy",
    "CONFIG_FILENAME",
    "DEFAULT_INTERVAL_MINUTES",
    "parse_interval",
    "settings_from_args",
    "settings_from_config_file",
    "settings_from_defaults",
    "default_strategies",
    "resolve_settings",
]
