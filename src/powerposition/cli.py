"""Command-line entry point for the power position service."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence

from powerposition import create_scheduler
from powerposition.cancellation import CancellationToken, SignalCancellation
from powerposition.config import PeriodIndexPolicy, PowerPositionConfig
from powerposition.errors import PowerPositionError
from powerposition.log import configure_logging
from powerposition.settings import default_strategies, resolve_settings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="powerposition",
        description="Write an intra-day power position CSV on a fixed interval.",
    )
    parser.add_argument(
        "output_folder", nargs="?",
        help="Existing folder for the reports (needs INTERVAL_MINUTES too).",
    )
    parser.add_argument(
        "interval_minutes", nargs="?",
        help="Positive number of minutes between extracts.",
    )
    parser.add_argument(
        "--config", default=None,
        help="JSON settings file (default: ./appsettings.json).",
    )
    parser.add_argument("--provider", default="mock", help="Provider name or dotted class path.")
    parser.add_argument(
        "--on-invalid-period",
        choices=[p.value for p in PeriodIndexPolicy],
        default=PeriodIndexPolicy.FAIL.value,
        help="fail the tick or skip the record when a period index is outside 1..24.",
    )
    parser.add_argument("--retry-delay", type=float, default=1.0, help="First fetch retry delay (s); 0 = immediate.")
    parser.add_argument("--max-retry-delay", type=float, default=30.0, help="Fetch retry delay cap (s).")
    parser.add_argument("--log-dir", default="logs", help="Folder for the daily log file.")
    parser.add_argument(
        "--log-level", type=str.upper, default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logger = configure_logging(args.log_dir, args.log_level)
    try:
        settings = resolve_settings(
            default_strategies(args.output_folder, args.interval_minutes, config_path=args.config)
        )
        config = PowerPositionConfig(
            output_folder=settings.output_folder,
            interval_minutes=settings.interval_minutes,
            provider=args.provider,
            period_index_policy=args.on_invalid_period,
            retry_delay_seconds=args.retry_delay,
            max_retry_delay_seconds=args.max_retry_delay,
            log_dir=args.log_dir,
            log_level=args.log_level,
        )
        scheduler = create_scheduler(config, logger=logger)
    except (PowerPositionError, OSError) as exc:
        logger.error("Cannot start: %s", exc)
        return 2

    logger.info(
        'Using OutputFolder="%s", IntervalMinutes=%d (from %s)',
        config.output_folder, config.interval_minutes, settings.source,
    )
    logger.info("Service started. Press Ctrl+C to stop.")

    token = CancellationToken()
    with SignalCancellation(token, logger):
        scheduler.run(token)

    logger.info("Service stopped.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
