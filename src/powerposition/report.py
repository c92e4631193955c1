"""CSV report writer for aggregated power positions."""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path
from typing import Callable

import pandas as pd

from powerposition.errors import DataIntegrityError, ReportWriteError
from powerposition.models.bucket import TOTAL_PERIODS, AggregationBucket

HEADER = ("Local Time", "Volume")
FILENAME_PREFIX = "PowerPosition"


def _read_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


# Read once: os.umask can only be queried by setting it.
PROCESS_UMASK = _read_umask()
REPORT_MODE = 0o666 & ~PROCESS_UMASK


def report_filename(extracted_at: datetime) -> str:
    """``PowerPosition_YYYYMMDD_HHmm.csv`` for an extraction instant."""
    return f"{FILENAME_PREFIX}_{extracted_at:%Y%m%d}_{extracted_at:%H%M}.csv"


def buckets_to_df(buckets: Sequence[AggregationBucket]) -> pd.DataFrame:
    """Tabulate buckets in slot order with volumes rounded half to even."""
    if len(buckets) != TOTAL_PERIODS:
        raise DataIntegrityError(
            f"Expected {TOTAL_PERIODS} buckets, got {len(buckets)}"
        )
    ordered = sorted(buckets, key=lambda b: b.slot)
    df = pd.DataFrame(
        {
            HEADER[0]: [b.label for b in ordered],
            HEADER[1]: [float(b.volume) for b in ordered],
        }
    )
    # Series.round is half-to-even.
    df[HEADER[1]] = df[HEADER[1]].round(0).astype("int64")
    return df


def render_csv(buckets: Sequence[AggregationBucket]) -> str:
    """Render the report body: header plus one line per slot, ``\\n`` terminated."""
    return buckets_to_df(buckets).to_csv(index=False, lineterminator="\n")


class ReportWriter:
    """Write one ``PowerPosition_*.csv`` file per call.

    The file is written to a temporary sibling, fsynced, and renamed into
    place, so a reader never observes a truncated report.
    """

    def __init__(
        self,
        output_dir: Path | str,
        logger: logging.Logger | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.output_dir = Path(output_dir)
        self.logger = logger or logging.getLogger(__name__)
        self._clock = clock

    def write(self, buckets: Sequence[AggregationBucket]) -> Path:
        """Write the report and return its path.

        Raises:
            DataIntegrityError: ``buckets`` does not hold exactly 24 entries.
            ReportWriteError: The output directory is missing or not writable,
                or the write itself failed.
        """
        body = render_csv(buckets).encode("utf-8")
        extracted_at = self._clock()
        path = self.output_dir / report_filename(extracted_at)

        if not self.output_dir.is_dir():
            raise ReportWriteError(f"Output folder does not exist: {self.output_dir}")

        tmp_name: str | None = None
        try:
            with tempfile.NamedTemporaryFile(
                mode="wb",
                dir=self.output_dir,
                prefix=f".{path.stem}.",
                suffix=".tmp",
                delete=False,
            ) as fh:
                tmp_name = fh.name
                fh.write(body)
                fh.flush()
                os.fsync(fh.fileno())
            os.chmod(tmp_name, REPORT_MODE)
            os.replace(tmp_name, path)
        except OSError as exc:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise ReportWriteError(f"Failed to write {path}: {exc}") from exc

        self.logger.info("[%s] Wrote CSV: %s", f"{extracted_at:%Y-%m-%d %H:%M:%S}", path)
        return path
