from __future__ import annotations

import csv
import io
import logging
from pathlib import Path
from typing import Sequence

from .entries import MoodEntry

logger = logging.getLogger("wellbeing.export")

EXPORT_FILENAME = "mood_history.csv"
EXPORT_MIME = "text/csv"

CSV_FIELDS = ["time", "mood", "intensity"]


class NothingToExport(Exception):
    """Raised when an export is requested for an empty entry list."""

    def __init__(self) -> None:
        super().__init__("No entries to export")


def to_csv(entries: Sequence[MoodEntry]) -> str:
    """
    Header + one row per entry, stored (chronological) order.
    Every field quoted, embedded quotes doubled, rows joined by "\\n",
    no trailing newline.
    """
    if not entries:
        raise NothingToExport()

    buf = io.StringIO()
    w = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    w.writerow(CSV_FIELDS)
    for e in entries:
        w.writerow([e.time, e.mood, e.intensity])
    return buf.getvalue().removesuffix("\n")


def write_csv(entries: Sequence[MoodEntry], out_path: Path) -> Path:
    text = to_csv(entries)  # raises before any file is touched

    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with out_path.open("w", newline="", encoding="utf-8") as f:
        f.write(text)
    logger.info("Exported %d mood rows to %s", len(entries), out_path)
    return out_path
