"""Shared low-level helpers used by cli.py, gui.py and the core modules."""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone


def configure_logging(verbosity: int = 0) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _now_local() -> datetime:
    return datetime.now().astimezone()


def _now_iso() -> str:
    # UTC, millisecond precision, "Z" suffix: 2026-10-19T08:15:02.123Z
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _fmt_time(dt: datetime) -> str:
    # Windows-safe formatting
    try:
        return dt.strftime("%-I:%M %p")
    except ValueError:
        return dt.strftime("%I:%M %p").lstrip("0")


def _dt_from_entry_ts(ts: str) -> datetime | None:
    try:
        # fromisoformat only learned "Z" in 3.11
        if ts.endswith("Z"):
            ts = ts[:-1] + "+00:00"
        dt = datetime.fromisoformat(ts)
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=_now_local().tzinfo)
        return dt.astimezone()
    except (TypeError, ValueError):
        return None


def _fmt_when(ts: str) -> str:
    dt = _dt_from_entry_ts(ts)
    if dt is None:
        return ts
    return f"{dt.date().isoformat()} {_fmt_time(dt)}"
