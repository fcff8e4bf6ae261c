"""Display projections of the entry list: history order, per-mood counts and averages.

Everything here is recomputed from scratch on each call.
"""

from __future__ import annotations

import math
from typing import Sequence

from .entries import MoodEntry
from .moods import MOODS


def _round1(x: float) -> float:
    # half-up, so 2.25 -> 2.3 (round() would give 2.2)
    return math.floor(x * 10 + 0.5) / 10


def history_view(entries: Sequence[MoodEntry]) -> list[MoodEntry]:
    return list(reversed(entries))  # newest first


def category_counts(entries: Sequence[MoodEntry]) -> dict[str, int]:
    counts = {m: 0 for m in MOODS}
    for e in entries:
        if e.mood in counts:
            counts[e.mood] += 1
    return counts


def category_average_intensity(entries: Sequence[MoodEntry]) -> dict[str, float]:
    """Mean intensity per mood, one decimal. A mood with no entries is 0."""
    by_mood: dict[str, list[float]] = {m: [] for m in MOODS}
    for e in entries:
        if e.mood in by_mood:
            by_mood[e.mood].append(float(e.intensity))

    out: dict[str, float] = {}
    for m, vals in by_mood.items():
        if not vals:
            out[m] = 0
            continue
        out[m] = _round1(sum(vals) / len(vals))
    return out


def chart_series(entries: Sequence[MoodEntry]) -> tuple[list[str], list[int], list[float]]:
    counts = category_counts(entries)
    avgs = category_average_intensity(entries)
    labels = list(MOODS)
    return labels, [counts[m] for m in labels], [avgs[m] for m in labels]
