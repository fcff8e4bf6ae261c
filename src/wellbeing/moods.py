from __future__ import annotations

MOODS: tuple[str, ...] = ("Happy", "Neutral", "Stressed", "Sad", "Excited")

INTENSITY_MIN = 1
INTENSITY_MAX = 10
DEFAULT_INTENSITY = 5


def parse_mood(value: str | None) -> str:
    """Match a mood label case-insensitively; returns the canonical spelling."""
    s = str(value or "").strip().lower()
    for label in MOODS:
        if label.lower() == s:
            return label
    raise ValueError(f"Mood must be one of: {', '.join(MOODS)} (got {value!r})")


def parse_intensity(value: object) -> int:
    if isinstance(value, bool):
        raise ValueError(f"Intensity must be a whole number (got {value!r})")
    if isinstance(value, float):
        # tk.Scale hands back floats
        if not value.is_integer():
            raise ValueError(f"Intensity must be a whole number (got {value!r})")
        n = int(value)
    else:
        s = str(value).strip()
        if not s.lstrip("-").isdigit():
            raise ValueError(f"Intensity must be a whole number (got {value!r})")
        n = int(s)
    if not (INTENSITY_MIN <= n <= INTENSITY_MAX):
        raise ValueError(f"Intensity must be between {INTENSITY_MIN} and {INTENSITY_MAX}")
    return n
