from __future__ import annotations

import random

QUOTES: tuple[str, ...] = (
    "Believe in yourself!",
    "Every day is a new beginning.",
    "You are stronger than you think.",
    "Small steps lead to big changes.",
    "Keep going, you’re doing great!",
    "Progress, not perfection.",
)


def random_quote(rng: random.Random | None = None) -> str:
    return (rng or random).choice(QUOTES)
