"""Box-breathing pacer for the relaxation dialog.

The timer owns exactly one pending ``after`` job while running. Whoever opens the
dialog must call ``stop()`` on every way out of it, or use the timer as a context
manager.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Protocol

logger = logging.getLogger("wellbeing.breathing")

PHASES: tuple[str, ...] = ("Inhale (4s)", "Hold (4s)", "Exhale (4s)")
PHASE_MS = 4000
IDLE_TEXT = "Click Start"

SCALE_FULL = 1.0
SCALE_REST = 0.6


class Scheduler(Protocol):
    """The subset of a Tk widget the timer needs."""

    def after(self, ms: int, func: Callable[[], Any]) -> str: ...

    def after_cancel(self, id: str) -> None: ...


PhaseCallback = Callable[[str, float], None]


class BreathingTimer:
    def __init__(self, scheduler: Scheduler, on_phase: PhaseCallback, phase_ms: int = PHASE_MS):
        self._scheduler = scheduler
        self._on_phase = on_phase
        self._phase_ms = phase_ms
        self._job: str | None = None
        self.phase: int = 0
        self.scale: float = SCALE_REST

    @property
    def running(self) -> bool:
        return self._job is not None

    def start(self) -> None:
        if self._job is not None:
            return
        self.phase = 0
        self.scale = SCALE_FULL
        self._on_phase(PHASES[self.phase], self.scale)
        self._job = self._scheduler.after(self._phase_ms, self._tick)
        logger.debug("Breathing timer started")

    def _tick(self) -> None:
        if self._job is None:
            return
        self.phase = (self.phase + 1) % len(PHASES)
        if self.phase == 0:
            self.scale = SCALE_FULL
        elif self.phase == 2:
            self.scale = SCALE_REST
        # hold keeps whatever scale inhale left
        self._on_phase(PHASES[self.phase], self.scale)
        if self._job is None:
            return  # stopped from inside on_phase
        self._job = self._scheduler.after(self._phase_ms, self._tick)

    def stop(self) -> None:
        if self._job is not None:
            self._scheduler.after_cancel(self._job)
            self._job = None
            logger.debug("Breathing timer stopped")
        self.phase = 0
        self.scale = SCALE_REST
        self._on_phase(IDLE_TEXT, self.scale)

    def __enter__(self) -> BreathingTimer:
        self.start()
        return self

    def __exit__(self, *exc: object) -> None:
        self.stop()
