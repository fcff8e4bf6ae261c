"""Tests for breathing.BreathingTimer using a fake Tk scheduler."""

from __future__ import annotations

import pytest

from wellbeing.breathing import IDLE_TEXT, PHASE_MS, PHASES, SCALE_FULL, SCALE_REST, BreathingTimer


class FakeScheduler:
    def __init__(self):
        self.jobs: dict[str, tuple[int, object]] = {}
        self.cancelled: list[str] = []
        self._n = 0

    def after(self, ms, func):
        self._n += 1
        job = f"after#{self._n}"
        self.jobs[job] = (ms, func)
        return job

    def after_cancel(self, id):
        self.cancelled.append(id)
        self.jobs.pop(id, None)

    def fire(self) -> None:
        # run the single pending job, like Tk would after PHASE_MS
        assert len(self.jobs) == 1
        job, (_ms, func) = self.jobs.popitem()
        func()


@pytest.fixture()
def sched() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture()
def seen() -> list[tuple[str, float]]:
    return []


@pytest.fixture()
def timer(sched, seen) -> BreathingTimer:
    return BreathingTimer(sched, lambda text, scale: seen.append((text, scale)))


# ---- start ----


def test_start_shows_inhale_and_schedules(timer, sched, seen):
    timer.start()
    assert timer.running
    assert seen == [(PHASES[0], SCALE_FULL)]
    [(ms, _)] = sched.jobs.values()
    assert ms == PHASE_MS


def test_start_twice_is_idempotent(timer, sched, seen):
    timer.start()
    timer.start()
    assert len(sched.jobs) == 1
    assert len(seen) == 1


# ---- ticking ----


def test_phases_cycle_with_scale(timer, sched, seen):
    timer.start()
    for _ in range(3):
        sched.fire()
    assert seen == [
        ("Inhale (4s)", SCALE_FULL),
        ("Hold (4s)", SCALE_FULL),
        ("Exhale (4s)", SCALE_REST),
        ("Inhale (4s)", SCALE_FULL),
    ]
    assert len(sched.jobs) == 1


# ---- stop ----


def test_stop_cancels_pending_job(timer, sched, seen):
    timer.start()
    sched.fire()
    timer.stop()
    assert not timer.running
    assert sched.jobs == {}
    assert len(sched.cancelled) == 1
    assert seen[-1] == (IDLE_TEXT, SCALE_REST)


def test_stop_from_phase_callback_does_not_rearm(sched):
    def on_phase(text, _scale):
        if text == "Hold (4s)":
            timer.stop()

    timer = BreathingTimer(sched, on_phase)
    timer.start()
    sched.fire()
    assert not timer.running
    assert sched.jobs == {}


def test_stop_when_idle_is_safe(timer, sched, seen):
    timer.stop()
    timer.stop()
    assert sched.cancelled == []
    assert seen == [(IDLE_TEXT, SCALE_REST), (IDLE_TEXT, SCALE_REST)]


def test_restart_after_stop_begins_at_inhale(timer, sched, seen):
    timer.start()
    sched.fire()
    sched.fire()
    timer.stop()
    timer.start()
    assert seen[-1] == (PHASES[0], SCALE_FULL)


# ---- context manager ----


def test_context_manager_stops_on_exit(timer, sched):
    with timer:
        assert timer.running
    assert not timer.running
    assert sched.jobs == {}


def test_context_manager_stops_on_error(timer, sched):
    with pytest.raises(RuntimeError):
        with timer:
            raise RuntimeError("dialog went away")
    assert not timer.running
    assert sched.jobs == {}
