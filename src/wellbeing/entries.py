from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Callable

from ._util import _now_iso
from .storage import Slots

logger = logging.getLogger("wellbeing.entries")

STORAGE_KEY = "wellbeing_entries_v1"


@dataclass(frozen=True)
class MoodEntry:
    id: str
    time: str
    mood: str
    intensity: int

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "time": self.time, "mood": self.mood, "intensity": self.intensity}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> MoodEntry:
        """Build an entry from a persisted record.

        Records written before entries carried their own id use the timestamp as id,
        so deleting them still works the way it always did.
        """
        time = str(raw["time"])
        return cls(
            id=str(raw.get("id") or time),
            time=time,
            mood=str(raw["mood"]),
            intensity=_stored_intensity(raw["intensity"]),
        )


def _stored_intensity(value: Any) -> int:
    # whole numbers only; 7.0 is accepted as 7
    if isinstance(value, bool):
        raise TypeError(f"intensity must be a number, not {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise ValueError(f"intensity must be a whole number, not {value!r}")


Listener = Callable[[list[MoodEntry]], None]


class EntryStore:
    """Owns the mood entry list kept in a single slot.

    Every mutation reads the whole list, changes it, writes the whole list back and
    then tells subscribers about the new state.
    """

    def __init__(
        self,
        slots: Slots,
        key: str = STORAGE_KEY,
        clock: Callable[[], str] | None = None,
        id_factory: Callable[[], str] | None = None,
    ):
        self.slots = slots
        self.key = key
        self._clock = clock or _now_iso
        self._id_factory = id_factory or (lambda: uuid.uuid4().hex)
        self._listeners: list[Listener] = []

    # -------- Reads --------

    def read_all(self) -> list[MoodEntry]:
        blob = self.slots.get(self.key)
        if not blob:
            return []

        try:
            raw = json.loads(blob)
        except json.JSONDecodeError:
            logger.warning("Stored entries under %r are not valid JSON; treating as empty", self.key)
            return []

        if not isinstance(raw, list):
            logger.warning("Stored entries under %r are not a list; treating as empty", self.key)
            return []

        out: list[MoodEntry] = []
        for i, rec in enumerate(raw):
            if not isinstance(rec, dict):
                logger.warning("Skipping entry #%d: not an object", i)
                continue
            try:
                out.append(MoodEntry.from_dict(rec))
            except KeyError as e:
                logger.warning("Skipping entry #%d: missing field %s", i, e)
            except (TypeError, ValueError) as e:
                logger.warning("Skipping entry #%d: %s", i, e)
        return out

    # -------- Mutations --------

    def append(self, mood: str, intensity: int) -> MoodEntry:
        entries = self.read_all()
        entry = MoodEntry(id=self._id_factory(), time=self._clock(), mood=mood, intensity=intensity)
        entries.append(entry)
        self._write(entries)
        logger.info("Saved mood %s (%s) as %s", entry.mood, entry.intensity, entry.id)
        self._notify(entries)
        return entry

    def delete_by_id(self, entry_id: str) -> None:
        entries = self.read_all()
        kept = [e for e in entries if e.id != entry_id]
        removed = len(entries) - len(kept)
        self._write(kept)
        if removed:
            logger.info("Deleted %d entry(ies) with id %s", removed, entry_id)
        else:
            logger.debug("Delete of unknown id %s: nothing removed", entry_id)
        self._notify(kept)

    def clear_all(self) -> None:
        self.slots.remove(self.key)
        logger.info("Cleared all mood entries")
        self._notify([])

    # -------- Change notification --------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, entries: list[MoodEntry]) -> None:
        for listener in list(self._listeners):
            listener(list(entries))

    def _write(self, entries: list[MoodEntry]) -> None:
        blob = json.dumps([e.to_dict() for e in entries], ensure_ascii=False)
        self.slots.set(self.key, blob)
        logger.debug("Wrote %d entries to slot %r", len(entries), self.key)
