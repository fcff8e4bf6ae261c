from __future__ import annotations

import json
import logging
import os
import time
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger("wellbeing.storage")


class Slots(Protocol):
    """Key-value persistence: one serialized blob per key."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, blob: str) -> None: ...

    def remove(self, key: str) -> None: ...


def _ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def load_json(path: Path) -> dict[str, Any]:
    """
    Safe load:
    - missing/empty -> {}
    - if corrupt -> backs up raw text then resets to {}
    Always returns a dict.
    """
    path = Path(path)
    if not path.exists():
        return {}

    raw = path.read_bytes()
    if not raw.strip():
        return {}

    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        # corruption guard: backup raw bytes then reset
        backup = path.with_suffix(f".corrupt-{int(time.time())}.json")
        backup.write_bytes(raw)
        save_json(path, {})
        logger.warning("Corrupt data file %s, backed up to %s and reset", path, backup)
        return {}

    if not isinstance(data, dict):
        logger.warning("Data file %s does not hold a JSON object, ignoring it", path)
        return {}
    return data


def save_json(path: Path, data: Any) -> None:
    """
    Atomic-ish save:
    - write to temp file in same directory
    - flush + fsync
    - os.replace to target
    - chmod 0600 best-effort
    """
    path = Path(path)
    _ensure_parent(path)

    tmp = path.with_name(path.name + ".tmp")

    payload = json.dumps(
        data,
        indent=2,
        sort_keys=True,
        ensure_ascii=False,
    ) + "\n"

    with open(tmp, "w", encoding="utf-8") as f:
        f.write(payload)
        f.flush()
        os.fsync(f.fileno())

    os.replace(tmp, path)

    try:
        os.chmod(path, 0o600)
    except OSError:
        logger.debug("Could not chmod %s to 0600", path)


class MemorySlots:
    """In-process slots, used by the tests and by anything that must not touch disk."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, blob: str) -> None:
        self.data[key] = blob

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileSlots:
    """Slots kept as string values inside one JSON object file.

    Every call re-reads the file, so there is no cached copy to go stale.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def get(self, key: str) -> str | None:
        value = load_json(self.path).get(key)
        if value is None:
            return None
        if not isinstance(value, str):
            logger.warning("Slot %r in %s is not a string blob, ignoring it", key, self.path)
            return None
        return value

    def set(self, key: str, blob: str) -> None:
        data = load_json(self.path)
        data[key] = blob
        save_json(self.path, data)

    def remove(self, key: str) -> None:
        data = load_json(self.path)
        if key not in data:
            return
        del data[key]
        save_json(self.path, data)
