"""Tests for storage.load_json, storage.save_json and the slot backends."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from wellbeing.storage import JsonFileSlots, MemorySlots, load_json, save_json


@pytest.fixture()
def tmp_json(tmp_path: Path) -> Path:
    return tmp_path / "data.json"


# ---- save_json ----


def test_save_creates_file(tmp_json):
    save_json(tmp_json, {"key": "value"})
    assert tmp_json.exists()


def test_save_writes_valid_json(tmp_json):
    save_json(tmp_json, {"a": 1, "b": [1, 2, 3]})
    data = json.loads(tmp_json.read_text())
    assert data == {"a": 1, "b": [1, 2, 3]}


def test_save_creates_parent_dirs(tmp_path):
    deep = tmp_path / "a" / "b" / "c" / "data.json"
    save_json(deep, {"x": 1})
    assert deep.exists()


def test_save_is_atomic_no_tmp_left(tmp_json):
    save_json(tmp_json, {"x": 1})
    tmp = tmp_json.with_name(tmp_json.name + ".tmp")
    assert not tmp.exists()


@pytest.mark.skipif(os.name == "nt", reason="POSIX permissions")
def test_save_sets_permissions(tmp_json):
    save_json(tmp_json, {})
    mode = oct(os.stat(tmp_json).st_mode & 0o777)
    assert mode == "0o600"


# ---- load_json ----


def test_load_missing_returns_empty_dict(tmp_json):
    assert load_json(tmp_json) == {}


def test_load_missing_does_not_create_file(tmp_json):
    load_json(tmp_json)
    assert not tmp_json.exists()


def test_load_empty_file_returns_empty_dict(tmp_json):
    tmp_json.write_text("", encoding="utf-8")
    assert load_json(tmp_json) == {}


def test_load_corrupt_returns_empty_and_backs_up(tmp_json):
    tmp_json.write_text("not valid json {{{{", encoding="utf-8")
    result = load_json(tmp_json)
    assert result == {}
    backups = list(tmp_json.parent.glob("*.corrupt-*.json"))
    assert len(backups) == 1
    assert backups[0].read_text(encoding="utf-8") == "not valid json {{{{"
    assert json.loads(tmp_json.read_text(encoding="utf-8")) == {}


def test_load_non_utf8_returns_empty_and_backs_up(tmp_json):
    raw = b'{"wellbeing_entries_v1": "\xff\xfe"}'
    tmp_json.write_bytes(raw)
    assert load_json(tmp_json) == {}
    backups = list(tmp_json.parent.glob("*.corrupt-*.json"))
    assert len(backups) == 1
    assert backups[0].read_bytes() == raw
    assert json.loads(tmp_json.read_text(encoding="utf-8")) == {}


def test_file_slots_non_utf8_file_reads_none(tmp_json):
    tmp_json.write_bytes(b'{"k": "\xff\xfe"}')
    assert JsonFileSlots(tmp_json).get("k") is None


def test_load_non_dict_json_returns_empty(tmp_json):
    tmp_json.write_text(json.dumps([1, 2, 3]), encoding="utf-8")
    assert load_json(tmp_json) == {}


def test_roundtrip(tmp_json):
    original = {"wellbeing_entries_v1": '[{"time": "2026-01-01T09:00:00.000Z", "mood": "Happy", "intensity": 7}]'}
    save_json(tmp_json, original)
    assert load_json(tmp_json) == original


# ---- MemorySlots ----


def test_memory_slots_get_set_remove():
    slots = MemorySlots()
    assert slots.get("k") is None
    slots.set("k", "[]")
    assert slots.get("k") == "[]"
    slots.remove("k")
    assert slots.get("k") is None


def test_memory_slots_remove_missing_is_noop():
    slots = MemorySlots({"other": "x"})
    slots.remove("k")
    assert slots.data == {"other": "x"}


# ---- JsonFileSlots ----


def test_file_slots_missing_file_reads_none(tmp_json):
    assert JsonFileSlots(tmp_json).get("k") is None


def test_file_slots_set_persists_blob(tmp_json):
    JsonFileSlots(tmp_json).set("k", '["a"]')
    assert json.loads(tmp_json.read_text(encoding="utf-8")) == {"k": '["a"]'}
    assert JsonFileSlots(tmp_json).get("k") == '["a"]'


def test_file_slots_keep_other_keys(tmp_json):
    save_json(tmp_json, {"other": "keep me"})
    slots = JsonFileSlots(tmp_json)
    slots.set("k", "[]")
    slots.remove("k")
    assert load_json(tmp_json) == {"other": "keep me"}


def test_file_slots_remove_missing_does_not_create_file(tmp_json):
    JsonFileSlots(tmp_json).remove("k")
    assert not tmp_json.exists()


def test_file_slots_non_string_value_reads_none(tmp_json):
    save_json(tmp_json, {"k": [1, 2]})
    assert JsonFileSlots(tmp_json).get("k") is None


def test_file_slots_corrupt_file_reads_none(tmp_json):
    tmp_json.write_text("{oops", encoding="utf-8")
    assert JsonFileSlots(tmp_json).get("k") is None
