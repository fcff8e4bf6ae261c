"""Tests for data path resolution and the git-repo safety guard."""

from __future__ import annotations

from pathlib import Path

import pytest

from wellbeing.paths import ENV_DATA, data_path_reason, default_data_path, resolve_data_path
from wellbeing.safety import UnsafeDataPath, assert_safe_data_path, find_git_root

# ---- resolve_data_path ----


def test_data_arg_wins(tmp_path, monkeypatch):
    monkeypatch.setenv(ENV_DATA, str(tmp_path / "env.json"))
    assert resolve_data_path(str(tmp_path / "arg.json"), "dev") == (tmp_path / "arg.json").resolve()
    assert data_path_reason(str(tmp_path / "arg.json"), "dev") == "because you passed --data"


def test_env_beats_profile(tmp_path, monkeypatch):
    monkeypatch.setenv(ENV_DATA, str(tmp_path / "env.json"))
    assert resolve_data_path(None, "dev") == (tmp_path / "env.json").resolve()
    assert ENV_DATA in data_path_reason(None, "dev")


def test_profile_path(monkeypatch):
    monkeypatch.delenv(ENV_DATA, raising=False)
    p = resolve_data_path(None, "dev")
    assert p.name == "dev.json"
    assert p.parent.name == "wellbeing"
    assert "profile" in data_path_reason(None, "dev")


def test_default_path(monkeypatch):
    monkeypatch.delenv(ENV_DATA, raising=False)
    assert resolve_data_path(None, None) == default_data_path().expanduser().resolve()
    assert default_data_path().name == "data.json"


# ---- safety ----


def test_find_git_root(tmp_path):
    (tmp_path / "repo" / ".git").mkdir(parents=True)
    nested = tmp_path / "repo" / "a" / "b"
    nested.mkdir(parents=True)
    assert find_git_root(nested) == tmp_path / "repo"


def test_refuses_path_inside_repo(tmp_path):
    (tmp_path / ".git").mkdir()
    with pytest.raises(UnsafeDataPath) as exc:
        assert_safe_data_path(tmp_path / "data.json", allow_repo_data_path=False)
    assert exc.value.repo_root == tmp_path


def test_override_allows_repo_path(tmp_path):
    (tmp_path / ".git").mkdir()
    assert_safe_data_path(tmp_path / "data.json", allow_repo_data_path=True)


def test_outside_repo_is_fine(tmp_path):
    if find_git_root(tmp_path) is not None:
        pytest.skip("tmp dir lives inside a git checkout")
    assert_safe_data_path(tmp_path / "data.json", allow_repo_data_path=False)
