# tests/test_profile.py

from __future__ import annotations

from pathlib import Path

from ghctx.profile import DEFAULT_GH_TIMEOUT, Profile


def test_defaults_follow_xdg(tmp_path) -> None:
    profile = Profile({"HOME": str(tmp_path)})
    assert profile.contexts_dir == tmp_path / ".config" / "gh" / "contexts"
    assert profile.log_file == tmp_path / ".local" / "state" / "ghctx" / "logs" / "ghctx.log"
    assert profile.gh_executable == "gh"
    assert profile.gh_timeout == DEFAULT_GH_TIMEOUT
    assert profile.log_level == "DEBUG"


def test_xdg_and_overrides(tmp_path) -> None:
    profile = Profile({
        "HOME": str(tmp_path),
        "XDG_CONFIG_HOME": "/cfg",
        "GHCTX_STATE_DIR": "/state",
        "GHCTX_GH": "/opt/gh",
        "GHCTX_GH_TIMEOUT": "5",
        "GHCTX_LOG_LEVEL": "info",
    })
    assert profile.contexts_dir == Path("/cfg/gh/contexts")
    assert profile.logs_dir == Path("/state/logs")
    assert profile.gh_executable == "/opt/gh"
    assert profile.gh_timeout == 5.0
    assert profile.log_level == "INFO"

    assert Profile({"HOME": str(tmp_path), "GHCTX_DIR": "/ctx"}).contexts_dir == Path("/ctx")


def test_bad_timeout_falls_back(tmp_path) -> None:
    for raw in ("soon", "-1", "0"):
        profile = Profile({"HOME": str(tmp_path), "GHCTX_GH_TIMEOUT": raw})
        assert profile.gh_timeout == DEFAULT_GH_TIMEOUT


def test_ensure_directories(tmp_path) -> None:
    profile = Profile({"HOME": str(tmp_path)})
    profile.ensure_directories()
    assert profile.contexts_dir.is_dir()
    assert profile.logs_dir.is_dir()
