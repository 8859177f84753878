# tests/test_cli.py

from __future__ import annotations

import pytest
from typer.testing import CliRunner

from ghctx import __version__, cli


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def cli_env(tmp_path, monkeypatch, creds):
    for var in ("GH_TOKEN", "GH_HOST", "GHCTX_CURRENT"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("GHCTX_DIR", str(tmp_path / "contexts"))
    monkeypatch.setenv("GHCTX_STATE_DIR", str(tmp_path / "state"))
    monkeypatch.setattr(cli, "make_credentials", lambda profile, env: creds)
    return tmp_path / "contexts"


def test_version(runner) -> None:
    result = runner.invoke(cli.app, ["version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_new_list_delete(runner, cli_env) -> None:
    result = runner.invoke(cli.app, ["new", "personal"])
    assert result.exit_code == 0
    assert "Created context 'personal' (alice@github.com)" in result.output
    assert (cli_env / "personal.ctx").read_text() == "HOST=github.com\nUSER=alice\n"

    result = runner.invoke(cli.app, ["list"])
    assert result.exit_code == 0
    assert "  personal (alice@github.com)" in result.output

    result = runner.invoke(cli.app, ["delete", "personal"])
    assert result.exit_code == 0
    assert not (cli_env / "personal.ctx").exists()


def test_errors_exit_non_zero(runner) -> None:
    result = runner.invoke(cli.app, ["use", "ghost"])
    assert result.exit_code == 1
    assert "Context 'ghost' not found" in result.output

    runner.invoke(cli.app, ["new", "personal"])
    result = runner.invoke(cli.app, ["new", "personal"])
    assert result.exit_code == 1


def test_new_uses_exported_host(runner, monkeypatch) -> None:
    monkeypatch.setenv("GH_HOST", "git.example.com")
    result = runner.invoke(cli.app, ["new", "work"])
    assert result.exit_code == 0
    assert "(alice-corp@git.example.com)" in result.output


def test_shell_mode_use_emits_exports(runner) -> None:
    runner.invoke(cli.app, ["new", "work"])
    result = runner.invoke(cli.app, ["--shell", "bash", "use", "work"])
    assert result.exit_code == 0
    assert "export GH_TOKEN=tok-alice" in result.stdout
    assert "export GH_HOST=github.com" in result.stdout
    assert "export GHCTX_CURRENT=work" in result.stdout


def test_shell_mode_failure_emits_nothing(runner) -> None:
    result = runner.invoke(cli.app, ["--shell", "bash", "use", "ghost"])
    assert result.exit_code == 1
    assert "export" not in result.stdout


def test_shell_mode_delete_active_unsets(runner, monkeypatch) -> None:
    runner.invoke(cli.app, ["new", "work"])
    monkeypatch.setenv("GH_TOKEN", "tok-alice")
    monkeypatch.setenv("GH_HOST", "github.com")
    monkeypatch.setenv("GHCTX_CURRENT", "work")

    result = runner.invoke(cli.app, ["--shell", "zsh", "delete", "work"])
    assert result.exit_code == 0
    assert "unset GH_TOKEN" in result.stdout
    assert "unset GH_HOST" in result.stdout
    assert "unset GHCTX_CURRENT" in result.stdout


def test_current_and_prompt_follow_shell_state(runner, monkeypatch) -> None:
    runner.invoke(cli.app, ["new", "work"])
    monkeypatch.setenv("GHCTX_CURRENT", "work")

    result = runner.invoke(cli.app, ["current"])
    assert "Active: work (alice@github.com)" in result.output

    result = runner.invoke(cli.app, ["prompt"])
    assert result.stdout == "[gh:work] "


def test_unknown_shell_rejected(runner) -> None:
    result = runner.invoke(cli.app, ["--shell", "fish", "list"])
    assert result.exit_code != 0


def test_init_prints_script(runner) -> None:
    result = runner.invoke(cli.app, ["init", "bash"])
    assert result.exit_code == 0
    assert "_ghctx_auto" in result.stdout

    result = runner.invoke(cli.app, ["init", "fish"])
    assert result.exit_code == 1


def test_init_and_version_leave_state_dir_alone(runner, tmp_path) -> None:
    runner.invoke(cli.app, ["version"])
    runner.invoke(cli.app, ["init", "zsh"])
    assert not (tmp_path / "state").exists()


def test_commands_create_log_file_lazily(runner, tmp_path, monkeypatch) -> None:
    from ghctx import logger as logging_setup

    monkeypatch.setattr(logging_setup, "_file_sink_id", None)
    runner.invoke(cli.app, ["list"])
    assert (tmp_path / "state" / "logs").is_dir()
    logging_setup._logger.remove(logging_setup._file_sink_id)
