"""Tests for the git-productivity command line."""

import asyncio
import io
import json
import os
import signal
import sys
from unittest.mock import patch

import pytest
from click.testing import CliRunner
from git import Repo
from rich.console import Console

from git_productivity import LOG_FILE_NAME
from git_productivity.cli.main import (
    await_detached_commits,
    main,
    resolve_workspace_roots,
    serve,
)
from git_productivity.core.notifier import Notifier
from git_productivity.core.registry import SessionRegistry
from git_productivity.models.settings import Settings


def test_status_reports_log_and_commits(temp_git_workspace):
    log_file = temp_git_workspace / LOG_FILE_NAME
    log_file.write_text("entry one\nentry two\n")
    repo = Repo(temp_git_workspace)
    repo.index.add([LOG_FILE_NAME])
    repo.index.commit("Log coding activity: now")

    runner = CliRunner()
    result = runner.invoke(main, ["status", str(temp_git_workspace)])

    assert result.exit_code == 0
    assert "Git Productivity" in result.output
    assert "yes" in result.output
    assert repo.head.commit.hexsha[:8] in result.output


def test_status_without_log(temp_workspace):
    runner = CliRunner()
    result = runner.invoke(main, ["status", str(temp_workspace)])

    assert result.exit_code == 0
    assert "no log" in result.output


def test_cleanup_removes_untracked_log(temp_workspace):
    (temp_workspace / LOG_FILE_NAME).write_text("entry\n")

    runner = CliRunner()
    result = runner.invoke(main, ["cleanup", str(temp_workspace)])

    assert result.exit_code == 0
    assert not (temp_workspace / LOG_FILE_NAME).exists()


def test_cleanup_keeps_log_in_repository(temp_git_workspace):
    (temp_git_workspace / LOG_FILE_NAME).write_text("entry\n")

    runner = CliRunner()
    result = runner.invoke(main, ["cleanup", str(temp_git_workspace)])

    assert result.exit_code == 0
    assert (temp_git_workspace / LOG_FILE_NAME).exists()
    assert "not deleted" in " ".join(result.output.split())


def test_run_rejects_invalid_duration(temp_workspace):
    runner = CliRunner()
    result = runner.invoke(
        main,
        ["run", str(temp_workspace), "--minutes", "0", "--config", str(temp_workspace / "none.json")],
    )

    assert result.exit_code != 0
    assert "Error" in result.output


def test_run_without_workspace_declines(temp_workspace):
    config_file = temp_workspace / "config.json"
    config_file.write_text(json.dumps({"debug_log": str(temp_workspace / "debug.log")}))

    runner = CliRunner()
    result = runner.invoke(
        main, ["run", str(temp_workspace / "missing"), "--config", str(config_file)]
    )

    assert result.exit_code == 0
    assert "not tracked" in " ".join(result.output.split())


def test_resolve_workspace_roots_deduplicates(temp_workspace):
    roots = resolve_workspace_roots([str(temp_workspace), str(temp_workspace / ".")])

    assert roots == [temp_workspace]


def test_await_detached_commits_gives_up_after_timeout():
    output = io.StringIO()
    notifier = Notifier(console=Console(file=output))

    async def scenario():
        finished = asyncio.ensure_future(asyncio.sleep(0))
        stuck = asyncio.ensure_future(asyncio.sleep(60))
        await finished
        await await_detached_commits([finished, stuck], 0.01, notifier)
        assert not stuck.done()
        stuck.cancel()

    asyncio.run(scenario())

    assert "did not finish" in " ".join(output.getvalue().split())


@pytest.mark.skipif(sys.platform == "win32", reason="needs POSIX signals")
def test_serve_follows_file_edits_and_signals(temp_git_workspace, notifier):
    """The daemon picks up real edits, restarts on SIGHUP and disables on SIGTERM."""
    edited = temp_git_workspace / "main.py"

    async def scenario():
        loop = asyncio.get_running_loop()
        loop.call_later(0.3, edited.write_text, "print('edited')\n")
        loop.call_later(0.8, os.kill, os.getpid(), signal.SIGHUP)
        loop.call_later(1.5, os.kill, os.getpid(), signal.SIGTERM)
        await asyncio.wait_for(
            serve(
                [temp_git_workspace],
                lambda: Settings(timer_duration_minutes=0.005),
                notifier,
                grace=5,
            ),
            timeout=20,
        )

    with patch.object(
        SessionRegistry, "pulse", autospec=True, side_effect=SessionRegistry.pulse
    ) as pulse:
        asyncio.run(scenario())

    assert any(call.args[1] == edited for call in pulse.call_args_list)

    infos = notifier.of_level("info")
    assert "Restarted tracking for 1 workspace(s)" in infos
    assert infos.count("Git Productivity disabled") == 1
    assert any("not deleted" in message for message in notifier.of_level("warning"))

    log_lines = (temp_git_workspace / LOG_FILE_NAME).read_text().splitlines()
    assert len(log_lines) >= 1
