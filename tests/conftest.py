"""Shared fixtures: virtual-time scheduler, fake git executor, workspaces."""

import asyncio
import io
import tempfile
from pathlib import Path

import pytest
from git import Repo
from rich.console import Console

from git_productivity.core.notifier import Notifier
from git_productivity.models.settings import Settings


class ManualHandle:
    def __init__(self, when, callback):
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualTask:
    """Background coroutine that only runs when the test asks for it."""

    def __init__(self, coro):
        self.coro = coro
        self.result = None
        self._done = False

    def done(self):
        return self._done

    def run(self):
        self.result = asyncio.run(self.coro)
        self._done = True
        return self.result


class ManualScheduler:
    """Scheduler driven by virtual time instead of a real event loop."""

    def __init__(self):
        self.time = 0.0
        self.handles = []
        self.tasks = []

    def now(self):
        return self.time

    def call_later(self, delay, callback):
        handle = ManualHandle(self.time + delay, callback)
        self.handles.append(handle)
        return handle

    def spawn(self, coro):
        task = ManualTask(coro)
        self.tasks.append(task)
        return task

    @property
    def pending(self):
        return [h for h in self.handles if not h.cancelled]

    def advance(self, seconds):
        """Move the clock forward, firing due wake-ups in time order."""
        target = self.time + seconds
        while True:
            due = [h for h in self.pending if h.when <= target]
            if not due:
                break
            handle = min(due, key=lambda h: h.when)
            self.handles.remove(handle)
            self.time = max(self.time, handle.when)
            handle.callback()
        self.time = target

    def run_tasks(self):
        """Run every spawned task that has not run yet."""
        results = []
        for task in self.tasks:
            if not task.done():
                results.append(task.run())
        return results


class FakeExecutor:
    """Records commands instead of running git."""

    def __init__(self, fail_on=None):
        self.calls = []
        self.fail_on = fail_on

    async def run(self, command, cwd):
        self.calls.append((command, Path(cwd)))
        if self.fail_on and command.startswith(self.fail_on):
            raise RuntimeError(f"Git command failed with exit code 1: {command}")


class RecordingNotifier(Notifier):
    """Notifier that keeps every message for assertions."""

    def __init__(self):
        super().__init__(console=Console(file=io.StringIO()))
        self.messages = []

    def info(self, message):
        self.messages.append(("info", message))
        super().info(message)

    def warning(self, message):
        self.messages.append(("warning", message))
        super().warning(message)

    def error(self, message):
        self.messages.append(("error", message))
        super().error(message)

    def of_level(self, level):
        return [message for lvl, message in self.messages if lvl == level]


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def executor():
    return FakeExecutor()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def settings():
    """Settings with a one minute countdown."""
    return Settings(timer_duration_minutes=1)


@pytest.fixture
def temp_workspace():
    """Create a temporary workspace without a git repository."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir).resolve()


@pytest.fixture
def temp_git_workspace():
    """Create a temporary workspace with an initialized git repository."""
    with tempfile.TemporaryDirectory() as temp_dir:
        project_path = Path(temp_dir).resolve()

        repo = Repo.init(project_path)
        with repo.config_writer() as config:
            config.set_value("user", "name", "Test User")
            config.set_value("user", "email", "test@example.com")

        (project_path / "main.py").write_text("print('test')\n")
        repo.index.add(["main.py"])
        repo.index.commit("Initial commit")

        yield project_path


@pytest.fixture
def failing_executor():
    """Executor whose commit step fails."""
    return FakeExecutor(fail_on="git commit")
