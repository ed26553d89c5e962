"""Per-workspace activity timer and commit orchestration."""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from git_productivity import LOG_FILE_NAME
from git_productivity.core.log_store import LogStore
from git_productivity.core.notifier import Notifier
from git_productivity.core.vcs import GitProbe, ShellCommitExecutor, commit_log_file
from git_productivity.models.log_entry import LogEntry
from git_productivity.models.settings import Settings


class WorkspaceSession:
    """Banked countdown for one workspace root.

    Every activity pulse subtracts the time elapsed since the last resume from
    ``remaining`` and reschedules the wake-up, so ``remaining`` only shrinks
    until the countdown fires. A fire writes a log entry, commits the log file
    in the background and starts a fresh countdown.
    """

    def __init__(
        self,
        workspace_root: Path,
        settings: Settings,
        scheduler: Any,
        log_store: LogStore,
        probe: GitProbe,
        executor: ShellCommitExecutor,
        notifier: Notifier,
    ):
        self.workspace_root = Path(workspace_root).resolve()
        self.log_file = self.workspace_root / LOG_FILE_NAME
        self.settings = settings
        self.timer_duration = settings.timer_duration
        self.remaining = self.timer_duration
        self.last_resume: Optional[float] = None
        self.fire_count = 0

        self._scheduler = scheduler
        self._log_store = log_store
        self._probe = probe
        self._executor = executor
        self._notifier = notifier
        self._handle = None
        self._commit_task = None
        self._closed = False

        self._resume()

    @property
    def is_running(self) -> bool:
        return not self._closed

    @property
    def commit_in_flight(self) -> bool:
        """Check if a commit started by this session has not finished yet."""
        return self._commit_task is not None and not self._commit_task.done()

    def on_activity(self) -> None:
        """Bank the elapsed time and restart the wake-up for what remains."""
        if self._closed:
            return
        self._pause()
        self._resume()

    def adopt_commit(self, task) -> None:
        """Take over a commit still running from a previous session of this root."""
        if task is not None and not task.done():
            self._commit_task = task

    def close(self):
        """Cancel the countdown for good.

        An in-flight commit cannot be cancelled; its task is returned so the
        caller can await it, and the detach is logged.
        """
        if self._closed:
            return None
        self._closed = True
        self._cancel_timer()
        self.last_resume = None

        if self.commit_in_flight:
            self._notifier.debug(
                f"Commit for {self.workspace_root} still running at teardown, detached"
            )
            return self._commit_task
        return None

    def _pause(self) -> None:
        if self.last_resume is not None:
            elapsed = self._scheduler.now() - self.last_resume
            self.remaining = max(0.0, self.remaining - elapsed)
        self.last_resume = None
        self._cancel_timer()

    def _resume(self) -> None:
        self._cancel_timer()
        self.last_resume = self._scheduler.now()
        self._handle = self._scheduler.call_later(self.remaining, self._fire)

    def _cancel_timer(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        if self._closed:
            return

        self.fire_count += 1
        timestamp = datetime.now(timezone.utc)
        entry = LogEntry(elapsed_seconds=self.timer_duration, timestamp=timestamp)

        if self._write_entry(entry):
            self._start_commit(timestamp)

        self.remaining = self.timer_duration
        self._resume()

    def _write_entry(self, entry: LogEntry) -> bool:
        """Create the log file on first write, append afterwards."""
        try:
            if not self._log_store.exists(self.log_file):
                self._log_store.create(self.log_file, entry.render())
                self._notifier.info(f"Your log file has been created: {self.log_file}")
            else:
                self._log_store.append(self.log_file, entry.render())
                self._notifier.debug(f"Entry appended to {self.log_file}")
            return True
        except OSError as e:
            self._notifier.error(f"Could not write {self.log_file}: {e}")
            return False

    def _start_commit(self, timestamp: datetime) -> None:
        if not self._probe.is_initialized(self.workspace_root):
            self._notifier.info(
                f"No git repository in {self.workspace_root}, skipping commit"
            )
            return

        if self.commit_in_flight:
            self._notifier.warning(
                f"Previous commit in {self.workspace_root} has not finished, "
                "skipping this one"
            )
            return

        self._commit_task = self._scheduler.spawn(self._commit(timestamp))

    async def _commit(self, timestamp: datetime) -> bool:
        try:
            await commit_log_file(
                self._executor,
                self.log_file,
                self.settings.commit_message_template,
                timestamp,
            )
        except RuntimeError as e:
            self._notifier.error(f"Failed to commit {self.log_file.name} in {self.workspace_root}: {e}")
            return False

        self._notifier.info(f"Committed {self.log_file.name} in {self.workspace_root}")
        return True
