"""Session registry: one workspace session per open workspace root."""

from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional

from git_productivity import LOG_FILE_NAME
from git_productivity.core.log_store import LogStore
from git_productivity.core.notifier import Notifier
from git_productivity.core.session import WorkspaceSession
from git_productivity.core.vcs import GitProbe, ShellCommitExecutor
from git_productivity.models.settings import Settings


def apply_deactivation_policy(
    workspace_root: Path, log_store: LogStore, probe: GitProbe, notifier: Notifier
) -> bool:
    """Delete a workspace log file unless it is expected to be under git.

    Returns:
        True if the log file was deleted, False otherwise
    """
    workspace_root = Path(workspace_root)
    log_file = workspace_root / LOG_FILE_NAME

    if probe.is_initialized(workspace_root):
        notifier.warning(
            f"{log_file} was not deleted because it is expected to be under version control"
        )
        return False

    if not log_store.exists(log_file):
        return False

    try:
        log_store.delete(log_file)
    except OSError as e:
        notifier.error(f"Could not delete {log_file}: {e}")
        return False

    notifier.info(f"Deleted {log_file}")
    return True


class SessionRegistry:
    """Owns the mapping from workspace root to WorkspaceSession.

    Command handlers receive the registry and call ``activate``, ``restart`` and
    ``disable``; activity sources call ``pulse``.
    """

    def __init__(
        self,
        workspace_roots: Iterable[Path],
        settings_loader: Callable[[], Settings],
        scheduler: Any,
        notifier: Notifier,
        log_store: Optional[LogStore] = None,
        probe: Optional[GitProbe] = None,
        executor: Optional[ShellCommitExecutor] = None,
    ):
        self.workspace_roots = [Path(root).resolve() for root in workspace_roots]
        self.settings_loader = settings_loader
        self.scheduler = scheduler
        self.notifier = notifier
        self.log_store = log_store or LogStore()
        self.probe = probe or GitProbe()
        self.executor = executor or ShellCommitExecutor()

        self._sessions: Dict[Path, WorkspaceSession] = {}
        self.detached_commits: List[Any] = []
        self._detached_by_root: Dict[Path, Any] = {}

    @property
    def sessions(self) -> Dict[Path, WorkspaceSession]:
        """Get a snapshot of the live sessions keyed by workspace root."""
        return dict(self._sessions)

    def start(self) -> bool:
        """Create a session for every workspace root.

        Returns:
            False if there is no workspace root to track
        """
        if not self.workspace_roots:
            self.notifier.warning("No workspace folder is open, coding time is not tracked")
            return False

        for root in self.workspace_roots:
            self._create_session(root)
        return bool(self._sessions)

    def activate(self) -> None:
        self.notifier.info("Git Productivity is already active")

    def restart(self) -> None:
        """Tear every session down and start fresh countdowns."""
        self._teardown_all()
        for root in self.workspace_roots:
            self._create_session(root)
        self.notifier.info(f"Restarted tracking for {len(self._sessions)} workspace(s)")

    def disable(self) -> None:
        self._teardown_all()
        self.notifier.info("Git Productivity disabled")

    def session_for(self, path: Path) -> Optional[WorkspaceSession]:
        """Find the session of the innermost workspace root containing a path."""
        path = Path(path).resolve()
        matches = [
            root
            for root in self._sessions
            if path == root or root in path.parents
        ]
        if not matches:
            return None
        return self._sessions[max(matches, key=lambda root: len(root.parts))]

    def pulse(self, path: Path) -> None:
        """Route an activity pulse to the session owning a path."""
        session = self.session_for(path)
        if session is None:
            self.notifier.debug(f"Activity outside tracked workspaces: {path}")
            return
        session.on_activity()

    def _create_session(self, root: Path) -> None:
        try:
            settings = self.settings_loader()
        except ValueError as e:
            self.notifier.error(f"Invalid settings, {root} is not tracked: {e}")
            return

        session = WorkspaceSession(
            root,
            settings,
            self.scheduler,
            self.log_store,
            self.probe,
            self.executor,
            self.notifier,
        )
        # Carry over a commit still running for this root
        session.adopt_commit(self._detached_by_root.get(root))
        self._sessions[root] = session
        self.notifier.debug(
            f"Tracking {root} every {settings.timer_duration_minutes:g} minutes"
        )

    def _teardown_all(self) -> None:
        sessions, self._sessions = self._sessions, {}
        self.detached_commits = [task for task in self.detached_commits if not task.done()]
        self._detached_by_root = {
            root: task for root, task in self._detached_by_root.items() if not task.done()
        }
        for root, session in sessions.items():
            task = session.close()
            if task is not None:
                if task not in self.detached_commits:
                    self.detached_commits.append(task)
                self._detached_by_root[root] = task
            try:
                apply_deactivation_policy(root, self.log_store, self.probe, self.notifier)
            except Exception as e:
                # One workspace failing must not stop the others from tearing down
                self.notifier.error(f"Teardown of {root} failed: {e}")
