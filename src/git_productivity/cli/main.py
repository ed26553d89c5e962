"""Main CLI interface for Git Productivity."""

import asyncio
import signal
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import click
from rich.console import Console
from rich.table import Table

from git_productivity import LOG_FILE_NAME
from git_productivity.core.config import load_settings
from git_productivity.core.log_store import LogStore
from git_productivity.core.notifier import DebugLog, Notifier
from git_productivity.core.registry import SessionRegistry, apply_deactivation_policy
from git_productivity.core.scheduler import AsyncioScheduler
from git_productivity.core.vcs import GitProbe, log_file_history
from git_productivity.hooks.activity_watcher import ActivityWatcher

console = Console()

# Seconds to wait for commits still running when the daemon shuts down
COMMIT_GRACE_SECONDS = 10.0


def resolve_workspace_roots(roots: Sequence[str]) -> List[Path]:
    """Resolve workspace roots, defaulting to the current directory."""
    candidates = [Path(root) for root in roots] or [Path.cwd()]
    resolved = []
    for candidate in candidates:
        path = candidate.expanduser().resolve()
        if not path.is_dir():
            console.print(f"[yellow]Skipping {candidate}: not a directory[/yellow]")
            continue
        if path not in resolved:
            resolved.append(path)
    return resolved


def load_settings_or_exit(config_path: Optional[str], overrides: Dict[str, Any]):
    """Load settings or exit with an error message."""
    try:
        return load_settings(Path(config_path) if config_path else None, overrides)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise click.Abort() from e


async def await_detached_commits(tasks: List[Any], timeout: float, notifier: Notifier) -> None:
    """Give commits that outlived their session a bounded time to finish."""
    pending = [task for task in tasks if not task.done()]
    if not pending:
        return

    notifier.info(f"Waiting for {len(pending)} commit(s) to finish...")
    _done, still_pending = await asyncio.wait(pending, timeout=timeout)
    if still_pending:
        notifier.warning(
            f"{len(still_pending)} commit(s) did not finish within {timeout:g}s and were abandoned"
        )


def bind_signals(loop: asyncio.AbstractEventLoop, registry: SessionRegistry, shutdown) -> None:
    """Bind the activate, restart and disable commands to process signals."""
    handlers = {
        "SIGUSR1": registry.activate,
        "SIGHUP": registry.restart,
        "SIGINT": shutdown,
        "SIGTERM": shutdown,
    }
    for name, handler in handlers.items():
        signum = getattr(signal, name, None)
        if signum is None:
            continue
        try:
            loop.add_signal_handler(signum, handler)
        except (NotImplementedError, RuntimeError):
            # Signal handlers are unavailable on this platform
            registry.notifier.debug(f"Could not bind {name}")


async def serve(
    workspace_roots: List[Path],
    settings_loader,
    notifier: Notifier,
    grace: float = COMMIT_GRACE_SECONDS,
) -> None:
    """Track the workspaces until a disable signal arrives."""
    loop = asyncio.get_running_loop()
    registry = SessionRegistry(
        workspace_roots, settings_loader, AsyncioScheduler(loop), notifier
    )
    if not registry.start():
        return

    stopped = asyncio.Event()

    def shutdown() -> None:
        registry.disable()
        stopped.set()

    bind_signals(loop, registry, shutdown)
    watcher = ActivityWatcher(workspace_roots, registry.pulse, loop)
    watcher.start()

    roots = ", ".join(str(root) for root in registry.sessions)
    notifier.info(f"Tracking coding time in {roots}")

    try:
        await stopped.wait()
    finally:
        await loop.run_in_executor(None, watcher.stop)
        if registry.sessions:
            registry.disable()
        await await_detached_commits(registry.detached_commits, grace, notifier)


@click.group()
@click.version_option(package_name="git-productivity")
def main():
    """Git Productivity - commit your coding time alongside your code."""


@main.command()
@click.argument("roots", nargs=-1, type=click.Path(file_okay=False))
@click.option("--minutes", type=float, help="Coding minutes between log entries")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    help="Path to a JSON config file",
)
def run(roots: Sequence[str], minutes: Optional[float], config_path: Optional[str]):
    """Track coding time in workspace ROOTS (default: current directory).

    Send SIGHUP to restart every countdown, SIGUSR1 to check the tracker is
    active, and SIGINT or SIGTERM to disable tracking and exit.
    """
    overrides = {"timer_duration_minutes": minutes}
    settings = load_settings_or_exit(config_path, overrides)
    notifier = Notifier(console, DebugLog(settings.debug_log))

    workspace_roots = resolve_workspace_roots(roots)
    if not workspace_roots:
        notifier.warning("No workspace folder is open, coding time is not tracked")
        return

    def settings_loader():
        return load_settings(Path(config_path) if config_path else None, overrides)

    asyncio.run(serve(workspace_roots, settings_loader, notifier))


@main.command()
@click.argument("roots", nargs=-1, type=click.Path(file_okay=False))
@click.option("--limit", default=5, help="Number of log commits to inspect")
def status(roots: Sequence[str], limit: int):
    """Show the activity log and its commits for workspace ROOTS."""
    workspace_roots = resolve_workspace_roots(roots)
    if not workspace_roots:
        console.print("[yellow]No workspace folder to inspect[/yellow]")
        return

    probe = GitProbe()
    log_store = LogStore()

    table = Table(title="Git Productivity")
    table.add_column("Workspace", style="cyan")
    table.add_column("Git")
    table.add_column("Log entries", justify="right")
    table.add_column("Log commits", justify="right")
    table.add_column("Last commit")

    for root in workspace_roots:
        log_file = root / LOG_FILE_NAME
        has_repo = probe.is_initialized(root)
        entries = log_store.read_lines(log_file)
        commits = log_file_history(root, log_file, limit) if has_repo else []

        last_commit = "-"
        if commits:
            commit = commits[0]
            last_commit = f"{commit.hexsha[:8]} {commit.committed_datetime.isoformat()}"

        table.add_row(
            str(root),
            "yes" if has_repo else "no",
            str(len(entries)) if log_store.exists(log_file) else "no log",
            str(len(commits)),
            last_commit,
        )

    console.print(table)


@main.command()
@click.argument("roots", nargs=-1, type=click.Path(file_okay=False))
def cleanup(roots: Sequence[str]):
    """Remove activity logs from ROOTS that are not git repositories."""
    notifier = Notifier(console)
    log_store = LogStore()
    probe = GitProbe()

    for root in resolve_workspace_roots(roots):
        apply_deactivation_policy(root, log_store, probe, notifier)


if __name__ == "__main__":
    main()
