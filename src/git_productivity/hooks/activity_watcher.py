"""Filesystem activity source feeding pulses into the session registry.

Watchdog delivers events on its observer thread; they are handed to the event
loop with ``call_soon_threadsafe`` so sessions are only touched from the loop.
"""

import asyncio
from pathlib import Path
from typing import Callable, Iterable, List

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from git_productivity import LOG_FILE_NAME


def is_activity_path(path: Path, workspace_root: Path) -> bool:
    """Check if a changed path counts as editing activity in a workspace."""
    try:
        relative = Path(path).relative_to(workspace_root)
    except ValueError:
        return False
    if ".git" in relative.parts:
        return False
    return relative.name != LOG_FILE_NAME


class ActivityEventHandler(FileSystemEventHandler):
    """Turns file changes inside one workspace into activity pulses."""

    def __init__(self, workspace_root: Path, on_pulse: Callable[[Path], None]):
        self.workspace_root = Path(workspace_root).resolve()
        self.on_pulse = on_pulse

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type in ("opened", "closed_no_write"):
            return

        paths = [event.src_path]
        if getattr(event, "dest_path", ""):
            paths.append(event.dest_path)

        for raw_path in paths:
            path = Path(raw_path)
            if is_activity_path(path, self.workspace_root):
                self.on_pulse(path)
                return


class ActivityWatcher:
    """Watches every workspace root and forwards pulses to the loop."""

    def __init__(
        self,
        workspace_roots: Iterable[Path],
        pulse: Callable[[Path], None],
        loop: asyncio.AbstractEventLoop,
    ):
        self.workspace_roots: List[Path] = [Path(root).resolve() for root in workspace_roots]
        self.pulse = pulse
        self.loop = loop
        self.observer = Observer()

    def _forward(self, path: Path) -> None:
        self.loop.call_soon_threadsafe(self.pulse, path)

    def start(self) -> None:
        for root in self.workspace_roots:
            self.observer.schedule(
                ActivityEventHandler(root, self._forward), str(root), recursive=True
            )
        self.observer.start()

    def stop(self) -> None:
        self.observer.stop()
        self.observer.join(timeout=5)
