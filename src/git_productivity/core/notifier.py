"""User notifications and the diagnostics log."""

from datetime import datetime
from pathlib import Path
from typing import Optional

from rich.console import Console


class DebugLog:
    """Append-only diagnostics log with timestamped lines."""

    def __init__(self, path: Optional[Path]):
        self.path = Path(path) if path is not None else None

    def write(self, message: str) -> None:
        """Append one line to the debug log, if one is configured."""
        if self.path is None:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(f"{datetime.now().isoformat()} {message}\n")
        except OSError:
            # Diagnostics must never take the timer down with them
            pass


class Notifier:
    """Surfaces information, warnings and failures to the user.

    Every notification is printed to the console with rich markup and mirrored
    into the debug log.
    """

    def __init__(self, console: Optional[Console] = None, debug_log: Optional[DebugLog] = None):
        self.console = console or Console()
        self.debug_log = debug_log or DebugLog(None)

    def info(self, message: str) -> None:
        self.debug_log.write(f"INFO {message}")
        self.console.print(f"[cyan]ℹ️  {message}[/cyan]")

    def warning(self, message: str) -> None:
        self.debug_log.write(f"WARNING {message}")
        self.console.print(f"[yellow]⚠️  {message}[/yellow]")

    def error(self, message: str) -> None:
        self.debug_log.write(f"ERROR {message}")
        self.console.print(f"[red]❌ {message}[/red]")

    def debug(self, message: str) -> None:
        """Write to the debug log only."""
        self.debug_log.write(f"DEBUG {message}")
