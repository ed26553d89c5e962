"""Log entry model for the per-workspace activity log."""

from datetime import datetime

from pydantic import BaseModel, Field


class LogEntry(BaseModel):
    """One line of coding activity appended to a workspace log file."""

    elapsed_seconds: float = Field(ge=0)
    timestamp: datetime

    @property
    def elapsed_minutes(self) -> float:
        """Get the elapsed coding time in minutes."""
        return self.elapsed_seconds / 60

    def render(self) -> str:
        """Format the entry as a newline-terminated log line."""
        return (
            f"User has spent {self.elapsed_minutes:g} minutes coding "
            f"as of {self.timestamp.isoformat()}\n"
        )
