"""Data models for Git Productivity."""

from .log_entry import LogEntry
from .settings import Settings

__all__ = ["LogEntry", "Settings"]
