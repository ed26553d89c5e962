"""Append-only text log files stored at workspace roots."""

from pathlib import Path
from typing import List


class LogStore:
    """Plain UTF-8 text file primitives used by workspace sessions."""

    encoding = "utf-8"

    def exists(self, path: Path) -> bool:
        return Path(path).is_file()

    def create(self, path: Path, content: str) -> None:
        """Create the file with its first content, replacing nothing."""
        with open(path, "x", encoding=self.encoding) as f:
            f.write(content)

    def append(self, path: Path, content: str) -> None:
        with open(path, "a", encoding=self.encoding) as f:
            f.write(content)

    def delete(self, path: Path) -> None:
        Path(path).unlink()

    def read_lines(self, path: Path) -> List[str]:
        """Read every entry of a log file, empty if it does not exist."""
        if not self.exists(path):
            return []
        return Path(path).read_text(encoding=self.encoding).splitlines()
