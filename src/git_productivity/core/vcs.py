"""Git integration: repository probe, commit executor and log history."""

import asyncio
import shlex
from datetime import datetime
from pathlib import Path
from typing import List

import git
from git import Repo


class GitProbe:
    """Reports whether a workspace root holds an initialized git repository."""

    def is_initialized(self, workspace_root: Path) -> bool:
        return (Path(workspace_root) / ".git").exists()


class ShellCommitExecutor:
    """Runs shell commands in a working directory without blocking the loop."""

    async def run(self, command: str, cwd: Path) -> None:
        """Run a shell command, raising RuntimeError if it fails."""
        try:
            process = await asyncio.create_subprocess_shell(
                command,
                cwd=str(cwd),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise RuntimeError(f"Could not run '{command}': {e}") from e

        stdout, stderr = await process.communicate()
        if process.returncode != 0:
            output = (stderr or stdout).decode(errors="replace").strip()
            raise RuntimeError(
                f"Git command failed with exit code {process.returncode}: {output}"
            )


def build_commit_commands(
    log_file: Path, message_template: str, timestamp: datetime
) -> List[str]:
    """Build the staging and commit commands for a log file."""
    message = message_template.replace("{timestamp}", timestamp.isoformat())
    quoted_file = shlex.quote(log_file.name)
    return [
        f"git add -- {quoted_file}",
        f"git commit -m {shlex.quote(message)} -- {quoted_file}",
    ]


async def commit_log_file(
    executor: ShellCommitExecutor,
    log_file: Path,
    message_template: str,
    timestamp: datetime,
) -> None:
    """Stage and commit a log file as one unit, stopping at the first failure."""
    for command in build_commit_commands(log_file, message_template, timestamp):
        await executor.run(command, log_file.parent)


def log_file_history(workspace_root: Path, log_file: Path, limit: int = 5) -> List[git.Commit]:
    """Get the most recent commits touching a log file."""
    try:
        repo = Repo(workspace_root)
        return list(repo.iter_commits(paths=log_file.name, max_count=limit))
    except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError):
        return []
    except (git.exc.GitCommandError, ValueError):
        # Repository without any commit yet
        return []
