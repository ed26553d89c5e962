"""Git Productivity - track coding time per workspace and commit it to git."""

__version__ = "0.1.0"

EXTENSION_ID = "git-productivity"
LOG_FILE_NAME = f"{EXTENSION_ID}-log.txt"
