"""Shared constants for worktree-manager."""

from dataclasses import dataclass
from typing import List


@dataclass
class ColumnDefinition:
    """Definition of a table column."""

    key: str
    label: str
    width: int = 0  # 0 means auto-width


# Columns of `wt list`; repository is only shown with --all, changes and sync with --status
COLUMNS: List[ColumnDefinition] = [
    ColumnDefinition("repository", "Repository", 20),
    ColumnDefinition("branch", "Branch", 30),
    ColumnDefinition("head", "HEAD", 8),
    ColumnDefinition("path", "Path"),
    ColumnDefinition("changes", "Changes", 24),
    ColumnDefinition("sync", "Sync", 8),
    ColumnDefinition("flags", "Flags", 20),
]


# Ref prefixes stripped for display
LOCAL_BRANCH_PREFIX = "refs/heads/"
REMOTE_BRANCH_PREFIX = "refs/remotes/"

DETACHED_DISPLAY = "(detached)"
UNKNOWN_DISPLAY = "(unknown)"
UNAVAILABLE_MARKER = "(unavailable)"

SHORT_HASH_LENGTH = 7

# Repository marker looked for during discovery
GIT_MARKER = ".git"

# Field delimiter of selector candidate lines
CANDIDATE_DELIMITER = "\t"

# Separator of the shell action line
ACTION_SEPARATOR = "|"


# Selector key bindings (as reported by fzf --expect)
KEY_NAVIGATE = ""  # Enter
KEY_EDIT = "ctrl-e"
KEY_INFO = "ctrl-o"

# fzf exit statuses meaning "nothing chosen"
SELECTOR_NO_MATCH = 1
SELECTOR_INTERRUPTED = 130


# Defaults
DEFAULT_MAX_DEPTH = 3
DEFAULT_COMMIT_COUNT = 5
DEFAULT_MAX_FILES = 10
DEFAULT_GIT_TIMEOUT = 30
DEFAULT_PREVIEW_TIMEOUT = 5


# Symbol constants
SYMBOL_AHEAD = "↑"
SYMBOL_BEHIND = "↓"
SYMBOL_MAIN = "*"


CREATE_BRANCH_OPTION = "[+] Create new branch..."

SELECTOR_HEADER = "Enter: cd | Ctrl-E: edit | Ctrl-O: info"


# Row styles of `wt list`
ROW_STYLES = {
    "main": "cyan",
    "locked": "magenta",
    "prunable": "yellow",
}
