"""Parsers for git's script-friendly output formats.

Both parsers are pure functions: the same text always yields the same
records, and malformed input raises ParseError instead of returning a
partial result.
"""

import re
from typing import List, Optional, Tuple

from worktree_manager.constants import SHORT_HASH_LENGTH
from worktree_manager.exceptions import ParseError
from worktree_manager.models.worktree import ChangedFile, StatusSummary, WorktreeRecord

# "[ahead 2, behind 1]", "[ahead 2]", "[behind 1]" or "[gone]" at the end of the header
_TRACKING_SUFFIX = re.compile(r"\s\[([^\]]*)\]$")
_TRACKING_COUNT = re.compile(r"^(ahead|behind) (\d+)$")

_NO_COMMITS_PREFIXES = ("No commits yet on ", "Initial commit on ")
_DETACHED_HEADER = "HEAD (no branch)"


def _split_line(line: str) -> Tuple[str, Optional[str]]:
    """Split ``key value`` into its parts; bare flags have no value."""
    key, sep, value = line.partition(" ")
    return key, (value if sep else None)


def _close_stanza(record: WorktreeRecord, seen: set, line_number: int) -> WorktreeRecord:
    """Check that a finished stanza carries everything a worktree needs."""
    if record.is_bare:
        return record
    if "HEAD" not in seen:
        raise ParseError(f"worktree {record.path} has no HEAD line", line_number)
    if "branch" not in seen and "detached" not in seen:
        raise ParseError(f"worktree {record.path} has neither a branch nor a detached line", line_number)
    return record


def parse_porcelain(output: str) -> List[WorktreeRecord]:
    """Parse ``git worktree list --porcelain`` output.

    Format (one stanza per worktree, each terminated by a blank line):

        worktree /path/to/worktree
        HEAD <sha>
        branch refs/heads/<name>      (or "detached")
        locked [reason]
        prunable [reason]

    A bare repository's stanza holds ``bare`` instead of HEAD/branch.
    The first stanza is always the main worktree.

    Args:
        output: Raw command output

    Returns:
        Worktree records in listing order

    Raises:
        ParseError: The listing is malformed or truncated
    """
    records: List[WorktreeRecord] = []
    current: Optional[WorktreeRecord] = None
    seen: set = set()
    stanza_start = 0
    line_number = 0

    for line_number, raw_line in enumerate(output.split("\n"), start=1):
        line = raw_line.rstrip("\r")

        if not line:
            # Empty line marks end of worktree entry
            if current is not None:
                records.append(_close_stanza(current, seen, stanza_start))
                current = None
            continue

        key, value = _split_line(line)

        if key == "worktree":
            if current is not None:
                raise ParseError("worktree line inside an unterminated stanza", line_number)
            if not value:
                raise ParseError("worktree line without a path", line_number)
            # First worktree in list is always the main one
            current = WorktreeRecord(path=value, is_main=not records)
            seen = set()
            stanza_start = line_number
            continue

        if current is None:
            raise ParseError(f"'{key}' line outside of a worktree stanza", line_number)

        if key == "HEAD":
            if not value:
                raise ParseError("HEAD line without a commit", line_number)
            current.head_commit = value[:SHORT_HASH_LENGTH]
        elif key == "branch":
            if not value:
                raise ParseError("branch line without a ref", line_number)
            current.branch_ref = value
        elif key == "detached":
            current.is_detached = True
            current.branch_ref = None
        elif key == "bare":
            current.is_bare = True
        elif key == "locked":
            current.is_locked = True
            current.lock_reason = value
        elif key == "prunable":
            current.is_prunable = True
            current.prunable_reason = value
        # Unknown keys are ignored for forwards compatibility
        seen.add(key)

    if current is not None:
        raise ParseError(f"unterminated stanza for worktree {current.path}", line_number)

    return records


def _parse_header(header: str, line_number: int) -> StatusSummary:
    summary = StatusSummary()

    match = _TRACKING_SUFFIX.search(header)
    if match:
        header = header[:match.start()]
        for part in match.group(1).split(","):
            part = part.strip()
            if part == "gone":
                summary.upstream_gone = True
                continue
            count = _TRACKING_COUNT.match(part)
            if not count:
                raise ParseError(f"unrecognised tracking information '{part}'", line_number)
            setattr(summary, count.group(1), int(count.group(2)))

    if header == _DETACHED_HEADER:
        return summary

    for prefix in _NO_COMMITS_PREFIXES:
        if header.startswith(prefix):
            summary.branch = header[len(prefix):]
            return summary

    branch, sep, upstream = header.partition("...")
    if not branch:
        raise ParseError("status header without a branch", line_number)
    summary.branch = branch
    summary.upstream = upstream if sep else None
    return summary


def _status_code(xy: str) -> str:
    """Reduce the two-column XY code to one character (index side first)."""
    if xy == "??":
        return "?"
    return xy[0] if xy[0] != " " else xy[1]


def parse_status(output: str) -> StatusSummary:
    """Parse ``git status --porcelain=v1 --branch`` output.

    The first line is the branch header
    ``## <branch>...<upstream> [ahead N, behind M]`` (suffix optional);
    each remaining line is ``XY path``. ``??`` marks an untracked file,
    any other line with a non-space X or Y is a modification.

    Raises:
        ParseError: The header is missing or a file line is truncated
    """
    lines = [line.rstrip("\r") for line in output.split("\n")]
    while lines and not lines[-1]:
        lines.pop()

    if not lines or not lines[0].startswith("## "):
        raise ParseError("status output does not start with a branch header", 1)

    summary = _parse_header(lines[0][3:], 1)

    for line_number, line in enumerate(lines[1:], start=2):
        if not line:
            continue
        if len(line) < 4 or line[2] != " ":
            raise ParseError(f"malformed status line '{line}'", line_number)
        xy = line[:2]
        if xy == "  ":
            continue
        path = line[3:]
        if " -> " in path and xy[0] in "RC":
            # Renames and copies list "old -> new"
            path = path.split(" -> ", 1)[1]
        summary.files.append(ChangedFile(code=_status_code(xy), path=path))

    return summary
