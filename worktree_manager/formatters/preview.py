"""Preview block formatting."""

from typing import List, Optional

from rich.text import Text

from worktree_manager.constants import UNAVAILABLE_MARKER
from worktree_manager.formatters.worktree import format_changes, format_sync
from worktree_manager.services.preview_service import Preview

INDENT = "  "

# Styles per single-character status code
FILE_STYLES = {
    "?": "red",
    "M": "yellow",
    "A": "green",
    "D": "red",
    "R": "cyan",
    "C": "cyan",
    "U": "magenta",
}


def _section(text: Text, title: str, body: Optional[List[Text]]) -> None:
    text.append(f"{title}:\n", style="bold")
    if body is None:
        text.append(f"{INDENT}{UNAVAILABLE_MARKER}\n", style="dim")
    elif not body:
        text.append(f"{INDENT}(none)\n", style="dim")
    else:
        for line in body:
            text.append(INDENT)
            text.append_text(line)
            text.append("\n")
    text.append("\n")


def _status_lines(preview: Preview) -> Optional[List[Text]]:
    status = preview.status
    if status is None:
        return None

    changes = format_changes(status.to_status())
    lines = [Text(changes, style="yellow" if status.dirty else "green")]

    if status.upstream:
        tracking = Text(f"upstream {status.upstream}")
        if status.upstream_gone:
            tracking.append(" (gone)", style="red")
        sync = format_sync(status.ahead, status.behind)
        tracking.append(f" {sync}" if sync else " (in sync)", style="cyan")
        lines.append(tracking)
    else:
        lines.append(Text("no upstream", style="dim"))
    return lines


def _file_lines(preview: Preview) -> List[Text]:
    lines = []
    for changed in preview.shown_files:
        line = Text(changed.code, style=FILE_STYLES.get(changed.code, ""))
        line.append(f" {changed.path}")
        lines.append(line)
    if preview.hidden_file_count:
        lines.append(Text(f"… and {preview.hidden_file_count} more", style="dim"))
    return lines


def format_preview(preview: Preview) -> Text:
    """
    Render a preview as the block shown in the picker's preview window.

    Sections whose git call failed show ``(unavailable)``; the changed
    files come from the status call and share its fate. That section
    is omitted for a clean worktree.

    Args:
        preview: Collected preview data

    Returns:
        Styled text; ``.plain`` gives the uncolored block
    """
    text = Text()
    text.append("Repo:   ", style="bold")
    text.append(f"{preview.repository}\n")
    text.append("Branch: ", style="bold")
    text.append(f"{preview.branch}\n", style="green")
    text.append("Path:   ", style="bold")
    text.append(f"{preview.path}\n\n")

    _section(text, "Status", _status_lines(preview))

    commits = None
    if preview.commits is not None:
        commits = [Text(commit) for commit in preview.commits]
    _section(text, "Recent commits", commits)

    if preview.status is None:
        _section(text, "Changed files", None)
    elif preview.status.files:
        _section(text, "Changed files", _file_lines(preview))

    text.rstrip()
    return text
