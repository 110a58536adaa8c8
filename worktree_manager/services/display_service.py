"""Display service for worktree listings"""
from typing import Optional, Sequence

from rich.console import Console
from rich.table import Table

from worktree_manager.constants import COLUMNS, ROW_STYLES
from worktree_manager.formatters import format_branch_name, format_changes, format_flags, format_sync
from worktree_manager.logging_config import get_logger
from worktree_manager.models.repository import RepositoryRecord
from worktree_manager.models.worktree import WorktreeRecord

logger = get_logger(__name__)


def row_style(record: WorktreeRecord) -> Optional[str]:
    """Pick the row style of a worktree; prunable wins over locked over main."""
    if record.is_prunable:
        return ROW_STYLES["prunable"]
    if record.is_locked:
        return ROW_STYLES["locked"]
    if record.is_main:
        return ROW_STYLES["main"]
    return None


class DisplayService:
    def __init__(self, console: Optional[Console] = None, verbose: bool = False):
        self.console = console or Console()
        self.verbose = verbose

    def display_worktree_table(self, repositories: Sequence[RepositoryRecord], show_repository: bool = False) -> None:
        """Display a table of worktrees, grouped by repository."""
        show_status = any(
            record.status is not None for repository in repositories for record in repository.worktrees
        )
        hidden = set()
        if not show_repository:
            hidden.add("repository")
        if not show_status:
            hidden.update(("changes", "sync"))
        columns = [col for col in COLUMNS if col.key not in hidden]

        table = Table()
        for col in columns:
            if col.width:
                table.add_column(col.label, max_width=col.width, overflow="fold")
            else:
                table.add_column(col.label, overflow="fold")

        count = 0
        for repository in repositories:
            for record in repository.worktrees:
                values = {
                    "repository": repository.name,
                    "branch": format_branch_name(record),
                    "head": record.head_commit,
                    "path": record.path,
                    "changes": format_changes(record.status),
                    "sync": format_sync(record.status.ahead, record.status.behind) if record.status else "",
                    "flags": format_flags(record),
                }
                table.add_row(*(values[col.key] for col in columns), style=row_style(record))
                count += 1

        if count == 0:
            self.console.print("No worktrees found")
            return

        logger.debug(f"Displaying {count} worktrees")
        self.console.print(table)

        if self.verbose:
            self.console.print(f"\n{count} worktree(s) in {len(repositories)} repository(ies)")
            self.console.print("\nLegend:")
            self.console.print("* = Main worktree     Cyan = Main")
            self.console.print("Magenta = Locked      Yellow = Prunable")
