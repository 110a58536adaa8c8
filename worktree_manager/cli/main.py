"""Command-line interface for worktree-manager"""

import os
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional

import yaml
from rich.console import Console
from rich.prompt import Confirm, Prompt

from worktree_manager import config as config_store
from worktree_manager.cli.args import parse_args
from worktree_manager.config import Config
from worktree_manager.constants import CREATE_BRANCH_OPTION
from worktree_manager.core import WorktreeManager
from worktree_manager.exceptions import ConfirmationRequiredError, WorktreeManagerError
from worktree_manager.formatters import (
    add_payload,
    error_payload,
    format_candidate_label,
    format_error_line,
    format_preview,
    list_payload,
    prune_payload,
    remove_payload,
    to_json,
)
from worktree_manager.logging_config import get_logger, setup_logging
from worktree_manager.services.display_service import DisplayService
from worktree_manager.shell import shell_init

# stdout carries only the action line, JSON, tables and previews
console = Console()
err_console = Console(stderr=True)
logger = get_logger(__name__)

EXIT_INTERRUPTED = 130


def _emit(text: str) -> None:
    """Write machine-readable output to stdout verbatim."""
    sys.stdout.write(text if text.endswith("\n") else text + "\n")
    sys.stdout.flush()


def _config_file(args) -> Optional[Path]:
    return Path(args.config).expanduser() if args.config else None


def cmd_interactive(args, manager: WorktreeManager) -> int:
    message = manager.run_interactive(all_repositories=args.all)
    line = message.encode()
    if line:
        _emit(line)
    return 0


def cmd_list(args, manager: WorktreeManager) -> int:
    repositories = manager.repositories(all_repositories=args.all)
    if args.status:
        manager.populate_status(repositories)
    if args.json:
        _emit(to_json(list_payload(repositories, with_repository=args.all)))
    else:
        DisplayService(console, verbose=args.verbose).display_worktree_table(
            repositories, show_repository=args.all
        )
    return 0


def cmd_add(args, manager: WorktreeManager) -> int:
    branch = args.branch
    if not branch:
        branch = manager.pick_branch_to_add()
        if branch == CREATE_BRANCH_OPTION:
            branch = Prompt.ask("Enter new branch name", console=err_console, default="", show_default=False).strip()
        if not branch:
            err_console.print("Cancelled.")
            return 0

    record = manager.registry.add(branch, explicit_path=args.path, track_remote=args.track)

    if args.json:
        _emit(to_json(add_payload(record)))
    elif not args.quiet:
        err_console.print(f"[green]Created worktree[/green] for {record.branch_display} at {record.path}")
    return 0


def cmd_remove(args, manager: WorktreeManager) -> int:
    target = args.target
    if not target:
        record = manager.pick_worktree_to_remove()
        if record is None:
            err_console.print("Cancelled.")
            return 0
        target = record.path

    try:
        removed = manager.registry.remove(target, force=args.force)
    except ConfirmationRequiredError as e:
        if args.json or args.quiet or not sys.stdin.isatty():
            raise
        err_console.print(f"[yellow]{e.path} {e.reason}[/yellow]")
        if not Confirm.ask("Remove it anyway?", console=err_console, default=False):
            err_console.print("Cancelled.")
            return 0
        removed = manager.registry.remove(target, force=True)

    if args.json:
        _emit(to_json(remove_payload(removed)))
    elif not args.quiet:
        err_console.print(f"[green]Removed worktree[/green] {format_candidate_label(removed)}")
    return 0


def cmd_prune(args, manager: WorktreeManager) -> int:
    pruned = manager.registry.prune()
    if args.json:
        _emit(to_json(prune_payload(pruned)))
    elif not args.quiet:
        if pruned:
            err_console.print("Pruned stale worktrees:")
            for path in pruned:
                err_console.print(f"  - {path}")
        else:
            err_console.print("No stale worktrees found.")
    return 0


def cmd_preview(args, manager: WorktreeManager) -> int:
    preview = manager.preview(args.path)
    if args.json:
        _emit(to_json(preview.to_dict()))
        return 0

    # fzf exports the preview pane size; colors are kept there even though stdout is a pipe
    columns = os.environ.get("FZF_PREVIEW_COLUMNS")
    if columns and columns.isdigit():
        Console(force_terminal=True, width=int(columns)).print(format_preview(preview), highlight=False, soft_wrap=True)
    else:
        console.print(format_preview(preview), highlight=False, soft_wrap=True)
    return 0


def cmd_config(args, config: Config) -> int:
    path = _config_file(args) or config_store.config_path()
    action = args.config_command

    if action == "init":
        if path.exists():
            err_console.print(f"Config already exists at {path}")
            return 0
        config_store.save(Config(), path)
        err_console.print(f"[green]Created config[/green] at {path}")
        return 0

    if action == "show":
        if args.json:
            _emit(to_json(config.to_dict()))
        else:
            err_console.print(f"[dim]# {path}[/dim]")
            _emit(yaml.safe_dump(config.to_dict(), default_flow_style=False, sort_keys=False))
        return 0

    if action == "editor":
        _emit(config.effective_editor())
        return 0

    if action == "set-editor":
        config.editor = args.editor.strip() or None
        config_store.save(config, path)
        err_console.print(f"Editor set to {config.effective_editor()}")
        return 0

    if action == "set-discovery-paths":
        config.auto_discovery.paths = list(args.paths)
        config_store.save(config, path)
        err_console.print("Auto-discovery paths configured:")
        for search_path in config.auto_discovery.expanded_paths():
            marker = "" if os.path.isdir(search_path) else " [yellow](missing)[/yellow]"
            err_console.print(f"  {search_path}{marker}")
        err_console.print("\nYou can now use:")
        err_console.print("  wt list --all         # List worktrees across all repos")
        err_console.print("  wt interactive --all  # Interactive picker across all repos")
        return 0

    raise ValueError(f"unknown config action: {action}")


def cmd_init(args) -> int:
    sys.stdout.write(shell_init(args.shell))
    return 0


COMMANDS: Dict[str, Callable[..., int]] = {
    "interactive": cmd_interactive,
    "list": cmd_list,
    "add": cmd_add,
    "remove": cmd_remove,
    "prune": cmd_prune,
    "preview": cmd_preview,
}


def _report_error(kind: str, message: str, json_mode: bool) -> None:
    if json_mode:
        _emit(to_json(error_payload(kind, message), indent=None))
    else:
        err_console.print(format_error_line(kind, message), markup=False, highlight=False, soft_wrap=True)


def run(args) -> int:
    """Dispatch a parsed command line."""
    if args.command == "init":
        return cmd_init(args)

    config_file = _config_file(args)
    if args.command == "config" and args.config_command == "init":
        return cmd_config(args, Config())

    config = config_store.load(config_file)
    if args.command == "config":
        return cmd_config(args, config)

    manager = WorktreeManager(config, config_file=str(config_file) if config_file else None)
    return COMMANDS[args.command](args, manager)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    args = parse_args(argv)
    setup_logging(verbose=args.verbose, debug=args.debug)
    json_mode = getattr(args, "json", False)

    if args.debug:
        err_console.print("[yellow]Debug mode enabled[/yellow]")
        logger.debug(f"Arguments: {vars(args)}")

    try:
        return run(args)
    except KeyboardInterrupt:
        err_console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return EXIT_INTERRUPTED
    except WorktreeManagerError as e:
        logger.debug(f"{type(e).__name__}: {e}")
        _report_error(e.kind, str(e), json_mode)
        return e.exit_code
    except Exception as e:
        _report_error("error", str(e), json_mode)
        if args.debug:
            err_console.print_exception()
        return 1


if __name__ == "__main__":
    sys.exit(main())
