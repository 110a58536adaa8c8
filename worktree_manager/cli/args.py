"""Command-line argument parsing for worktree-manager."""

import argparse
from typing import List, Optional

from worktree_manager.__version__ import __version__
from worktree_manager.shell import supported_shells


def _add_output_flags(parser: argparse.ArgumentParser, quiet: bool = True) -> None:
    parser.add_argument("--json", action="store_true", help="Print the result as JSON on stdout")
    if quiet:
        parser.add_argument("-q", "--quiet", action="store_true", help="Suppress progress messages")


def build_parser() -> argparse.ArgumentParser:
    """Build the ``wt`` argument parser."""
    parser = argparse.ArgumentParser(
        prog="wt",
        description="Navigate, create and remove git worktrees with an fzf picker",
        epilog="Shell integration: add 'eval \"$(wt init bash)\"' (or zsh/fish) to your shell config "
        "so that the picker can change your directory.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    parser.add_argument(
        "--debug", action="store_true", help="Show debug information and write ~/.worktree-manager/wt.log"
    )
    parser.add_argument("--config", metavar="PATH", help="Use this config file instead of the default")
    parser.add_argument("--version", action="version", version=f"wt {__version__}")

    subparsers = parser.add_subparsers(dest="command", metavar="<command>")

    interactive = subparsers.add_parser("interactive", help="Pick a worktree with fzf (default)")
    interactive.add_argument(
        "--all", action="store_true", help="Pick from all repositories under the discovery paths"
    )

    list_parser = subparsers.add_parser("list", help="List worktrees")
    list_parser.add_argument(
        "--all", action="store_true", help="List worktrees of all repositories under the discovery paths"
    )
    list_parser.add_argument(
        "--status", action="store_true", help="Also show uncommitted changes and upstream sync of each worktree"
    )
    _add_output_flags(list_parser, quiet=False)

    add = subparsers.add_parser("add", help="Add a worktree for a branch")
    add.add_argument("branch", nargs="?", help="Branch to check out (pick one with fzf when omitted)")
    add.add_argument("-p", "--path", help="Worktree directory (default: <repo>-<branch> next to the repository)")
    add.add_argument("--track", metavar="REMOTE", help="Create the branch tracking REMOTE/<branch>")
    _add_output_flags(add)

    remove = subparsers.add_parser("remove", help="Remove a worktree")
    remove.add_argument("target", nargs="?", help="Worktree path or branch (pick one with fzf when omitted)")
    remove.add_argument("--force", action="store_true", help="Remove even with uncommitted or untracked files")
    _add_output_flags(remove)

    prune = subparsers.add_parser("prune", help="Prune stale worktree metadata")
    _add_output_flags(prune)

    preview = subparsers.add_parser("preview", help="Print the preview of a worktree (used by the picker)")
    preview.add_argument("--path", required=True, help="Worktree directory")
    _add_output_flags(preview, quiet=False)

    config = subparsers.add_parser("config", help="Manage the configuration file")
    config_sub = config.add_subparsers(dest="config_command", metavar="<action>")
    config_sub.required = True
    config_sub.add_parser("init", help="Create the config file with defaults")
    show = config_sub.add_parser("show", help="Show the effective configuration")
    _add_output_flags(show, quiet=False)
    set_editor = config_sub.add_parser("set-editor", help="Set the editor used by the edit action")
    set_editor.add_argument("editor", help="Editor command, e.g. 'code' or 'nvim'")
    set_paths = config_sub.add_parser("set-discovery-paths", help="Set the search roots of --all")
    set_paths.add_argument("paths", nargs="+", help="Directories to search for repositories")
    config_sub.add_parser("editor", help="Print the effective editor")

    init = subparsers.add_parser("init", help="Print the shell integration snippet")
    init.add_argument("shell", choices=supported_shells(), help="Target shell")

    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments; no command means ``interactive``."""
    args = build_parser().parse_args(argv)
    if args.command is None:
        args.command = "interactive"
        args.all = False
    return args
