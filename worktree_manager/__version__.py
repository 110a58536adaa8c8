"""Version information for worktree-manager."""

__version__ = "0.4.0"
