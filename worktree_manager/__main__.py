"""Allow ``python -m worktree_manager``; the picker's preview command relies on it."""

import sys

from worktree_manager.cli.main import main

sys.exit(main())
