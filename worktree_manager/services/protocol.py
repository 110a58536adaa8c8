"""Interaction protocol between the picker and the wrapping shell function."""

from typing import Dict, Optional

from worktree_manager.constants import (
    KEY_EDIT,
    KEY_INFO,
    KEY_NAVIGATE,
    SELECTOR_INTERRUPTED,
    SELECTOR_NO_MATCH,
)
from worktree_manager.exceptions import ProtocolError, ToolInvocationError
from worktree_manager.logging_config import get_logger
from worktree_manager.models.action import Action, ActionMessage, InteractionState
from worktree_manager.services.candidates import CandidateProjector
from worktree_manager.services.selector import SelectorResult

logger = get_logger(__name__)

DEFAULT_KEY_BINDINGS: Dict[str, Action] = {
    KEY_NAVIGATE: Action.NAVIGATE,
    KEY_EDIT: Action.EDIT,
    KEY_INFO: Action.INFO,
}


class InteractionSession:
    """One pass through the picker.

    Starts in ``awaiting_selection`` and moves to exactly one terminal
    state (navigate, edit, info or cancelled); it never returns to
    ``awaiting_selection``.
    """

    def __init__(self, projector: CandidateProjector, key_bindings: Optional[Dict[str, Action]] = None):
        self.projector = projector
        self.key_bindings = key_bindings if key_bindings is not None else DEFAULT_KEY_BINDINGS
        self.state = InteractionState.AWAITING_SELECTION
        self.message: Optional[ActionMessage] = None

    def _finish(self, message: ActionMessage) -> ActionMessage:
        if self.state.is_terminal:
            raise ProtocolError(f"interaction already finished ({self.state.value})")
        self.state = InteractionState.for_action(message.action)
        self.message = message
        logger.debug(f"Interaction finished: {self.state.value} {message.path or ''}")
        return message

    def cancel(self) -> ActionMessage:
        return self._finish(ActionMessage.cancel())

    def select(self, key: str, line: str) -> ActionMessage:
        """Apply a key press to a selected candidate line.

        Raises:
            ProtocolError: Unknown key, or the session already finished
            NotFoundError: The line does not name a known worktree
        """
        if self.state.is_terminal:
            raise ProtocolError(f"interaction already finished ({self.state.value})")
        action = self.key_bindings.get(key)
        if action is None:
            raise ProtocolError(f"no action bound to key '{key}'")
        record = self.projector.resolve(line)
        return self._finish(ActionMessage(action, record.path))

    def feed(self, result: SelectorResult) -> ActionMessage:
        """Decode the selector's exit status and output into the final action.

        With ``--expect`` the selector prints the pressed key on the first
        line (empty for Enter) and the chosen candidate on the second.

        Raises:
            ToolInvocationError: The selector failed
        """
        if result.status in (SELECTOR_NO_MATCH, SELECTOR_INTERRUPTED):
            return self.cancel()
        if result.status != 0:
            raise ToolInvocationError(result.argv, result.status, result.stderr)

        lines = result.stdout.split("\n")
        if len(lines) < 2 or not lines[1].strip():
            return self.cancel()
        return self.select(lines[0].strip(), lines[1])
