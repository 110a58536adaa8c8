"""Post-selection action models."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from worktree_manager.constants import ACTION_SEPARATOR
from worktree_manager.exceptions import ProtocolError


class Action(Enum):
    """Outcome of an interactive selection."""
    NAVIGATE = "navigate"
    EDIT = "edit"
    INFO = "info"
    CANCEL = "cancel"

    @property
    def verb(self) -> str:
        """Word written on the shell action line."""
        return _VERBS[self]

    @classmethod
    def from_verb(cls, verb: str) -> "Action":
        for action, action_verb in _VERBS.items():
            if action_verb == verb:
                return action
        raise ProtocolError(f"unknown action '{verb}'")


_VERBS = {
    Action.NAVIGATE: "cd",
    Action.EDIT: "edit",
    Action.INFO: "info",
    Action.CANCEL: "cancel",
}


class InteractionState(Enum):
    """States of an interactive session; every state but the first is terminal."""
    AWAITING_SELECTION = "awaiting_selection"
    NAVIGATE = "navigate"
    EDIT = "edit"
    INFO = "info"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self is not InteractionState.AWAITING_SELECTION

    @classmethod
    def for_action(cls, action: Action) -> "InteractionState":
        return {
            Action.NAVIGATE: cls.NAVIGATE,
            Action.EDIT: cls.EDIT,
            Action.INFO: cls.INFO,
            Action.CANCEL: cls.CANCELLED,
        }[action]


@dataclass(frozen=True)
class ActionMessage:
    """Result handed to the wrapping shell function."""

    action: Action
    path: Optional[str] = None

    def __post_init__(self):
        if self.action is Action.CANCEL:
            if self.path is not None:
                raise ValueError("a cancel message carries no path")
        elif not self.path:
            raise ValueError(f"{self.action.value} requires a path")

    @classmethod
    def cancel(cls) -> "ActionMessage":
        return cls(Action.CANCEL)

    def encode(self) -> str:
        """Render the single stdout line: ``cd|/path``, ``edit|/path``, ``info|/path``.

        A cancelled selection encodes to an empty string, so nothing is
        written and the shell wrapper does nothing.
        """
        if self.action is Action.CANCEL:
            return ""
        return f"{self.action.verb}{ACTION_SEPARATOR}{self.path}"

    @classmethod
    def decode(cls, line: str) -> "ActionMessage":
        """Parse an action line; an empty line or a bare ``cancel`` is a cancellation."""
        line = line.rstrip("\r\n")
        if not line or line == Action.CANCEL.verb:
            return cls.cancel()
        verb, sep, path = line.partition(ACTION_SEPARATOR)
        if not sep:
            raise ProtocolError(f"malformed action line: {line!r}")
        action = Action.from_verb(verb)
        if action is Action.CANCEL:
            raise ProtocolError("a cancel message carries no path")
        if not path:
            raise ProtocolError(f"{action.value} requires a path")
        return cls(action, path)
