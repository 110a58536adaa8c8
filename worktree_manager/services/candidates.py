"""Projection of worktrees into selector candidate lines."""

from dataclasses import dataclass
from typing import Iterable, List

from worktree_manager.constants import CANDIDATE_DELIMITER
from worktree_manager.exceptions import NotFoundError, ProtocolError
from worktree_manager.logging_config import get_logger
from worktree_manager.models.repository import RepositoryRecord
from worktree_manager.models.worktree import WorktreeRecord

logger = get_logger(__name__)


@dataclass(frozen=True)
class Candidate:
    """A (repository, worktree) pair as shown in the selector."""

    name: str
    branch_display: str
    path: str
    record: WorktreeRecord

    def to_line(self) -> str:
        return CANDIDATE_DELIMITER.join((self.name, self.branch_display, self.path))

    @classmethod
    def from_record(cls, repository: RepositoryRecord, record: WorktreeRecord) -> "Candidate":
        """Project a record, rejecting fields that contain the delimiter.

        Raises:
            ValueError: A field contains a tab
        """
        fields = (repository.name, record.branch_display, record.path)
        for value in fields:
            if CANDIDATE_DELIMITER in value:
                raise ValueError(f"tab character in {value!r}")
        return cls(*fields, record=record)


class CandidateProjector:
    """Flattens repositories into candidate lines and maps selections back.

    Lines are grouped by repository in the given order, then by listing
    order. Selections are resolved by the exact path in the third field;
    the name and branch columns are display-only.
    """

    def __init__(self, repositories: Iterable[RepositoryRecord]):
        self.candidates: List[Candidate] = []
        for repository in repositories:
            for record in repository.worktrees:
                try:
                    self.candidates.append(Candidate.from_record(repository, record))
                except ValueError as e:
                    logger.warning(f"Skipping worktree {record.path!r}: {e}")

    def __len__(self) -> int:
        return len(self.candidates)

    def lines(self) -> List[str]:
        return [candidate.to_line() for candidate in self.candidates]

    def resolve_candidate(self, line: str) -> Candidate:
        """Map a selected line back to its candidate.

        Raises:
            ProtocolError: The line does not have three fields
            NotFoundError: No candidate has that path
        """
        parts = line.rstrip("\r\n").split(CANDIDATE_DELIMITER, 2)
        if len(parts) != 3:
            raise ProtocolError(f"selection is not a candidate line: {line!r}")
        path = parts[2]
        for candidate in self.candidates:
            if candidate.path == path:
                return candidate
        raise NotFoundError(f"selected path is not a known worktree: {path}")

    def resolve(self, line: str) -> WorktreeRecord:
        """Map a selected line back to the originating WorktreeRecord."""
        return self.resolve_candidate(line).record
