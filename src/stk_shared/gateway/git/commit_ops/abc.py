"""Abstract base class for Git commit operations."""

from abc import ABC, abstractmethod
from pathlib import Path


class GitCommitOps(ABC):
    """Abstract interface for Git commit operations."""

    @abstractmethod
    def commit(self, cwd: Path, message: str | None, *, allow_empty: bool) -> None:
        """Create a commit from the staged changes at HEAD.

        Works on a detached HEAD as well as on a branch.

        Args:
            cwd: Working directory
            message: Commit message. None lets git open the user's editor.
            allow_empty: Permit a commit with no staged changes
        """
        ...
