"""Abstract base class for Git rebase operations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from stk_shared.gateway.git.abc import RebaseResult


class GitRebaseOps(ABC):
    """Abstract interface for Git rebase operations."""

    @abstractmethod
    def rebase_onto(self, cwd: Path, *, onto: str, upstream: str, branch: str) -> RebaseResult:
        """Move the commits of a branch that are not in upstream onto a new base.

        Runs `git rebase --onto <onto> <upstream> <branch>`. The branch is left
        checked out afterwards.

        Args:
            cwd: Working directory (must be in a git repository)
            onto: Commit the replayed commits are placed on
            upstream: Commit marking where the branch's own commits begin
            branch: Branch to rebase

        Returns:
            RebaseResult with success flag and any conflict files.
            If conflicts occur, the rebase is left in progress.
        """
        ...

    @abstractmethod
    def is_rebase_in_progress(self, cwd: Path) -> bool:
        """Check if a rebase is in progress (.git/rebase-merge or .git/rebase-apply)."""
        ...
