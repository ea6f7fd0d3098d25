"""Git gateway interface.

This module provides:
- Git: Abstract base class composing the branch, commit and rebase sub-gateways
- RebaseResult: Outcome of a rebase
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from stk_shared.gateway.git.branch_ops.abc import GitBranchOps
    from stk_shared.gateway.git.commit_ops.abc import GitCommitOps
    from stk_shared.gateway.git.rebase_ops.abc import GitRebaseOps


@dataclass(frozen=True)
class RebaseResult:
    """Result of a git rebase operation.

    Attributes:
        success: True if rebase completed without conflicts
        conflict_files: Tuple of file paths with conflicts (empty if success=True)
    """

    success: bool
    conflict_files: tuple[str, ...]


# ============================================================================
# Abstract Interface
# ============================================================================


class Git(ABC):
    """Abstract interface for git operations.

    Branch, commit and rebase primitives live on sub-gateways reachable via
    the `branch`, `commit` and `rebase` properties. Repository-level queries
    are methods on this class.
    """

    @property
    @abstractmethod
    def branch(self) -> GitBranchOps:
        """Branch operations sub-gateway."""
        ...

    @property
    @abstractmethod
    def commit(self) -> GitCommitOps:
        """Commit operations sub-gateway."""
        ...

    @property
    @abstractmethod
    def rebase(self) -> GitRebaseOps:
        """Rebase operations sub-gateway."""
        ...

    @abstractmethod
    def get_git_common_dir(self, cwd: Path) -> Path | None:
        """Get the common git directory shared by all worktrees.

        Returns:
            Absolute path to the common .git directory, or None if cwd is not
            inside a git repository
        """
        ...

    @abstractmethod
    def get_repository_root(self, cwd: Path) -> Path:
        """Get the root directory of the worktree containing cwd."""
        ...

    @abstractmethod
    def peel_to_commit(self, cwd: Path, ref: str) -> str:
        """Resolve a ref (branch, tag, HEAD, SHA) to a full commit SHA.

        Raises:
            RuntimeError: If the ref does not name a commit
        """
        ...

    @abstractmethod
    def diff_index(self, cwd: Path, commit: str) -> list[str]:
        """List paths whose staged content differs from the given commit.

        Returns:
            Paths with staged changes relative to commit; empty when nothing
            is staged
        """
        ...

    @abstractmethod
    def get_merge_base(self, repo_root: Path, ref1: str, ref2: str) -> str | None:
        """Get the merge base commit SHA between two refs.

        Returns:
            Commit SHA of the merge base, or None if the refs share no history
        """
        ...

    @abstractmethod
    def get_conflicted_files(self, cwd: Path) -> list[str]:
        """List files with unresolved merge conflicts."""
        ...
