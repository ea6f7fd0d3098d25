"""Abstract base class for Git branch operations.

This sub-gateway groups the branch-level primitives of the Git gateway,
including both mutation and query operations.
"""

from abc import ABC, abstractmethod
from pathlib import Path


class GitBranchOps(ABC):
    """Abstract interface for Git branch operations.

    All implementations (real, fake) must implement this interface.
    """

    @abstractmethod
    def create_branch(self, cwd: Path, branch_name: str, start_point: str, *, force: bool) -> None:
        """Create a new branch without checking it out.

        Args:
            cwd: Working directory to run command in
            branch_name: Name of the branch to create
            start_point: Commit/branch to base the new branch on
            force: Use -f flag to move an existing branch to the start_point.
                Without it, creation fails if the branch already exists.
        """
        ...

    @abstractmethod
    def checkout_branch(self, cwd: Path, branch: str) -> None:
        """Checkout a branch in the given directory.

        Args:
            cwd: Working directory to run command in
            branch: Branch name to checkout
        """
        ...

    @abstractmethod
    def checkout_detached(self, cwd: Path, ref: str) -> None:
        """Checkout a detached HEAD at the given ref.

        Staged changes are carried over, as with a plain checkout.

        Args:
            cwd: Working directory to run command in
            ref: Git ref to checkout (commit SHA, branch name, etc.)
        """
        ...

    # ============================================================================
    # Query Operations
    # ============================================================================

    @abstractmethod
    def get_current_branch(self, cwd: Path) -> str | None:
        """Get the currently checked-out branch.

        Args:
            cwd: Working directory to query

        Returns:
            Branch name, or None if in detached HEAD state
        """
        ...

    @abstractmethod
    def list_local_branches(self, repo_root: Path) -> list[str]:
        """List all local branch names in the repository."""
        ...

    @abstractmethod
    def get_branch_head(self, repo_root: Path, branch: str) -> str | None:
        """Get the commit SHA at the head of a branch.

        Returns:
            Commit SHA as a string, or None if branch doesn't exist.
        """
        ...

    @abstractmethod
    def detect_trunk_branch(self, repo_root: Path) -> str:
        """Auto-detect the trunk branch name.

        Checks git's remote HEAD reference, then falls back to checking for
        existence of 'main' then 'master'. Returns 'main' as final fallback
        if neither branch exists.
        """
        ...
