"""Fake Git branch operations for testing."""

from __future__ import annotations

from pathlib import Path

from stk_shared.gateway.git.branch_ops.abc import GitBranchOps
from stk_shared.gateway.git.fake_state import FakeRepoState


class FakeGitBranchOps(GitBranchOps):
    """In-memory fake implementation of Git branch operations.

    State Management:
    -----------------
    Operates on the FakeRepoState shared with FakeGit. Checkouts and branch
    creation modify that state and are visible to subsequent calls on any
    of the linked fakes.

    Mutation Tracking:
    -----------------
    - created_branches: (branch_name, start_point) pairs from create_branch()
    - checked_out_branches: Branches checked out via checkout_branch()
    - detached_checkouts: Refs checked out via checkout_detached()
    """

    def __init__(
        self,
        state: FakeRepoState,
        *,
        checkout_raises: dict[str, Exception] | None = None,
        detach_raises: Exception | None = None,
        create_branch_raises: Exception | None = None,
    ) -> None:
        """Create FakeGitBranchOps linked to shared repository state.

        Args:
            state: Repository state shared with FakeGit
            checkout_raises: Mapping of branch name -> exception raised when
                that branch is checked out
            detach_raises: Exception raised by checkout_detached()
            create_branch_raises: Exception raised by create_branch()
        """
        self._state = state
        self._checkout_raises = checkout_raises if checkout_raises is not None else {}
        self._detach_raises = detach_raises
        self._create_branch_raises = create_branch_raises

        self._created_branches: list[tuple[str, str]] = []
        self._checked_out_branches: list[str] = []
        self._detached_checkouts: list[str] = []

    def create_branch(self, cwd: Path, branch_name: str, start_point: str, *, force: bool) -> None:
        if self._create_branch_raises is not None:
            raise self._create_branch_raises
        if branch_name in self._state.branch_heads and not force:
            raise RuntimeError(
                f"Failed to create branch '{branch_name}' from '{start_point}': "
                f"a branch named '{branch_name}' already exists"
            )
        sha = self._state.resolve(start_point)
        if sha is None:
            raise RuntimeError(
                f"Failed to create branch '{branch_name}': unknown ref '{start_point}'"
            )
        self._state.branch_heads[branch_name] = sha
        self._created_branches.append((branch_name, start_point))

    def checkout_branch(self, cwd: Path, branch: str) -> None:
        if branch in self._checkout_raises:
            raise self._checkout_raises[branch]
        if branch not in self._state.branch_heads:
            raise RuntimeError(f"Failed to checkout branch '{branch}': no such branch")
        self._state.current_branch = branch
        self._state.detached_head = None
        self._checked_out_branches.append(branch)

    def checkout_detached(self, cwd: Path, ref: str) -> None:
        if self._detach_raises is not None:
            raise self._detach_raises
        sha = self._state.resolve(ref)
        if sha is None:
            raise RuntimeError(f"Failed to checkout detached HEAD at '{ref}': unknown ref")
        self._state.current_branch = None
        self._state.detached_head = sha
        self._detached_checkouts.append(ref)

    # ============================================================================
    # Query Operations
    # ============================================================================

    def get_current_branch(self, cwd: Path) -> str | None:
        return self._state.current_branch

    def list_local_branches(self, repo_root: Path) -> list[str]:
        return list(self._state.branch_heads)

    def get_branch_head(self, repo_root: Path, branch: str) -> str | None:
        return self._state.branch_heads.get(branch)

    def detect_trunk_branch(self, repo_root: Path) -> str:
        return self._state.trunk

    @property
    def created_branches(self) -> list[tuple[str, str]]:
        """Get list of created branches for test assertions."""
        return list(self._created_branches)

    @property
    def checked_out_branches(self) -> list[str]:
        """Get list of checked out branches for test assertions."""
        return list(self._checked_out_branches)

    @property
    def detached_checkouts(self) -> list[str]:
        """Get list of refs checked out with a detached HEAD."""
        return list(self._detached_checkouts)
