"""Fake Git rebase operations for testing."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from stk_shared.gateway.git.abc import RebaseResult
from stk_shared.gateway.git.fake_state import FakeRepoState
from stk_shared.gateway.git.rebase_ops.abc import GitRebaseOps


@dataclass(frozen=True)
class RebaseCall:
    """Arguments of a rebase_onto() call recorded by the fake."""

    onto: str
    upstream: str
    branch: str


class FakeGitRebaseOps(GitRebaseOps):
    """In-memory fake implementation of Git rebase operations.

    A successful rebase moves the branch to a freshly generated commit and
    checks it out. Branches listed in rebase_conflicts stop with a conflict
    and leave the rebase in progress.
    """

    def __init__(
        self,
        state: FakeRepoState,
        *,
        rebase_conflicts: dict[str, tuple[str, ...]] | None = None,
    ) -> None:
        """Create FakeGitRebaseOps linked to shared repository state.

        Args:
            state: Repository state shared with FakeGit
            rebase_conflicts: Mapping of branch name -> conflicting file paths
        """
        self._state = state
        self._rebase_conflicts = rebase_conflicts if rebase_conflicts is not None else {}
        self._rebases: list[RebaseCall] = []

    def rebase_onto(self, cwd: Path, *, onto: str, upstream: str, branch: str) -> RebaseResult:
        if branch not in self._state.branch_heads:
            raise RuntimeError(f"Failed to rebase '{branch}': no such branch")
        self._rebases.append(RebaseCall(onto=onto, upstream=upstream, branch=branch))

        self._state.current_branch = branch
        self._state.detached_head = None

        if branch in self._rebase_conflicts:
            self._state.rebase_in_progress = True
            return RebaseResult(success=False, conflict_files=self._rebase_conflicts[branch])

        self._state.branch_heads[branch] = self._state.new_commit_sha()
        return RebaseResult(success=True, conflict_files=())

    def is_rebase_in_progress(self, cwd: Path) -> bool:
        return self._state.rebase_in_progress

    @property
    def rebases(self) -> list[RebaseCall]:
        """Get list of rebases performed for test assertions."""
        return list(self._rebases)
