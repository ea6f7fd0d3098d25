"""Fake Git commit operations for testing."""

from __future__ import annotations

from pathlib import Path

from stk_shared.gateway.git.commit_ops.abc import GitCommitOps
from stk_shared.gateway.git.fake_state import FakeCommit, FakeRepoState


class FakeGitCommitOps(GitCommitOps):
    """In-memory fake implementation of Git commit operations.

    A commit advances whatever HEAD points at (the current branch, or the
    detached HEAD) and clears the staged files.
    """

    def __init__(self, state: FakeRepoState, *, commit_raises: Exception | None = None) -> None:
        self._state = state
        self._commit_raises = commit_raises
        self._commits: list[FakeCommit] = []

    def commit(self, cwd: Path, message: str | None, *, allow_empty: bool) -> None:
        if self._commit_raises is not None:
            raise self._commit_raises
        if not allow_empty and not self._state.staged_files:
            raise RuntimeError("Failed to create commit: nothing to commit")

        parent = self._state.head_commit()
        if parent is None:
            raise RuntimeError("Failed to create commit: HEAD does not point at a commit")

        sha = self._state.new_commit_sha()
        if self._state.current_branch is not None:
            self._state.branch_heads[self._state.current_branch] = sha
        else:
            self._state.detached_head = sha
        self._state.staged_files.clear()
        self._commits.append(
            FakeCommit(sha=sha, parent=parent, message=message, allow_empty=allow_empty)
        )

    @property
    def commits(self) -> list[FakeCommit]:
        """Get list of commits created for test assertions."""
        return list(self._commits)
