"""Fake git operations for testing.

FakeGit is an in-memory implementation that accepts pre-configured state
in its constructor. Its branch, commit and rebase sub-gateways share one
FakeRepoState, so mutations made through any of them are visible to all.
"""

from __future__ import annotations

from pathlib import Path

from stk_shared.gateway.git.abc import Git
from stk_shared.gateway.git.branch_ops.fake import FakeGitBranchOps
from stk_shared.gateway.git.commit_ops.fake import FakeGitCommitOps
from stk_shared.gateway.git.fake_state import FakeRepoState
from stk_shared.gateway.git.rebase_ops.fake import FakeGitRebaseOps


class FakeGit(Git):
    """In-memory fake implementation of git operations.

    The fake models a single repository; the cwd / repo_root arguments of
    the gateway methods are accepted and ignored.

    Example:
        >>> git = FakeGit(
        ...     branch_heads={"main": "a" * 40, "feature": "b" * 40},
        ...     current_branch="feature",
        ... )
        >>> git.branch.get_current_branch(Path("/repo"))
        'feature'
    """

    def __init__(
        self,
        *,
        repo_root: Path = Path("/repo"),
        trunk: str = "main",
        branch_heads: dict[str, str] | None = None,
        current_branch: str | None = None,
        staged_files: list[str] | None = None,
        merge_bases: dict[tuple[str, str], str] | None = None,
        commit_raises: Exception | None = None,
        create_branch_raises: Exception | None = None,
        checkout_raises: dict[str, Exception] | None = None,
        detach_raises: Exception | None = None,
        diff_raises: Exception | None = None,
        rebase_conflicts: dict[str, tuple[str, ...]] | None = None,
    ) -> None:
        """Create FakeGit with pre-configured state.

        Args:
            repo_root: Repository root reported by get_repository_root()
            trunk: Branch reported by detect_trunk_branch()
            branch_heads: Mapping of branch name -> commit SHA
            current_branch: Checked-out branch (None means detached at nothing)
            staged_files: Paths reported as staged by diff_index()
            merge_bases: Mapping of (ref1, ref2) -> merge base SHA (order-insensitive)
            commit_raises: Exception raised by commit()
            create_branch_raises: Exception raised by create_branch()
            checkout_raises: Mapping of branch name -> exception raised on checkout
            detach_raises: Exception raised by checkout_detached()
            diff_raises: Exception raised by diff_index()
            rebase_conflicts: Mapping of branch name -> conflicting files on rebase
        """
        heads = dict(branch_heads) if branch_heads is not None else {}
        self._state = FakeRepoState(
            repo_root=repo_root,
            trunk=trunk,
            branch_heads=heads,
            current_branch=current_branch,
            staged_files=list(staged_files) if staged_files is not None else [],
            merge_bases=dict(merge_bases) if merge_bases is not None else {},
            known_commits=set(heads.values()),
        )
        self._diff_raises = diff_raises

        self._branch = FakeGitBranchOps(
            self._state,
            checkout_raises=checkout_raises,
            detach_raises=detach_raises,
            create_branch_raises=create_branch_raises,
        )
        self._commit = FakeGitCommitOps(self._state, commit_raises=commit_raises)
        self._rebase = FakeGitRebaseOps(self._state, rebase_conflicts=rebase_conflicts)

    @property
    def branch(self) -> FakeGitBranchOps:
        return self._branch

    @property
    def commit(self) -> FakeGitCommitOps:
        return self._commit

    @property
    def rebase(self) -> FakeGitRebaseOps:
        return self._rebase

    def get_git_common_dir(self, cwd: Path) -> Path | None:
        return self._state.repo_root / ".git"

    def get_repository_root(self, cwd: Path) -> Path:
        return self._state.repo_root

    def peel_to_commit(self, cwd: Path, ref: str) -> str:
        sha = self._state.resolve(ref)
        if sha is None:
            raise RuntimeError(f"Failed to resolve '{ref}' to a commit")
        return sha

    def diff_index(self, cwd: Path, commit: str) -> list[str]:
        if self._diff_raises is not None:
            raise self._diff_raises
        return list(self._state.staged_files)

    def get_merge_base(self, repo_root: Path, ref1: str, ref2: str) -> str | None:
        if (ref1, ref2) in self._state.merge_bases:
            return self._state.merge_bases[(ref1, ref2)]
        return self._state.merge_bases.get((ref2, ref1))

    def get_conflicted_files(self, cwd: Path) -> list[str]:
        return []

    # ============================================================================
    # Test inspection
    # ============================================================================

    @property
    def detached_head(self) -> str | None:
        """Commit HEAD points at when detached, None when on a branch."""
        return self._state.detached_head

    def branch_head(self, branch: str) -> str | None:
        """Current commit of a branch, for assertions."""
        return self._state.branch_heads.get(branch)
