"""Production implementation of the Git gateway using subprocess."""

import subprocess
from pathlib import Path

from stk_shared.gateway.git.abc import Git
from stk_shared.gateway.git.branch_ops.abc import GitBranchOps
from stk_shared.gateway.git.branch_ops.real import RealGitBranchOps
from stk_shared.gateway.git.commit_ops.abc import GitCommitOps
from stk_shared.gateway.git.commit_ops.real import RealGitCommitOps
from stk_shared.gateway.git.rebase_ops.abc import GitRebaseOps
from stk_shared.gateway.git.rebase_ops.real import RealGitRebaseOps
from stk_shared.subprocess_utils import run_subprocess_with_context


class RealGit(Git):
    """Production implementation using subprocess.

    All git operations execute actual git commands via subprocess.
    """

    def __init__(self) -> None:
        self._branch = RealGitBranchOps()
        self._commit = RealGitCommitOps()
        self._rebase = RealGitRebaseOps(
            get_git_common_dir=self.get_git_common_dir,
            get_conflicted_files=self.get_conflicted_files,
        )

    @property
    def branch(self) -> GitBranchOps:
        return self._branch

    @property
    def commit(self) -> GitCommitOps:
        return self._commit

    @property
    def rebase(self) -> GitRebaseOps:
        return self._rebase

    def get_git_common_dir(self, cwd: Path) -> Path | None:
        """Get the common git directory."""
        result = subprocess.run(
            ["git", "rev-parse", "--git-common-dir"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None

        git_dir = Path(result.stdout.strip())
        if not git_dir.is_absolute():
            git_dir = cwd / git_dir
        return git_dir.resolve()

    def get_repository_root(self, cwd: Path) -> Path:
        """Get the repository root directory."""
        result = run_subprocess_with_context(
            cmd=["git", "rev-parse", "--show-toplevel"],
            operation_context="get repository root",
            cwd=cwd,
        )
        return Path(result.stdout.strip())

    def peel_to_commit(self, cwd: Path, ref: str) -> str:
        """Resolve a ref to a commit SHA."""
        result = run_subprocess_with_context(
            cmd=["git", "rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"],
            operation_context=f"resolve '{ref}' to a commit",
            cwd=cwd,
        )
        return result.stdout.strip()

    def diff_index(self, cwd: Path, commit: str) -> list[str]:
        """List staged paths that differ from commit."""
        result = run_subprocess_with_context(
            cmd=["git", "diff-index", "--cached", "--name-only", commit],
            operation_context=f"diff index against '{commit}'",
            cwd=cwd,
        )
        return [line for line in result.stdout.splitlines() if line]

    def get_merge_base(self, repo_root: Path, ref1: str, ref2: str) -> str | None:
        """Get the merge base of two refs."""
        result = subprocess.run(
            ["git", "merge-base", ref1, ref2],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None

        return result.stdout.strip()

    def get_conflicted_files(self, cwd: Path) -> list[str]:
        """List files with unresolved conflicts."""
        result = run_subprocess_with_context(
            cmd=["git", "diff", "--name-only", "--diff-filter=U"],
            operation_context="list conflicted files",
            cwd=cwd,
        )
        return [line for line in result.stdout.splitlines() if line]
