"""Production implementation of Git rebase operations using subprocess."""

import os
import subprocess
from collections.abc import Callable
from pathlib import Path

from stk_shared.gateway.git.abc import RebaseResult
from stk_shared.gateway.git.rebase_ops.abc import GitRebaseOps


class RealGitRebaseOps(GitRebaseOps):
    """Real implementation of Git rebase operations using subprocess."""

    def __init__(
        self,
        get_git_common_dir: Callable[[Path], Path | None],
        get_conflicted_files: Callable[[Path], list[str]],
    ) -> None:
        """Initialize RealGitRebaseOps with helper functions.

        Args:
            get_git_common_dir: Function to get git common directory for worktree support
            get_conflicted_files: Function to get list of conflicted files
        """
        self._get_git_common_dir = get_git_common_dir
        self._get_conflicted_files = get_conflicted_files

    def rebase_onto(self, cwd: Path, *, onto: str, upstream: str, branch: str) -> RebaseResult:
        """Rebase the commits of branch after upstream onto a new base."""
        result = subprocess.run(
            ["git", "rebase", "--onto", onto, upstream, branch],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
            env={**os.environ, "GIT_EDITOR": "true"},  # Auto-accept commit messages
        )

        if result.returncode == 0:
            return RebaseResult(success=True, conflict_files=())

        if not self.is_rebase_in_progress(cwd):
            # Failed before replaying anything (bad ref, dirty tree)
            raise RuntimeError(
                f"Failed to rebase '{branch}' onto '{onto}': {result.stderr.strip()}"
            )

        conflict_files = self._get_conflicted_files(cwd)
        return RebaseResult(success=False, conflict_files=tuple(conflict_files))

    def is_rebase_in_progress(self, cwd: Path) -> bool:
        """Check if rebase in progress (.git/rebase-merge or .git/rebase-apply)."""
        git_dir = self._get_git_common_dir(cwd)
        if git_dir is None:
            return False
        return (git_dir / "rebase-merge").exists() or (git_dir / "rebase-apply").exists()
