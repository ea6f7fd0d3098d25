"""Locate the git repository a command runs in."""

from pathlib import Path

from stk_shared.context.types import NoRepoSentinel, RepoContext
from stk_shared.gateway.git.abc import Git


def discover_repo_or_sentinel(git: Git, cwd: Path) -> RepoContext | NoRepoSentinel:
    """Find the repository containing cwd.

    Returns:
        RepoContext for the enclosing repository, or NoRepoSentinel when cwd
        is not inside one
    """
    git_common_dir = git.get_git_common_dir(cwd)
    if git_common_dir is None:
        return NoRepoSentinel()

    return RepoContext(root=git.get_repository_root(cwd), git_common_dir=git_common_dir)
