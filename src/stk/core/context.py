"""Factories for StkContext.

create_context() builds the production gateways; context_for_test() builds a
context from fakes, filling in anything the test does not care about.
"""

from pathlib import Path

from stk.cli.config import load_config
from stk.core.repo_discovery import discover_repo_or_sentinel
from stk.core.restack import GitRestackEngine, RestackEngine
from stk_shared.context.context import StkContext
from stk_shared.context.types import LoadedConfig, NoRepoSentinel, RepoContext
from stk_shared.gateway.git.abc import Git
from stk_shared.gateway.git.real import RealGit
from stk_shared.gateway.stack_store.abc import StackStore
from stk_shared.gateway.stack_store.real import RealStackStore


def create_context(*, debug: bool, cwd: Path | None = None) -> StkContext:
    """Create production context with real implementations.

    Called at CLI entry point to create the context for the entire
    command execution. Outside a git repository the stack store and the
    restack engine are left unset.
    """
    if cwd is None:
        cwd = Path.cwd()

    git = RealGit()
    repo = discover_repo_or_sentinel(git, cwd)
    if isinstance(repo, NoRepoSentinel):
        return StkContext(
            git=git,
            stack_store=None,
            restack_engine=None,
            cwd=cwd,
            repo=repo,
            local_config=LoadedConfig.defaults(),
            debug=debug,
        )

    stack_store = RealStackStore(repo.state_dir)
    return StkContext(
        git=git,
        stack_store=stack_store,
        restack_engine=GitRestackEngine(git=git, stack_store=stack_store),
        cwd=cwd,
        repo=repo,
        local_config=load_config(repo.config_dir),
        debug=debug,
    )


def context_for_test(
    *,
    git: Git,
    stack_store: StackStore,
    restack_engine: RestackEngine | None = None,
    cwd: Path | None = None,
    repo: RepoContext | NoRepoSentinel | None = None,
    local_config: LoadedConfig | None = None,
) -> StkContext:
    """Create a context for tests.

    Args:
        git: Git gateway (usually FakeGit)
        stack_store: Stack store (usually FakeStackStore)
        restack_engine: Defaults to a GitRestackEngine over git and stack_store
        cwd: Defaults to the repository root reported by git
        repo: Defaults to a RepoContext rooted at cwd
        local_config: Defaults to LoadedConfig.defaults()
    """
    if cwd is None:
        cwd = git.get_repository_root(Path("/"))
    if repo is None:
        repo = RepoContext(root=cwd, git_common_dir=cwd / ".git")
    if restack_engine is None:
        restack_engine = GitRestackEngine(git=git, stack_store=stack_store)

    return StkContext(
        git=git,
        stack_store=stack_store,
        restack_engine=restack_engine,
        cwd=cwd,
        repo=repo,
        local_config=local_config if local_config is not None else LoadedConfig.defaults(),
        debug=False,
    )
