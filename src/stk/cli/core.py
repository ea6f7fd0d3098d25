"""Helpers shared by commands that operate on the current repository."""

import logging

import click

from stk_shared.context.context import StkContext
from stk_shared.context.types import NoRepoSentinel, RepoContext
from stk_shared.gateway.stack_store.abc import StackStore
from stk_shared.output.output import user_output

logger = logging.getLogger(__name__)


def require_repo(ctx: StkContext) -> RepoContext:
    """Return the current repository, or exit with an error outside one."""
    if isinstance(ctx.repo, NoRepoSentinel):
        user_output(f"Error: {ctx.repo.message}")
        raise SystemExit(1) from None
    return ctx.repo


def require_stack_store(ctx: StkContext) -> StackStore:
    """Return the stack store, or exit if it has not been initialized."""
    require_repo(ctx)
    store = ctx.stack_store
    # Type assertion: a repository always comes with a stack store
    assert store is not None
    if not store.is_initialized():
        user_output("Error: stack not initialized. Run 'stk init' first.")
        raise SystemExit(1) from None
    return store


def ensure_stack_store(ctx: StkContext, repo: RepoContext) -> StackStore:
    """Return the stack store, initializing it with the trunk on first use.

    The trunk comes from `.stk/config.toml` when set, otherwise it is
    detected from the repository.
    """
    store = ctx.stack_store
    assert store is not None
    if store.is_initialized():
        return store

    trunk = ctx.local_config.trunk
    if trunk is None:
        trunk = ctx.git.branch.detect_trunk_branch(repo.root)
    store.initialize(trunk)
    logger.debug("initialized stack store with trunk %s", trunk)
    user_output(f"Initialized stack with trunk {click.style(trunk, fg='cyan')}")
    return store
