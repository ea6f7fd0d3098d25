"""Upstack restack command - rebase the current branch and its upstack."""

import click

from stk.cli.core import require_repo, require_stack_store
from stk.core.errors import StkError
from stk_shared.context.context import StkContext
from stk_shared.gateway.stack_store.types import StackStateError
from stk_shared.output.output import user_output


@click.command("restack")
@click.pass_obj
def upstack_restack(ctx: StkContext) -> None:
    """Restack the current branch and every branch above it.

    Each branch whose base has moved is rebased onto the base's new head.
    On conflicts the rebase is left in progress for you to resolve.
    """
    repo = require_repo(ctx)
    require_stack_store(ctx)
    restack_engine = ctx.restack_engine
    assert restack_engine is not None

    try:
        restacked = restack_engine.restack_upstack_of_current(repo.root)
    except (StkError, StackStateError, RuntimeError) as e:
        user_output(click.style("Error: ", fg="red") + str(e))
        raise SystemExit(1) from None

    if not restacked:
        user_output("Nothing to restack.")
        return

    for branch in restacked:
        user_output(click.style(f"✓ Restacked {branch}", fg="green"))
