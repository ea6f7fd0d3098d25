"""Init command - create the stack store for the current repository."""

import click

from stk.cli.core import require_repo
from stk_shared.context.context import StkContext
from stk_shared.output.output import user_output


@click.command("init")
@click.option("--trunk", default=None, help="Trunk branch (defaults to config, then detection)")
@click.pass_obj
def init_cmd(ctx: StkContext, trunk: str | None) -> None:
    """Initialize stack tracking for this repository.

    Running init again with the same trunk is a no-op.
    """
    repo = require_repo(ctx)
    store = ctx.stack_store
    assert store is not None

    if trunk is None:
        trunk = ctx.local_config.trunk
    if trunk is None:
        trunk = ctx.git.branch.detect_trunk_branch(repo.root)

    if store.is_initialized():
        existing = store.trunk()
        if existing != trunk:
            user_output(
                click.style("Error: ", fg="red")
                + f"stack already initialized with trunk {existing}"
            )
            raise SystemExit(1) from None
        user_output(f"Stack already initialized with trunk {click.style(trunk, fg='cyan')}")
        return

    if ctx.git.branch.get_branch_head(repo.root, trunk) is None:
        user_output(click.style("Error: ", fg="red") + f"trunk branch {trunk} does not exist")
        raise SystemExit(1) from None

    store.initialize(trunk)
    user_output(click.style("✓ ", fg="green") + f"Initialized stack with trunk {trunk}")
