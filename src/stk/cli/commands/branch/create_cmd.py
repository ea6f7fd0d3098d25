"""Branch create command - create a new branch in the current stack."""

import click

from stk.cli.core import ensure_stack_store, require_repo
from stk.core.branch_insertion import BranchInsertionEngine, InsertionMode
from stk.core.errors import StkError
from stk_shared.context.context import StkContext
from stk_shared.gateway.stack_store.types import StackStateError
from stk_shared.output.output import user_output


@click.command("create")
@click.argument("name", metavar="NAME", required=False)
@click.option(
    "--insert",
    is_flag=True,
    help="Restack the upstack of the current branch on top of the new branch",
)
@click.option(
    "--below",
    is_flag=True,
    help="Place the branch below the current branch. Implies --insert.",
)
@click.option("-m", "--message", default=None, help="Commit message")
@click.pass_obj
def branch_create(
    ctx: StkContext,
    name: str | None,
    insert: bool,
    below: bool,
    message: str | None,
) -> None:
    """Create a new branch stacked on the current branch.

    Staged changes are committed to the new branch. If nothing is staged,
    an empty commit is created so the branch still has a commit of its own.

    By default the branch is added on top of the current branch. With
    --insert, branches that were stacked on the current branch move onto
    the new branch. With --below, the new branch goes between the current
    branch and its base.
    """
    if not name:
        user_output(click.style("Error: ", fg="red") + "branch name is required")
        raise SystemExit(1) from None

    repo = require_repo(ctx)
    try:
        stack_store = ensure_stack_store(ctx, repo)
    except (StackStateError, RuntimeError) as e:
        user_output(click.style("Error: ", fg="red") + str(e))
        raise SystemExit(1) from None

    restack_engine = ctx.restack_engine
    assert restack_engine is not None
    engine = BranchInsertionEngine(
        git=ctx.git,
        stack_store=stack_store,
        restack_engine=restack_engine,
        repo_root=repo.root,
    )
    mode = InsertionMode.from_flags(insert=insert, below=below)

    # The restack engine's errors, RuntimeError included, arrive unwrapped
    try:
        result = engine.create(name, mode, message)
    except (StkError, StackStateError, RuntimeError) as e:
        user_output(click.style("Error: ", fg="red") + str(e))
        raise SystemExit(1) from None

    if mode is InsertionMode.INSERT_BELOW:
        summary = f"✓ Inserted {name} below {result.restacked[0]}"
    elif mode is InsertionMode.INSERT_ABOVE:
        summary = f"✓ Inserted {name} above {result.anchor.name}"
    else:
        summary = f"✓ Created {name} on {result.anchor.name}"
    user_output(click.style(summary, fg="green"))

    for branch in result.restacked:
        user_output(f"  Moved {branch} onto {name}")
