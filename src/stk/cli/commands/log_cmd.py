"""Log command - show the tracked branches as a tree rooted at trunk."""

from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.tree import Tree

from stk.cli.core import require_repo, require_stack_store
from stk_shared.context.context import StkContext
from stk_shared.gateway.git.abc import Git
from stk_shared.gateway.stack_store.abc import StackStore
from stk_shared.gateway.stack_store.types import StackBranch


def _label(
    git: Git, repo_root: Path, branch: str, record: StackBranch | None, current: str | None
) -> str:
    label = f"[bold]{escape(branch)}[/bold]" if branch == current else escape(branch)
    if record is not None:
        base_head = git.branch.get_branch_head(repo_root, record.base)
        if base_head is not None and base_head != record.base_hash:
            label += " [yellow](needs restack)[/yellow]"
    if branch == current:
        label += " [green]◀[/green]"
    return label


def build_stack_tree(
    git: Git, stack_store: StackStore, repo_root: Path, current: str | None
) -> Tree:
    """Build a rich Tree of the forest, trunk at the root."""
    records = {b.name: b for b in stack_store.list_branches()}
    trunk = stack_store.trunk()

    root = Tree(_label(git, repo_root, trunk, None, current))
    pending = [(root, trunk)]
    while pending:
        node, name = pending.pop(0)
        for child in stack_store.list_above(name):
            child_node = node.add(_label(git, repo_root, child, records[child], current))
            pending.append((child_node, child))
    return root


@click.command("log")
@click.pass_obj
def log_cmd(ctx: StkContext) -> None:
    """Show tracked branches as a tree.

    The current branch is marked, and branches whose base has moved since
    they were last restacked are flagged.
    """
    repo = require_repo(ctx)
    stack_store = require_stack_store(ctx)
    current = ctx.git.branch.get_current_branch(repo.root)

    tree = build_stack_tree(ctx.git, stack_store, repo.root, current)

    # Output to stderr (consistent with user_output convention)
    console = Console(stderr=True, force_terminal=True, width=200)
    console.print(tree)
