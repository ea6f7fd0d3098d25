"""Commands operating on the current branch and the branches above it."""

import click

from stk.cli.commands.upstack.restack_cmd import upstack_restack


@click.group("upstack")
def upstack_group() -> None:
    """Operate on the current branch and everything stacked on it."""
    pass


upstack_group.add_command(upstack_restack)
