"""Branch management commands."""

import click

from stk.cli.commands.branch.create_cmd import branch_create


@click.group("branch")
def branch_group() -> None:
    """Manage branches."""
    pass


branch_group.add_command(branch_create)
