import logging

import click

from stk.cli.commands.branch import branch_group
from stk.cli.commands.branch.create_cmd import branch_create
from stk.cli.commands.init_cmd import init_cmd
from stk.cli.commands.log_cmd import log_cmd
from stk.cli.commands.upstack import upstack_group
from stk.core.context import create_context

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="stk")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, debug: bool) -> None:
    """Manage stacks of dependent git branches."""
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s - %(levelname)s - %(message)s")

    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        ctx.obj = create_context(debug=debug)


cli.add_command(branch_group)
cli.add_command(init_cmd)
cli.add_command(log_cmd)
cli.add_command(upstack_group)

# Shortcut: `stk bc` == `stk branch create`
cli.add_command(branch_create, name="bc")


def main() -> None:
    """CLI entry point used by the `stk` console script."""
    cli()
