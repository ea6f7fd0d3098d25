"""Output helpers for user-facing messages.

User messages (progress, confirmations, errors) go to stderr so stdout stays
clean for anything a script might consume.
"""

import click


def user_output(message: str = "", nl: bool = True) -> None:
    """Write a message for the user to stderr."""
    click.echo(message, nl=nl, err=True)
