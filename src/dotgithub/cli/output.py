"""Output routing for CLI commands.

Human-readable messages go to stderr so stdout stays clean for machine
output (JSON, generated source) that may be piped.
"""

import click


def user_output(message: str = "", *, nl: bool = True) -> None:
    """Print a message for the user on stderr."""
    click.echo(message, err=True, nl=nl)


def machine_output(message: str, *, nl: bool = True) -> None:
    """Print machine-consumable output on stdout."""
    click.echo(message, nl=nl)
