"""Precondition checks for commands.

A failed check prints a red "Error:" line on stderr and exits with status 1,
the same shape json_error_boundary gives domain errors in text mode.
"""

from typing import NoReturn

import click

from dotgithub.cli.output import user_output


def error_line(message: str) -> str:
    return click.style("Error: ", fg="red") + message


def _fail(message: str) -> NoReturn:
    user_output(error_line(message))
    raise SystemExit(1)


class Ensure:
    """Command preconditions that end the command when they do not hold."""

    @staticmethod
    def invariant(condition: bool, error_message: str) -> None:
        """Exit with error_message unless condition holds.

        Raises:
            SystemExit: With status 1 when condition is false
        """
        if not condition:
            _fail(error_message)
