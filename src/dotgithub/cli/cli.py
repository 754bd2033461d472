import logging
import os
from pathlib import Path

import click

from dotgithub.cli.commands.add import add_cmd
from dotgithub.cli.commands.config import config_group
from dotgithub.cli.commands.convert import convert_cmd
from dotgithub.cli.commands.init import init_cmd
from dotgithub.cli.commands.list_cmd import list_cmd
from dotgithub.cli.commands.regenerate import regenerate_cmd
from dotgithub.cli.commands.remove import remove_cmd
from dotgithub.cli.commands.update import update_cmd
from dotgithub.core.context import create_context

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags

DEBUG_ENV_VAR = "DOTGITHUB_DEBUG"


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="dotgithub")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Registry document to use instead of searching upward for .github/dotgithub.*.",
)
@click.option("--token", default=None, help="Bearer token for GitHub API and clone requests.")
@click.option("--debug", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, token: str | None, debug: bool) -> None:
    """Generate typed Python step factories for GitHub Actions."""
    if debug or os.getenv(DEBUG_ENV_VAR):
        logging.basicConfig(level=logging.DEBUG, format="[DEBUG %(name)s:%(lineno)d] %(message)s")

    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        ctx.obj = create_context(registry_path=config_path, token=token)
    elif config_path is not None:
        ctx.obj.path_resolver.set_registry_path(config_path)


# Register all commands
cli.add_command(add_cmd)
cli.add_command(config_group)
cli.add_command(convert_cmd)
cli.add_command(init_cmd)
cli.add_command(list_cmd)
cli.add_command(regenerate_cmd)
cli.add_command(remove_cmd)
cli.add_command(remove_cmd, name="rm")
cli.add_command(update_cmd)


def main() -> None:
    """CLI entry point used by the `dotgithub` console script."""
    cli()
