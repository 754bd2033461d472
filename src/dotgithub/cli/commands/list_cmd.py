"""List command implementation."""

import click
from rich.console import Console
from rich.table import Table

from dotgithub.cli.json_output import emit_model, format_option, json_error_boundary
from dotgithub.cli.json_schemas import ListResponse, RegistryEntryInfo
from dotgithub.cli.output import user_output
from dotgithub.core.context import DotGithubContext


@click.command("list")
@format_option
@click.pass_obj
@json_error_boundary
def list_cmd(ctx: DotGithubContext, format: str) -> None:
    """List registered actions."""
    registry = ctx.registry_store.load()
    output_root = ctx.path_resolver.output_root(registry.output_dir)

    if format == "json":
        emit_model(
            ListResponse(
                registry_path=str(ctx.registry_store.path()),
                output_root=str(output_root),
                entries=[RegistryEntryInfo.from_entry(entry) for entry in registry.entries],
            )
        )
        return

    if not registry.entries:
        user_output("No actions registered. Add one with: dotgithub add owner/repo")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("action", style="cyan", no_wrap=True)
    table.add_column("version", no_wrap=True)
    table.add_column("revision", no_wrap=True)
    table.add_column("factory", no_wrap=True)
    table.add_column("file", no_wrap=True)
    for entry in registry.entries:
        table.add_row(
            entry.uses,
            entry.display_version,
            entry.pinned_revision[:12],
            entry.generated_identifier or "[dim]-[/dim]",
            entry.output_path or "[dim]-[/dim]",
        )

    # Output table to stderr (consistent with user_output convention)
    console = Console(stderr=True, width=200)
    console.print(table)
    user_output(f"Output root: {output_root}")
