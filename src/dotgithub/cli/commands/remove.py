"""Remove command implementation."""

import click

from dotgithub.cli.json_output import emit_model, format_option, json_error_boundary
from dotgithub.cli.json_schemas import RemoveResponse
from dotgithub.cli.output import user_output
from dotgithub.core.context import DotGithubContext
from dotgithub.core.references import parse_action_reference
from dotgithub.core.synthesizer import remove_action


@click.command("remove")
@click.argument("reference")
@click.option(
    "--path",
    "action_path",
    default=None,
    help="Remove only the action at this subpath (\"\" for the repository root).",
)
@click.option("--keep-files", is_flag=True, help="Drop registry entries but leave generated files.")
@format_option
@click.pass_obj
@json_error_boundary
def remove_cmd(
    ctx: DotGithubContext,
    reference: str,
    action_path: str | None,
    keep_files: bool,
    format: str,
) -> None:
    """Remove REFERENCE (owner/repo, any @ref is ignored) from the registry."""
    org_repo = parse_action_reference(reference).org_repo
    registry = ctx.registry_store.load()
    registry, result = remove_action(
        ctx, registry, org_repo, action_path=action_path, keep_files=keep_files
    )
    ctx.registry_store.save(registry)

    if format == "json":
        emit_model(RemoveResponse.from_result(result))
        return

    for entry in result.removed_entries:
        user_output(f"Removed {click.style(entry.uses, fg='cyan')} ({entry.generated_identifier})")
    if keep_files:
        user_output("Generated files were kept.")
