"""Add command implementation."""

import click

from dotgithub.cli.json_output import emit_model, format_option, json_error_boundary
from dotgithub.cli.json_schemas import SynthesisResponse
from dotgithub.cli.output import user_output
from dotgithub.core.context import DotGithubContext
from dotgithub.core.synthesizer import SynthesisResult, add_action


def report_synthesis(result: SynthesisResult) -> None:
    """Print a human-readable summary of one synthesized repository."""
    revision = result.revision
    user_output(
        f"{click.style(result.org_repo, fg='cyan')} @ {revision.resolved_ref} "
        f"({revision.immutable_id[:12]})"
    )
    for item in result.generated:
        label = item.action_path or "<root>"
        mark = click.style("✓", fg="green")
        user_output(f"  {mark} {label}: {item.function_name} -> {item.path}")
    for failure in result.failures:
        label = failure.action_path or "<root>"
        user_output(f"  {click.style('✗', fg='red')} {label}: {failure.reason}")


@click.command("add")
@click.argument("reference")
@click.option("--name", "action_name", help="Derive identifiers from this name.")
@click.option(
    "--no-pin",
    is_flag=True,
    help="Reference the resolved tag or branch at call sites instead of the commit SHA.",
)
@format_option
@click.pass_obj
@json_error_boundary
def add_cmd(
    ctx: DotGithubContext, reference: str, action_name: str | None, no_pin: bool, format: str
) -> None:
    """Generate step factories for REFERENCE (owner/repo[@ref]) and register them.

    Without a ref the newest major-version tag is used (v4 over v4.1.2), then
    the newest semantic version, then the default branch. Use @latest to
    require a tag.
    """
    registry = ctx.registry_store.load()
    registry, result = add_action(ctx, registry, reference, action_name=action_name, pin=not no_pin)
    ctx.registry_store.save(registry)

    if format == "json":
        emit_model(SynthesisResponse.from_result(result))
    else:
        report_synthesis(result)

    if result.status == "partial":
        raise SystemExit(1)
