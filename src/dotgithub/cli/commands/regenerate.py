"""Regenerate command implementation."""

import click

from dotgithub.cli.commands.add import report_synthesis
from dotgithub.cli.json_output import emit_model, format_option, json_error_boundary
from dotgithub.cli.json_schemas import RegenerateResponse
from dotgithub.cli.output import user_output
from dotgithub.core.context import DotGithubContext
from dotgithub.core.synthesizer import regenerate_actions


@click.command("regenerate")
@click.argument("pattern", required=False)
@click.option("--prune", is_flag=True, help="Delete generated modules no entry references.")
@format_option
@click.pass_obj
@json_error_boundary
def regenerate_cmd(ctx: DotGithubContext, pattern: str | None, prune: bool, format: str) -> None:
    """Regenerate registered actions at their pinned revisions.

    PATTERN is a glob over owner/repo, e.g. 'actions/*'.
    """
    registry = ctx.registry_store.load()
    registry, result = regenerate_actions(ctx, registry, pattern, prune=prune)
    ctx.registry_store.save(registry)

    if format == "json":
        emit_model(RegenerateResponse.from_result(result))
    else:
        if not result.results and not result.failures:
            user_output("Nothing to regenerate.")
        for item in result.results:
            report_synthesis(item)
        for org_repo, error in result.failures:
            user_output(f"{click.style('✗', fg='red')} {org_repo}: {error}")
        for path in result.pruned_paths:
            user_output(f"Pruned {path}")

    if result.failures or any(item.status == "partial" for item in result.results):
        raise SystemExit(1)
