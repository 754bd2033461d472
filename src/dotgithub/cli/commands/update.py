"""Update command implementation."""

import click

from dotgithub.cli.commands.add import report_synthesis
from dotgithub.cli.json_output import emit_model, format_option, json_error_boundary
from dotgithub.cli.json_schemas import RepositoryFailureInfo, SynthesisResponse, UpdateResponse
from dotgithub.cli.output import user_output
from dotgithub.core.context import DotGithubContext
from dotgithub.core.errors import DotGithubError
from dotgithub.core.synthesizer import SynthesisResult, update_action


@click.command("update")
@click.argument("reference", required=False)
@click.option("--latest", is_flag=True, help="Move to the newest tag, not the stored version.")
@click.option("--name", "action_name", help="Derive identifiers from this name.")
@click.option(
    "--no-pin",
    is_flag=True,
    help="Reference the resolved tag or branch at call sites instead of the commit SHA.",
)
@format_option
@click.pass_obj
@json_error_boundary
def update_cmd(
    ctx: DotGithubContext,
    reference: str | None,
    latest: bool,
    action_name: str | None,
    no_pin: bool,
    format: str,
) -> None:
    """Re-resolve and regenerate REFERENCE (owner/repo[@ref]), or every registered repository.

    Without a ref the stored version is re-resolved, which picks up a major
    tag that moved forward. With --latest the newest tag is used.
    """
    registry = ctx.registry_store.load()
    targets = [reference] if reference is not None else registry.org_repos()

    results: list[SynthesisResult] = []
    failures: list[RepositoryFailureInfo] = []
    for target in targets:
        try:
            registry, result = update_action(
                ctx, registry, target, latest=latest, action_name=action_name, pin=not no_pin
            )
        except DotGithubError as e:
            # A single explicit target fails the command the usual way
            if reference is not None:
                raise
            failures.append(RepositoryFailureInfo(org_repo=target, error=str(e)))
            continue
        results.append(result)

    ctx.registry_store.save(registry)

    if format == "json":
        emit_model(
            UpdateResponse(
                updated=[SynthesisResponse.from_result(result) for result in results],
                failures=failures,
            )
        )
    else:
        if not targets:
            user_output("No actions registered.")
        for result in results:
            if result.changed:
                report_synthesis(result)
            else:
                user_output(f"{result.org_repo} is up to date ({result.revision.resolved_ref})")
        for failure in failures:
            user_output(f"{click.style('✗', fg='red')} {failure.org_repo}: {failure.error}")

    if failures or any(result.status == "partial" for result in results):
        raise SystemExit(1)
