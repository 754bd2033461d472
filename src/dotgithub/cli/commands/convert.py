"""Convert command implementation."""

from pathlib import Path

import click
import yaml

from dotgithub.cli.json_output import emit_model, format_option, json_error_boundary
from dotgithub.cli.json_schemas import ConvertResponse
from dotgithub.cli.output import machine_output, user_output
from dotgithub.core.context import DotGithubContext
from dotgithub.core.rewriter import convert_workflow
from dotgithub.core.tree import write_generated


@click.command("convert")
@click.argument("workflow_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--output",
    "-o",
    "output_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the Python module here instead of stdout.",
)
@format_option
@click.pass_obj
@json_error_boundary
def convert_cmd(
    ctx: DotGithubContext, workflow_file: Path, output_path: Path | None, format: str
) -> None:
    """Convert WORKFLOW_FILE into Python that calls the generated factories.

    Steps using a registered action become factory calls. Everything else is
    kept as a literal mapping.
    """
    registry = ctx.registry_store.load()
    try:
        result = convert_workflow(
            workflow_file.read_text(encoding="utf-8"), registry, source_name=workflow_file.name
        )
    except (ValueError, yaml.YAMLError) as e:
        raise click.ClickException(f"Could not parse {workflow_file}: {e}") from e

    if output_path is not None:
        write_generated(output_path, result.source)

    if format == "json":
        emit_model(
            ConvertResponse(
                workflow=str(workflow_file),
                output_path=str(output_path) if output_path is not None else None,
                converted=list(result.converted),
                skipped=list(result.skipped),
            )
        )
        return

    if output_path is None:
        machine_output(result.source, nl=False)
    else:
        user_output(f"Wrote {output_path}")
    user_output(f"Converted {len(result.converted)} step(s), left {len(result.skipped)} as-is")
    for uses in result.skipped:
        user_output(f"  not registered: {uses}")
