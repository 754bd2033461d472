"""Init command implementation."""

from dataclasses import replace

import click

from dotgithub.cli.ensure import Ensure
from dotgithub.cli.json_output import emit_model, format_option, json_error_boundary
from dotgithub.cli.json_schemas import InitResponse
from dotgithub.cli.output import user_output
from dotgithub.core.context import DotGithubContext
from dotgithub.core.registry import DEFAULT_OUTPUT_DIR, Registry
from dotgithub.core.registry_io import REGISTRY_BASE_NAME, REGISTRY_SUFFIXES, write_document

FORMAT_TYPE_CHOICES = [suffix.lstrip(".") for suffix in REGISTRY_SUFFIXES]


@click.command("init")
@click.option(
    "--format-type",
    type=click.Choice(FORMAT_TYPE_CHOICES),
    default=None,
    help="Serialized form of the document (default: the discovered document's, else json).",
)
@click.option(
    "--output-dir",
    default=DEFAULT_OUTPUT_DIR,
    show_default=True,
    help="Output directory for generated modules, relative to the document.",
)
@click.option("--force", is_flag=True, help="Overwrite an existing document.")
@format_option
@click.pass_obj
@json_error_boundary
def init_cmd(
    ctx: DotGithubContext,
    format_type: str | None,
    output_dir: str,
    force: bool,
    format: str,
) -> None:
    """Write a default registry document."""
    discovered = ctx.path_resolver.registry_path()
    if format_type is None:
        path = discovered
    else:
        path = discovered.with_name(f"{REGISTRY_BASE_NAME}.{format_type}")

    existed = path.exists()
    Ensure.invariant(
        force or not existed,
        f"Registry document already exists at {path}. Use --force to overwrite it.",
    )
    Ensure.invariant(bool(output_dir.strip()), "--output-dir must not be empty")

    registry = replace(Registry.default(), output_dir=output_dir)
    write_document(path, registry.to_document())
    ctx.path_resolver.set_registry_path(path)
    output_root = ctx.path_resolver.output_root(output_dir)
    output_root.mkdir(parents=True, exist_ok=True)

    if format == "json":
        emit_model(
            InitResponse(registry_path=str(path), output_dir=output_dir, created=not existed)
        )
        return

    verb = "Overwrote" if existed else "Created"
    user_output(f"{verb} {click.style(str(path), fg='green')}")
    user_output(f"Generated modules will be written to {output_root}")
