"""Config command group: inspect and change registry options."""

from dataclasses import replace

import click

from dotgithub.cli.ensure import Ensure
from dotgithub.cli.json_output import emit_model, format_option, json_error_boundary
from dotgithub.cli.json_schemas import ConfigSetResponse, ConfigShowResponse
from dotgithub.cli.output import machine_output, user_output
from dotgithub.core.context import DotGithubContext
from dotgithub.core.registry import FormattingOptions, Registry

CONFIG_KEYS = ["output-dir", "token-source", "formatting"]
TOKEN_SOURCES = ["env", "config"]
FORMATTING_VALUES = ["ruff", "none"]


@click.group("config")
def config_group() -> None:
    """Show or change registry options."""


@config_group.command("show")
@format_option
@click.pass_obj
@json_error_boundary
def config_show(ctx: DotGithubContext, format: str) -> None:
    """Print the effective configuration."""
    registry = ctx.registry_store.load()
    response = ConfigShowResponse(
        registry_path=str(ctx.registry_store.path()),
        exists=ctx.registry_store.exists(),
        version=registry.version,
        output_dir=registry.output_dir,
        output_root=str(ctx.path_resolver.output_root(registry.output_dir)),
        token_source=registry.options.token_source,
        formatting_ruff=registry.options.formatting.ruff,
        entry_count=len(registry.entries),
    )

    if format == "json":
        emit_model(response)
        return

    machine_output(f"registry-path={response.registry_path}")
    machine_output(f"exists={'true' if response.exists else 'false'}")
    machine_output(f"version={response.version}")
    machine_output(f"output-dir={response.output_dir}")
    machine_output(f"output-root={response.output_root}")
    machine_output(f"token-source={response.token_source}")
    machine_output(f"formatting={'ruff' if response.formatting_ruff else 'none'}")
    machine_output(f"actions={response.entry_count}")


@config_group.command("set")
@click.argument("key", type=click.Choice(CONFIG_KEYS))
@click.argument("value")
@format_option
@click.pass_obj
@json_error_boundary
def config_set(ctx: DotGithubContext, key: str, value: str, format: str) -> None:
    """Set KEY to VALUE in the registry document.

    \b
    output-dir    directory for generated modules, relative to the document
    token-source  env (--token, else GITHUB_TOKEN) or config (--token only)
    formatting    ruff or none
    """
    registry = ctx.registry_store.load()
    registry = apply_setting(registry, key, value)
    ctx.registry_store.save(registry)

    if format == "json":
        emit_model(
            ConfigSetResponse(registry_path=str(ctx.registry_store.path()), key=key, value=value)
        )
        return
    user_output(f"Set {key} to {value} in {ctx.registry_store.path()}")


def apply_setting(registry: Registry, key: str, value: str) -> Registry:
    if key == "output-dir":
        Ensure.invariant(bool(value.strip()), "output-dir must not be empty")
        return replace(registry, output_dir=value)

    if key == "token-source":
        Ensure.invariant(
            value in TOKEN_SOURCES,
            f"token-source must be one of: {', '.join(TOKEN_SOURCES)}",
        )
        return replace(registry, options=replace(registry.options, token_source=value))

    Ensure.invariant(
        value in FORMATTING_VALUES,
        f"formatting must be one of: {', '.join(FORMATTING_VALUES)}",
    )
    formatting = FormattingOptions(ruff=value == "ruff")
    return replace(registry, options=replace(registry.options, formatting=formatting))
