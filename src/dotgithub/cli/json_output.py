"""The --format json half of every command.

Commands build a pydantic response model and hand it to emit_model. Failures
are turned into an ErrorResponse by json_error_boundary, so a script reading
stdout always gets exactly one JSON document.
"""

import json
from collections.abc import Callable
from dataclasses import asdict, is_dataclass
from functools import wraps
from pathlib import Path
from typing import Any, TypeVar

import click
from pydantic import BaseModel, ConfigDict, Field

from dotgithub.cli.ensure import error_line
from dotgithub.cli.output import machine_output, user_output
from dotgithub.core.errors import DotGithubError

FORMAT_OPTION_CHOICES = ["text", "json"]

F = TypeVar("F", bound=Callable[..., Any])


def format_option(func: F) -> F:
    """Add the shared --format text|json option."""
    return click.option(
        "--format",
        type=click.Choice(FORMAT_OPTION_CHOICES),
        default="text",
        show_default=True,
        help="Output format.",
    )(func)


class ErrorResponse(BaseModel):
    """What a failed command prints in JSON mode.

    Attributes:
        error: The exception message
        error_type: Exception class name, e.g. "RevisionResolutionFailed"
        exit_code: Status the process exits with
    """

    model_config = ConfigDict(strict=True)

    error: str
    error_type: str
    exit_code: int = Field(default=1, ge=0, le=255)


def _jsonable(value: Any) -> Any:
    # Paths and dataclasses may appear in hand-built dicts; models are dumped first
    if isinstance(value, Path):
        return str(value)
    if is_dataclass(value) and not isinstance(value, type):
        return _jsonable(asdict(value))
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    return value


def emit_json(data: dict[str, Any]) -> None:
    """Print data on stdout as indented JSON."""
    machine_output(json.dumps(_jsonable(data), indent=2))


def emit_model(model: BaseModel) -> None:
    emit_json(model.model_dump(mode="json"))


def emit_json_error(error: str, error_type: str, exit_code: int = 1) -> None:
    """Print an ErrorResponse and end the process.

    Raises:
        SystemExit: Always, with exit_code
    """
    emit_model(ErrorResponse(error=error, error_type=error_type, exit_code=exit_code))
    raise SystemExit(exit_code)


def json_error_boundary(func: Callable) -> Callable:
    """Make a command exit with status 1 on failure instead of a traceback.

    The command's `format` keyword decides the rendering. In JSON mode any
    exception becomes an ErrorResponse. In text mode a DotGithubError becomes
    a red "Error:" line, and other exceptions propagate untouched. SystemExit
    (from Ensure or a partial result) always passes through.

    Apply it below click.pass_obj so it sees the parsed keyword arguments:

        @click.command("list")
        @format_option
        @click.pass_obj
        @json_error_boundary
        def list_cmd(ctx: DotGithubContext, format: str) -> None:
            ...
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except SystemExit:
            raise
        except Exception as e:
            if kwargs.get("format", "text") == "json":
                emit_json_error(str(e), type(e).__name__)
            if not isinstance(e, DotGithubError):
                raise
            user_output(error_line(str(e)))
            raise SystemExit(1) from e

    return wrapper
