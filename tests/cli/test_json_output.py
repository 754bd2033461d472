"""Tests for the --format json helpers."""

import json
from dataclasses import dataclass
from pathlib import Path
from unittest.mock import MagicMock, patch

import click
import pytest
from click.testing import CliRunner

from dotgithub.cli.json_output import (
    emit_json,
    emit_json_error,
    emit_model,
    format_option,
    json_error_boundary,
)
from dotgithub.cli.json_schemas import InitResponse
from dotgithub.core.errors import ActionNotRegistered, InvalidReference


@dataclass(frozen=True)
class _Location:
    path: Path
    line: int


def _emitted(mock_machine_output: MagicMock) -> dict:
    return json.loads(mock_machine_output.call_args[0][0])


@patch("dotgithub.cli.json_output.machine_output")
def test_emit_json_serializes_paths_and_dataclasses(mock_machine_output: MagicMock) -> None:
    emit_json(
        {
            "root": Path("/repo/.github/src"),
            "locations": [_Location(path=Path("actions/checkout.py"), line=3)],
            "pair": (Path("a"), "b"),
        }
    )

    assert _emitted(mock_machine_output) == {
        "root": "/repo/.github/src",
        "locations": [{"path": "actions/checkout.py", "line": 3}],
        "pair": ["a", "b"],
    }


@patch("dotgithub.cli.json_output.machine_output")
def test_emit_json_is_indented(mock_machine_output: MagicMock) -> None:
    emit_json({"outer": {"inner": 1}})

    assert '\n    "inner": 1' in mock_machine_output.call_args[0][0]


@patch("dotgithub.cli.json_output.machine_output")
def test_emit_model_dumps_pydantic_model(mock_machine_output: MagicMock) -> None:
    emit_model(InitResponse(registry_path="/r/dotgithub.json", output_dir="src", created=True))

    assert _emitted(mock_machine_output) == {
        "registry_path": "/r/dotgithub.json",
        "output_dir": "src",
        "created": True,
    }


@patch("dotgithub.cli.json_output.machine_output")
def test_emit_json_error_exits_with_code(mock_machine_output: MagicMock) -> None:
    with pytest.raises(SystemExit) as exc_info:
        emit_json_error("bad ref", "InvalidReference", exit_code=2)

    assert exc_info.value.code == 2
    assert _emitted(mock_machine_output) == {
        "error": "bad ref",
        "error_type": "InvalidReference",
        "exit_code": 2,
    }


@patch("dotgithub.cli.json_output.machine_output")
def test_boundary_json_mode_reports_any_exception(mock_machine_output: MagicMock) -> None:
    @json_error_boundary
    def failing(format: str) -> None:
        raise RuntimeError("boom")

    with pytest.raises(SystemExit) as exc_info:
        failing(format="json")

    assert exc_info.value.code == 1
    assert _emitted(mock_machine_output)["error_type"] == "RuntimeError"


@patch("dotgithub.cli.json_output.user_output")
def test_boundary_text_mode_prints_domain_errors(mock_user_output: MagicMock) -> None:
    @json_error_boundary
    def failing(format: str) -> None:
        raise ActionNotRegistered("actions/cache", "save")

    with pytest.raises(SystemExit) as exc_info:
        failing(format="text")

    assert exc_info.value.code == 1
    message = click.unstyle(mock_user_output.call_args[0][0])
    assert message == "Error: actions/cache (path 'save') is not in the registry"


def test_boundary_text_mode_reraises_unexpected_errors() -> None:
    @json_error_boundary
    def failing(format: str) -> None:
        raise KeyError("missing")

    with pytest.raises(KeyError):
        failing(format="text")


def test_boundary_passes_system_exit_through() -> None:
    @json_error_boundary
    def exiting(format: str) -> None:
        raise SystemExit(3)

    with pytest.raises(SystemExit) as exc_info:
        exiting(format="json")

    assert exc_info.value.code == 3


def test_boundary_returns_value_and_keeps_metadata() -> None:
    @json_error_boundary
    def succeeding(format: str) -> str:
        """Docstring."""
        return "ok"

    assert succeeding(format="json") == "ok"
    assert succeeding.__name__ == "succeeding"
    assert succeeding.__doc__ == "Docstring."


def test_format_option_on_a_command() -> None:
    @click.command()
    @format_option
    @json_error_boundary
    def command(format: str) -> None:
        raise InvalidReference("x", "expected owner/repo")

    text = CliRunner().invoke(command, [])
    as_json = CliRunner().invoke(command, ["--format", "json"])
    rejected = CliRunner().invoke(command, ["--format", "xml"])

    assert text.exit_code == 1
    assert "Error: Invalid action reference 'x': expected owner/repo" in text.output
    assert as_json.exit_code == 1
    assert json.loads(as_json.output)["error_type"] == "InvalidReference"
    assert rejected.exit_code == 2
