"""Tests for action schema extraction."""

from pathlib import Path

import pytest

from dotgithub.core.errors import SchemaNotFound
from dotgithub.core.schema import ActionInput, find_action_paths, read_action_schema
from tests.test_utils.builders import CHECKOUT_SCHEMA, action_yml


def _write(root: Path, relative: str, text: str) -> None:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def test_read_root_schema(tmp_path: Path) -> None:
    _write(tmp_path, "action.yml", CHECKOUT_SCHEMA)

    schema = read_action_schema(tmp_path, "")

    assert schema.name == "Checkout"
    assert schema.description == "Checkout a Git repository at a particular version"
    assert list(schema.inputs) == ["repository", "token"]
    assert schema.inputs["repository"] == ActionInput(
        description="Repository name with owner",
        required=False,
        default="${{ github.repository }}",
    )
    assert schema.inputs["token"].required
    assert schema.has_required_inputs
    assert schema.outputs == {}


def test_read_schema_accepts_yaml_extension(tmp_path: Path) -> None:
    _write(tmp_path, "lint/action.yaml", action_yml("Lint"))

    assert read_action_schema(tmp_path, "lint").name == "Lint"


def test_required_accepts_string_true(tmp_path: Path) -> None:
    _write(
        tmp_path,
        "action.yml",
        "name: Deploy\ninputs:\n  env:\n    required: 'true'\n  region:\n    required: 'false'\n",
    )

    schema = read_action_schema(tmp_path, "")

    assert schema.inputs["env"].required
    assert not schema.inputs["region"].required


def test_defaults_keep_scalar_types(tmp_path: Path) -> None:
    _write(
        tmp_path,
        "action.yml",
        "name: Fetch\ninputs:\n"
        "  depth:\n    default: 1\n"
        "  lfs:\n    default: false\n"
        "  ratio:\n    default: 0.5\n"
        "  empty: {}\n",
    )

    inputs = read_action_schema(tmp_path, "").inputs

    assert inputs["depth"].default == 1
    assert inputs["lfs"].default is False
    assert inputs["ratio"].default == 0.5
    assert inputs["empty"].default is None
    assert inputs["empty"].description is None


def test_outputs_in_declaration_order(tmp_path: Path) -> None:
    _write(
        tmp_path,
        "action.yml",
        action_yml(
            "Cache",
            outputs={"cache-hit": {"description": "Exact match"}, "cache-key": {}},
        ),
    )

    schema = read_action_schema(tmp_path, "")

    assert list(schema.outputs) == ["cache-hit", "cache-key"]
    assert schema.outputs["cache-hit"].description == "Exact match"
    assert schema.outputs["cache-key"].description is None


def test_missing_schema(tmp_path: Path) -> None:
    with pytest.raises(SchemaNotFound, match="'setup'"):
        read_action_schema(tmp_path, "setup")


def test_invalid_yaml(tmp_path: Path) -> None:
    _write(tmp_path, "action.yml", "name: [unterminated\n")

    with pytest.raises(SchemaNotFound, match="not valid YAML"):
        read_action_schema(tmp_path, "")


def test_non_mapping_document(tmp_path: Path) -> None:
    _write(tmp_path, "action.yml", "- just\n- a list\n")

    with pytest.raises(SchemaNotFound, match="not a mapping"):
        read_action_schema(tmp_path, "")


def test_find_action_paths_sorted_and_skips_vendored(tmp_path: Path) -> None:
    _write(tmp_path, "action.yml", action_yml("Root"))
    _write(tmp_path, "setup/action.yml", action_yml("Setup"))
    _write(tmp_path, "nested/deep/action.yaml", action_yml("Deep"))
    _write(tmp_path, "node_modules/dep/action.yml", action_yml("Vendored"))
    _write(tmp_path, ".git/hooks/action.yml", action_yml("Hidden"))
    _write(tmp_path, "docs/README.md", "# docs\n")

    assert find_action_paths(tmp_path) == ["", "nested/deep", "setup"]


def test_find_action_paths_empty_repository(tmp_path: Path) -> None:
    _write(tmp_path, "README.md", "nothing here\n")

    assert find_action_paths(tmp_path) == []
