"""Extraction of action schemas from a checked-out repository."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from dotgithub.core.errors import SchemaNotFound

SCHEMA_FILE_NAMES = ("action.yml", "action.yaml")

# Version-control and dependency directories never hold published actions
SKIPPED_DIRECTORIES = frozenset({".git", "node_modules", ".venv", "venv", "vendor", "__pycache__"})

InputDefault = str | int | float | bool


@dataclass(frozen=True)
class ActionInput:
    description: str | None
    required: bool
    default: InputDefault | None


@dataclass(frozen=True)
class ActionOutput:
    description: str | None


@dataclass(frozen=True)
class ActionSchema:
    """The declared interface of one action.

    Attributes:
        name: Display name from the schema's `name` field
        description: Optional free-text description
        inputs: Input key -> declaration, in declaration order
        outputs: Output key -> declaration, in declaration order
    """

    name: str
    description: str | None
    inputs: dict[str, ActionInput] = field(default_factory=dict)
    outputs: dict[str, ActionOutput] = field(default_factory=dict)

    @property
    def has_required_inputs(self) -> bool:
        return any(action_input.required for action_input in self.inputs.values())

    @staticmethod
    def from_mapping(data: dict[str, Any]) -> "ActionSchema":
        """Build a schema from a parsed action.yml document."""
        raw_inputs = data.get("inputs") or {}
        raw_outputs = data.get("outputs") or {}

        inputs: dict[str, ActionInput] = {}
        for key, body in raw_inputs.items():
            body = body or {}
            inputs[str(key)] = ActionInput(
                description=_optional_text(body.get("description")),
                required=_is_required(body.get("required")),
                default=_default_value(body.get("default")),
            )

        outputs: dict[str, ActionOutput] = {}
        for key, body in raw_outputs.items():
            body = body or {}
            outputs[str(key)] = ActionOutput(description=_optional_text(body.get("description")))

        name = data.get("name")
        return ActionSchema(
            name=str(name) if name is not None else "",
            description=_optional_text(data.get("description")),
            inputs=inputs,
            outputs=outputs,
        )


def _is_required(value: Any) -> bool:
    return value is True or value == "true"


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def _default_value(value: Any) -> InputDefault | None:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    # Dates and other YAML scalars become their text form
    return str(value)


def _schema_file(directory: Path) -> Path | None:
    for name in SCHEMA_FILE_NAMES:
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None


def read_action_schema(root: Path, subpath: str) -> ActionSchema:
    """Read the schema declared at a subpath of a working copy.

    Args:
        root: Working copy root
        subpath: POSIX path inside the repository, "" for the root

    Raises:
        SchemaNotFound: If no schema file exists there or it is not a YAML mapping
    """
    directory = root / subpath if subpath else root
    location = subpath or "<root>"

    schema_path = _schema_file(directory)
    if schema_path is None:
        raise SchemaNotFound(location)

    try:
        data = yaml.safe_load(schema_path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise SchemaNotFound(location, f"{schema_path.name} is not valid YAML ({e})") from e

    if not isinstance(data, dict):
        raise SchemaNotFound(location, f"{schema_path.name} is not a mapping")

    try:
        return ActionSchema.from_mapping(data)
    except (AttributeError, TypeError) as e:
        raise SchemaNotFound(location, f"{schema_path.name} has malformed inputs/outputs") from e


def find_action_paths(root: Path) -> list[str]:
    """List every subpath of a working copy that declares an action schema.

    Returns:
        Sorted POSIX subpaths; "" denotes the repository root
    """
    found: list[str] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(name for name in dirnames if name not in SKIPPED_DIRECTORIES)
        if any(name in filenames for name in SCHEMA_FILE_NAMES):
            relative = Path(dirpath).relative_to(root).as_posix()
            found.append("" if relative == "." else relative)
    return sorted(found)
