"""Synthesis of typed Python step factories from action schemas.

Everything here is pure: identical arguments always produce byte-identical
source text, so generated trees can be compared across runs.
"""

import keyword
import re
from dataclasses import dataclass

from dotgithub.core.pysource import (
    INDENT,
    comment_lines,
    docstring_text,
    py_scalar,
    py_string,
)
from dotgithub.core.schema import ActionSchema

GENERATED_HEADER = "# Generated by dotgithub. Do not edit by hand."
RUNTIME_MODULE = "dotgithub.runtime"

_WORD_PATTERN = re.compile(r"[A-Za-z0-9]+")
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


@dataclass(frozen=True)
class Identifiers:
    """Names derived for one generated module.

    Attributes:
        type_name: Prefix for the Inputs/Outputs record types (SetupNode)
        function_name: Name of the factory callable (setup_node)
        module_name: File stem used when the module lives in a repository directory
    """

    type_name: str
    function_name: str
    module_name: str


@dataclass(frozen=True)
class GeneratedModule:
    identifiers: Identifiers
    uses: str
    source: str


def split_words(text: str) -> list[str]:
    return _WORD_PATTERN.findall(text)


def _title(word: str) -> str:
    return word[0].upper() + word[1:]


def _snake(words: list[str]) -> str:
    parts: list[str] = []
    for word in words:
        parts.extend(piece.lower() for piece in _CAMEL_BOUNDARY.split(word) if piece)
    return "_".join(parts)


def to_module_name(text: str) -> str:
    """Python module/package name for an owner, repository or path segment."""
    return python_identifier(_snake(split_words(text)), fallback="action")


def python_identifier(text: str, *, fallback: str) -> str:
    if not text:
        return fallback
    if text[0].isdigit():
        text = f"_{text}"
    if keyword.iskeyword(text):
        text = f"{text}_"
    return text


def derive_identifiers(name: str, extra_words: str = "") -> Identifiers:
    """Derive type, call and module names from a display name.

    Args:
        name: Schema name (or user override), e.g. "Setup Node.js environment"
        extra_words: Subpath appended to keep names unique within a repository
    """
    base_words = split_words(name)
    words = base_words + split_words(extra_words)
    type_name = python_identifier("".join(_title(word) for word in words), fallback="Action")
    function_name = python_identifier(_snake(words), fallback="action")
    module_name = python_identifier(_snake(base_words), fallback="action")
    return Identifiers(type_name=type_name, function_name=function_name, module_name=module_name)


def unique_identifiers(
    name: str, action_path: str, taken: set[str], *, include_path_words: bool
) -> Identifiers:
    """Derive identifiers that do not collide with any function name in taken.

    A collision first appends the subpath words (if not already present), then
    a numeric suffix.
    """
    identifiers = derive_identifiers(name, action_path if include_path_words else "")
    if identifiers.function_name not in taken:
        return identifiers

    if action_path and not include_path_words:
        identifiers = derive_identifiers(name, action_path)
        if identifiers.function_name not in taken:
            return identifiers

    counter = 2
    while f"{identifiers.function_name}_{counter}" in taken:
        counter += 1
    return Identifiers(
        type_name=f"{identifiers.type_name}{counter}",
        function_name=f"{identifiers.function_name}_{counter}",
        module_name=identifiers.module_name,
    )


def action_uses(org_repo: str, action_path: str | None) -> str:
    if action_path:
        return f"{org_repo}/{action_path}"
    return org_repo


def source_url(org_repo: str, action_path: str | None, display_version: str) -> str:
    url = f"https://github.com/{org_repo}/tree/{display_version}"
    if action_path:
        url += f"/{action_path}"
    return url


def generate_action_module(
    schema: ActionSchema,
    org_repo: str,
    action_path: str | None,
    immutable_id: str,
    display_version: str,
    *,
    identity_override: str | None = None,
    include_path_words: bool = False,
    identifiers: Identifiers | None = None,
) -> GeneratedModule:
    """Generate the Python module for one action schema.

    Args:
        schema: Parsed action schema
        org_repo: Repository coordinate
        action_path: Subpath of the schema inside the repository ("" or None for root)
        immutable_id: Default ref of the generated factory
        display_version: Human-facing version used in the docstring link
        identity_override: Name used instead of schema.name for identifiers
        include_path_words: Append the subpath to identifiers (multi-schema repositories)
        identifiers: Pre-computed identifiers, bypassing derivation

    Returns:
        GeneratedModule with the identifiers, `uses` coordinate and source text
    """
    if identifiers is None:
        display_name = identity_override or schema.name or org_repo.split("/")[-1]
        extra_words = (action_path or "") if include_path_words else ""
        identifiers = derive_identifiers(display_name, extra_words)

    uses = action_uses(org_repo, action_path)
    inputs_type = f"{identifiers.type_name}Inputs"
    outputs_type = f"{identifiers.type_name}Outputs"

    exported = [inputs_type]
    if schema.outputs:
        exported.append(outputs_type)
    exported.append(identifiers.function_name)

    lines: list[str] = [GENERATED_HEADER]
    lines.extend(_module_docstring(schema, org_repo, action_path, display_version))
    lines.append("")
    typing_names = ["Required", "TypedDict"] if schema.has_required_inputs else ["TypedDict"]
    lines.append(f"from typing import {', '.join(typing_names)}")
    lines.append("")
    lines.append(f"from {RUNTIME_MODULE} import ActionInputValue, GitHubStep, StepOverride")
    # Aliased so a factory named create_step cannot shadow the helper
    lines.append(f"from {RUNTIME_MODULE} import create_step as _create_step")
    lines.append("")
    lines.append(f"__all__ = [{', '.join(py_string(name) for name in exported)}]")
    lines.append("")
    lines.extend(_inputs_typed_dict(schema, inputs_type))
    if schema.outputs:
        lines.append("")
        lines.extend(_outputs_typed_dict(schema, outputs_type))
    lines.append("")
    lines.append("")
    lines.extend(
        _factory(
            schema, identifiers.function_name, inputs_type, uses, immutable_id, display_version
        )
    )

    return GeneratedModule(identifiers=identifiers, uses=uses, source="\n".join(lines) + "\n")


def _module_docstring(
    schema: ActionSchema, org_repo: str, action_path: str | None, display_version: str
) -> list[str]:
    summary = (schema.name or "").strip() or action_uses(org_repo, action_path)
    lines = [f'"""{docstring_text(summary)}', ""]
    if schema.description and schema.description.strip():
        description_lines = schema.description.strip().splitlines()
        lines.extend(docstring_text(line.rstrip()) for line in description_lines)
        lines.append("")
    lines.append(f"Source: {docstring_text(source_url(org_repo, action_path, display_version))}")
    lines.append('"""')
    return lines


def _field_comment(description: str | None, default: object) -> str:
    parts: list[str] = []
    if description and description.strip():
        parts.append(description.strip())
    if default is not None:
        parts.append(f"default: {_json_default(default)}")
    return " | ".join(parts)


def _json_default(default: object) -> str:
    if isinstance(default, bool):
        return "true" if default else "false"
    if isinstance(default, str):
        return py_string(default)
    return str(default)


def _inputs_typed_dict(schema: ActionSchema, type_name: str) -> list[str]:
    if not schema.inputs:
        return [f"{type_name} = TypedDict({py_string(type_name)}, {{}}, total=False)"]

    field_indent = INDENT * 2
    lines = [f"{type_name} = TypedDict(", f"{INDENT}{py_string(type_name)},", f"{INDENT}{{"]
    for key, action_input in schema.inputs.items():
        comment = _field_comment(action_input.description, action_input.default)
        if comment:
            lines.extend(comment_lines(comment, field_indent))
        value_type = "Required[ActionInputValue]" if action_input.required else "ActionInputValue"
        lines.append(f"{field_indent}{py_string(key)}: {value_type},")
    lines.extend([f"{INDENT}}},", f"{INDENT}total=False,", ")"])
    return lines


def _outputs_typed_dict(schema: ActionSchema, type_name: str) -> list[str]:
    field_indent = INDENT * 2
    lines = [f"{type_name} = TypedDict(", f"{INDENT}{py_string(type_name)},", f"{INDENT}{{"]
    for key, action_output in schema.outputs.items():
        if action_output.description and action_output.description.strip():
            lines.extend(comment_lines(action_output.description, field_indent))
        lines.append(f"{field_indent}{py_string(key)}: str,")
    lines.extend([f"{INDENT}}},", ")"])
    return lines


def _factory(
    schema: ActionSchema,
    function_name: str,
    inputs_type: str,
    uses: str,
    immutable_id: str,
    display_version: str,
) -> list[str]:
    if schema.has_required_inputs:
        inputs_param = f"inputs: {inputs_type}"
        inputs_spread = "**inputs"
    else:
        inputs_param = f"inputs: {inputs_type} | None = None"
        inputs_spread = "**(inputs or {})"

    summary = ((schema.name or "").strip() or uses).splitlines()[0]
    lines = [
        f"def {function_name}(",
        f"{INDENT}{inputs_param},",
        f"{INDENT}step: StepOverride | None = None,",
        f"{INDENT}ref: str = {py_string(immutable_id)},",
        ") -> GitHubStep:",
        f'{INDENT}"""{docstring_text(summary)}',
        "",
        f"{INDENT}Version: {docstring_text(display_version)}",
        f'{INDENT}"""',
        f"{INDENT}merged: dict[str, ActionInputValue] = {{",
    ]
    for key, action_input in schema.inputs.items():
        if action_input.default is not None:
            lines.append(f"{INDENT * 2}{py_string(key)}: {py_scalar(action_input.default)},")
    lines.append(f"{INDENT * 2}{inputs_spread},")
    lines.append(f"{INDENT}}}")
    step_expr = '{**(step or {}), "with": merged}'
    lines.append(f"{INDENT}return _create_step({py_string(uses)}, {step_expr}, ref)")
    return lines
