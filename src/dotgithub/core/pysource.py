"""Rendering of plain data as deterministic Python source literals."""

import json
import math
from collections.abc import Callable
from typing import Any

INDENT = "    "


def py_string(text: str) -> str:
    """Double-quoted Python string literal for text.

    JSON string escapes are a subset of Python's, so json.dumps output is a
    valid literal.
    """
    return json.dumps(text, ensure_ascii=False)


def py_scalar(value: str | int | float | bool | None) -> str:
    if value is None:
        return "None"
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            return py_string(str(value))
        return repr(value)
    return py_string(value)


def render_value(
    value: Any, depth: int = 0, custom: Callable[[Any, int], str | None] | None = None
) -> str:
    """Render nested dicts/lists/scalars, one item per line, with trailing commas.

    Args:
        value: Data to render
        depth: Indentation level of the line the value starts on
        custom: Hook returning source for values it knows how to render, else None
    """
    if custom is not None:
        rendered = custom(value, depth)
        if rendered is not None:
            return rendered

    if isinstance(value, dict):
        if not value:
            return "{}"
        inner = INDENT * (depth + 1)
        lines = ["{"]
        for key, item in value.items():
            lines.append(f"{inner}{py_string(str(key))}: {render_value(item, depth + 1, custom)},")
        lines.append(f"{INDENT * depth}}}")
        return "\n".join(lines)

    if isinstance(value, (list, tuple)):
        if not value:
            return "[]"
        inner = INDENT * (depth + 1)
        lines = ["["]
        for item in value:
            lines.append(f"{inner}{render_value(item, depth + 1, custom)},")
        lines.append(f"{INDENT * depth}]")
        return "\n".join(lines)

    if value is None or isinstance(value, (str, int, float, bool)):
        return py_scalar(value)

    # Dates and other YAML scalars
    return py_string(str(value))


def docstring_text(text: str) -> str:
    """Escape text for embedding inside a triple-double-quoted docstring."""
    return text.replace("\\", "\\\\").replace('"""', '\\"\\"\\"')


def comment_lines(text: str, indent: str) -> list[str]:
    lines = []
    for line in text.strip().splitlines():
        stripped = line.rstrip()
        lines.append(f"{indent}# {stripped}" if stripped else f"{indent}#")
    return lines
