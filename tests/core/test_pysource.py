"""Tests for Python literal rendering."""

from dotgithub.core.pysource import comment_lines, docstring_text, py_scalar, render_value


def test_py_scalar() -> None:
    assert py_scalar(None) == "None"
    assert py_scalar(True) == "True"
    assert py_scalar(3) == "3"
    assert py_scalar(0.25) == "0.25"
    assert py_scalar(float("inf")) == '"inf"'
    assert py_scalar("it's \"quoted\"") == '"it\'s \\"quoted\\""'


def test_render_nested_value() -> None:
    rendered = render_value({"on": {"push": {"branches": ["main"]}}, "empty": {}, "list": []})

    assert rendered == (
        "{\n"
        '    "on": {\n'
        '        "push": {\n'
        '            "branches": [\n'
        '                "main",\n'
        "            ],\n"
        "        },\n"
        "    },\n"
        '    "empty": {},\n'
        '    "list": [],\n'
        "}"
    )


def test_render_value_custom_hook() -> None:
    def hook(value: object, depth: int) -> str | None:
        return "SENTINEL" if value == "replace-me" else None

    assert render_value(["keep", "replace-me"], 0, hook) == '[\n    "keep",\n    SENTINEL,\n]'


def test_docstring_text_escapes_terminators() -> None:
    assert docstring_text('a """ b \\ c') == 'a \\"\\"\\" b \\\\ c'


def test_comment_lines() -> None:
    assert comment_lines("first\n\nsecond  \n", "  ") == ["  # first", "  #", "  # second"]
