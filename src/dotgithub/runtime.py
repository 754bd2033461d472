"""Helpers imported by generated action modules.

Generated factories return plain step mappings built by `create_step`, so a
workflow assembled from them can be dumped straight to YAML.
"""

from collections.abc import Mapping
from typing import Any, TypedDict

import yaml

# Inputs accept literals as well as ${{ }} interpolation expressions
ActionInputValue = str | int | float | bool

GitHubStep = dict[str, Any]

StepOverride = TypedDict(
    "StepOverride",
    {
        "id": str,
        "name": str,
        "if": str,
        "env": dict[str, str],
        "continue-on-error": bool | str,
        "timeout-minutes": int | str,
    },
    total=False,
)


def create_step(uses: str, step: Mapping[str, Any], ref: str) -> GitHubStep:
    """Build a `uses:` step pinned to ref.

    Args:
        uses: Action coordinate, owner/repo or owner/repo/subpath
        step: Step-level fields, including the `with` inputs
        ref: Commit SHA, tag or branch appended after '@'
    """
    return {"uses": f"{uses}@{ref}", **step}


def workflow_to_yaml(workflow: Mapping[str, Any]) -> str:
    """Render a workflow mapping built from generated steps as YAML."""
    return yaml.safe_dump(
        dict(workflow),
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
        width=1000,
    )
