"""Conversion of workflow YAML into Python that calls generated factories.

Steps whose `uses:` names a registered action become calls to the generated
factory; every other step is carried over as a plain mapping literal.
"""

import re
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Any

import yaml

from dotgithub.core.pysource import INDENT, py_string, render_value
from dotgithub.core.registry import Registry

_USES_PATTERN = re.compile(
    r"^(?P<owner>[A-Za-z0-9._-]+)/(?P<repo>[A-Za-z0-9._-]+)(?:/(?P<path>[^@]+))?@(?P<ref>.+)$"
)


@dataclass(frozen=True)
class UsesReference:
    org_repo: str
    action_path: str
    ref: str


@dataclass(frozen=True)
class RewrittenStep:
    """A step replaced by a call to a generated factory.

    Attributes:
        module: Dotted module path of the generated file, relative to the output root
        function_name: Factory to call
        inputs: The step's `with:` mapping
        overrides: Remaining step fields (name, id, if, env, ...)
        ref: Explicit ref argument, None to use the factory's pinned default
    """

    module: str
    function_name: str
    inputs: dict[str, Any]
    overrides: dict[str, Any]
    ref: str | None

    def render(self, depth: int) -> str:
        arguments = [render_value(self.inputs, depth)]
        if self.overrides or self.ref is not None:
            arguments.append(render_value(self.overrides, depth) if self.overrides else "None")
        if self.ref is not None:
            arguments.append(py_string(self.ref))
        return f"{self.function_name}({', '.join(arguments)})"


@dataclass(frozen=True)
class ConversionResult:
    source: str
    converted: tuple[str, ...]
    skipped: tuple[str, ...] = field(default_factory=tuple)


def parse_uses(text: str) -> UsesReference | None:
    """Parse owner/repo[/subpath]@ref; None for local and docker references."""
    if text.startswith(("./", "docker://")):
        return None
    match = _USES_PATTERN.match(text.strip())
    if match is None:
        return None
    return UsesReference(
        org_repo=f"{match.group('owner')}/{match.group('repo')}",
        action_path=(match.group("path") or "").strip("/"),
        ref=match.group("ref"),
    )


def module_for_output_path(output_path: str) -> str:
    return ".".join(PurePosixPath(output_path).with_suffix("").parts)


def rewrite_step(step: Any, registry: Registry) -> RewrittenStep | None:
    """Rewrite a single step, or return None if it does not use a registered action."""
    if not isinstance(step, dict) or not isinstance(step.get("uses"), str):
        return None
    uses = parse_uses(step["uses"])
    if uses is None:
        return None
    entry = registry.get_entry((uses.org_repo, uses.action_path))
    if entry is None or entry.output_path is None or not entry.generated_identifier:
        return None

    inputs = step.get("with") or {}
    overrides = {key: value for key, value in step.items() if key not in ("uses", "with")}
    keeps_default_ref = uses.ref in (entry.display_version, entry.pinned_revision)
    return RewrittenStep(
        module=module_for_output_path(entry.output_path),
        function_name=entry.generated_identifier,
        inputs=dict(inputs) if isinstance(inputs, dict) else {},
        overrides=overrides,
        ref=None if keeps_default_ref else uses.ref,
    )


def rewrite_steps(steps: list[Any], registry: Registry) -> list[RewrittenStep | Any]:
    rewritten: list[RewrittenStep | Any] = []
    for step in steps:
        replacement = rewrite_step(step, registry)
        rewritten.append(replacement if replacement is not None else step)
    return rewritten


def load_workflow(text: str) -> dict[str, Any]:
    """Parse workflow YAML, restoring the `on` key YAML 1.1 reads as True."""
    data = yaml.safe_load(text)
    if not isinstance(data, dict):
        msg = "Workflow document is not a mapping"
        raise ValueError(msg)
    return {("on" if key is True else key): value for key, value in data.items()}


def convert_workflow(
    workflow_text: str, registry: Registry, *, source_name: str
) -> ConversionResult:
    """Render a Python module that rebuilds the workflow from generated factories.

    Raises:
        ValueError: If the workflow is not a YAML mapping
        yaml.YAMLError: If the workflow is not valid YAML
    """
    workflow = load_workflow(workflow_text)
    converted: list[str] = []
    skipped: list[str] = []
    imports: dict[str, set[str]] = {}

    jobs = workflow.get("jobs")
    rendered_jobs: dict[str, Any] = {}
    if isinstance(jobs, dict):
        for job_name, job in jobs.items():
            if isinstance(job, dict) and isinstance(job.get("steps"), list):
                steps = rewrite_steps(job["steps"], registry)
                for original, step in zip(job["steps"], steps, strict=True):
                    if isinstance(step, RewrittenStep):
                        converted.append(original["uses"])
                        imports.setdefault(step.module, set()).add(step.function_name)
                    elif isinstance(original, dict) and isinstance(original.get("uses"), str):
                        skipped.append(original["uses"])
                job = {**job, "steps": steps}
            rendered_jobs[job_name] = job
        workflow = {**workflow, "jobs": rendered_jobs}

    lines = [f'"""Workflow converted from {source_name}."""', ""]
    lines.append("from dotgithub.runtime import workflow_to_yaml")
    for module in sorted(imports):
        lines.append(f"from {module} import {', '.join(sorted(imports[module]))}")
    lines.append("")
    lines.append(f"workflow = {render_value(workflow, 0, _render_rewritten)}")
    lines.append("")
    lines.append("")
    lines.append('if __name__ == "__main__":')
    lines.append(f"{INDENT}print(workflow_to_yaml(workflow), end=\"\")")

    return ConversionResult(
        source="\n".join(lines) + "\n",
        converted=tuple(converted),
        skipped=tuple(skipped),
    )


def _render_rewritten(value: Any, depth: int) -> str | None:
    if isinstance(value, RewrittenStep):
        return value.render(depth)
    return None
