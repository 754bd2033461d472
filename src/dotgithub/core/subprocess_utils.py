"""Running external tools (git, ruff) with failures that say what was attempted."""

import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import Any


def run_subprocess_with_context(
    cmd: Sequence[str],
    operation_context: str,
    cwd: Path | None = None,
    input_text: str | None = None,
    env: dict[str, str] | None = None,
    **kwargs: Any,
) -> subprocess.CompletedProcess[str]:
    """Run cmd to completion and return its captured text output.

    Args:
        cmd: Program and arguments
        operation_context: What the call is for, phrased to follow "Failed to"
            (e.g. "fetch actions/checkout")
        cwd: Directory to run in
        input_text: Text written to the program's stdin
        env: Complete child environment, or None to inherit ours
        **kwargs: Passed through to subprocess.run()

    Raises:
        RuntimeError: When the program is missing or exits non-zero. The
            message names the operation, the command line, the exit code and
            any stderr output.
    """
    try:
        return subprocess.run(
            list(cmd),
            cwd=cwd,
            env=env,
            input=input_text,
            text=True,
            encoding="utf-8",
            capture_output=True,
            check=True,
            **kwargs,
        )
    except FileNotFoundError as e:
        raise RuntimeError(f"Failed to {operation_context}: {cmd[0]} is not installed") from e
    except subprocess.CalledProcessError as e:
        lines = [
            f"Failed to {operation_context}",
            f"Command: {' '.join(str(part) for part in cmd)}",
            f"Exit code: {e.returncode}",
        ]
        stderr = (e.stderr or "").strip()
        if stderr:
            lines.append(f"stderr: {stderr}")
        raise RuntimeError("\n".join(lines)) from e
