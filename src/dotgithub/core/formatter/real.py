"""Formatter backed by the ruff CLI."""

import logging

from dotgithub.core.formatter.abc import Formatter
from dotgithub.core.subprocess_utils import run_subprocess_with_context

logger = logging.getLogger(__name__)


class RuffFormatter(Formatter):
    """Pipes source through `ruff format -`."""

    def __init__(self, *, executable: str = "ruff") -> None:
        self._executable = executable

    def format_source(self, source: str) -> str:
        try:
            result = run_subprocess_with_context(
                [self._executable, "format", "--stdin-filename", "generated.py", "-"],
                operation_context="format generated source",
                input_text=source,
            )
        except RuntimeError as e:
            logger.warning("Formatting skipped: %s", e)
            return source
        return result.stdout
