"""Formatter used when pretty-printing is disabled."""

from dotgithub.core.formatter.abc import Formatter


class NoopFormatter(Formatter):
    """Returns generated source exactly as synthesized."""

    def format_source(self, source: str) -> str:
        return source
