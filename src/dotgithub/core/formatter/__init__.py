"""Source pretty-printer applied to generated modules."""

from dotgithub.core.formatter.abc import Formatter
from dotgithub.core.formatter.noop import NoopFormatter
from dotgithub.core.formatter.real import RuffFormatter

__all__ = [
    "Formatter",
    "NoopFormatter",
    "RuffFormatter",
]
