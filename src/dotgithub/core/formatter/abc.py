"""Abstract base class for source formatting."""

from abc import ABC, abstractmethod


class Formatter(ABC):
    """Abstract interface for pretty-printing generated Python source."""

    @abstractmethod
    def format_source(self, source: str) -> str:
        """Return formatted source.

        Implementations must return the input unchanged rather than raise when
        formatting is not possible.
        """
        ...
