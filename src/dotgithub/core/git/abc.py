"""Abstract base class for working-copy checkout."""

from abc import ABC, abstractmethod
from pathlib import Path


class Git(ABC):
    """Abstract interface for obtaining a working copy of a repository."""

    @abstractmethod
    def checkout(
        self, org_repo: str, revision: str, destination: Path, *, token: str | None
    ) -> None:
        """Materialize org_repo at revision into an empty destination directory.

        Args:
            org_repo: Repository coordinate in owner/name form
            revision: Commit SHA, tag or branch to check out
            destination: Existing empty directory to populate
            token: Optional bearer token for private repositories

        Raises:
            RuntimeError: If the repository or revision cannot be fetched
        """
        ...
