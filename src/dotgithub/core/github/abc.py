"""Abstract base class for repository-metadata lookups."""

from abc import ABC, abstractmethod


class GitHub(ABC):
    """Abstract interface for the repository-metadata provider.

    All implementations (real and fake) must implement this interface. Lookups
    report a rejected request as None (or an empty list) instead of raising,
    so callers can try the next interpretation of a ref.
    """

    @abstractmethod
    def list_tags(self, org_repo: str, *, token: str | None) -> list[str] | None:
        """List tag names of a repository.

        Returns:
            Tag names in provider order, or None if the listing failed
        """
        ...

    @abstractmethod
    def get_default_branch(self, org_repo: str, *, token: str | None) -> str | None:
        """Get the name of the repository's default branch.

        Returns:
            Branch name, or None if the repository could not be read
        """
        ...

    @abstractmethod
    def get_branch_sha(self, org_repo: str, branch: str, *, token: str | None) -> str | None:
        """Resolve a branch head to a commit SHA, or None if no such branch."""
        ...

    @abstractmethod
    def get_tag_sha(self, org_repo: str, tag: str, *, token: str | None) -> str | None:
        """Resolve a tag to the commit SHA it points at, or None if no such tag.

        Annotated tags are dereferenced to their target commit.
        """
        ...

    @abstractmethod
    def get_commit_sha(self, org_repo: str, ref: str, *, token: str | None) -> str | None:
        """Resolve a (possibly abbreviated) commit id, or None if unknown."""
        ...
