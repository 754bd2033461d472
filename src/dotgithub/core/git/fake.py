"""Fake working-copy checkout for testing."""

from pathlib import Path

from dotgithub.core.git.abc import Git


class FakeGit(Git):
    """Writes pre-configured repository contents to disk.

    This class has NO public setup methods. All state is provided via constructor.
    """

    def __init__(
        self,
        *,
        repositories: dict[str, dict[str, str]] | None = None,
        failing_repositories: set[str] | None = None,
    ) -> None:
        """Create FakeGit with pre-configured repository contents.

        Args:
            repositories: Mapping of org_repo -> {relative POSIX path -> file text}
            failing_repositories: Repositories whose checkout raises RuntimeError
        """
        self._repositories = repositories or {}
        self._failing_repositories = failing_repositories or set()
        self._checkouts: list[tuple[str, str]] = []

    def checkout(
        self, org_repo: str, revision: str, destination: Path, *, token: str | None
    ) -> None:
        self._checkouts.append((org_repo, revision))
        if org_repo in self._failing_repositories or org_repo not in self._repositories:
            msg = f"Failed to fetch {org_repo}@{revision}"
            raise RuntimeError(msg)

        for relative_path, text in self._repositories[org_repo].items():
            file_path = destination / relative_path
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_text(text, encoding="utf-8")

    @property
    def checkouts(self) -> list[tuple[str, str]]:
        """Get the list of (org_repo, revision) checkouts performed.

        This property is for test assertions only.
        """
        return list(self._checkouts)
