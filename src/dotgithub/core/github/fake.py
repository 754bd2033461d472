"""Fake repository-metadata lookups for testing.

FakeGitHub is an in-memory implementation that accepts pre-configured state
in its constructor. Construct instances directly with keyword arguments.
"""

from dotgithub.core.github.abc import GitHub


class FakeGitHub(GitHub):
    """In-memory fake implementation of the repository-metadata provider.

    This class has NO public setup methods. All state is provided via constructor
    using keyword arguments with sensible defaults (empty dicts).
    """

    def __init__(
        self,
        *,
        tags: dict[str, list[str]] | None = None,
        default_branches: dict[str, str] | None = None,
        branch_shas: dict[tuple[str, str], str] | None = None,
        tag_shas: dict[tuple[str, str], str] | None = None,
        commit_shas: dict[tuple[str, str], str] | None = None,
        failing_tag_listings: set[str] | None = None,
    ) -> None:
        """Create FakeGitHub with pre-configured state.

        Args:
            tags: Mapping of org_repo -> tag names in provider order
            default_branches: Mapping of org_repo -> default branch name
            branch_shas: Mapping of (org_repo, branch) -> commit SHA
            tag_shas: Mapping of (org_repo, tag) -> commit SHA
            commit_shas: Mapping of (org_repo, commit id) -> full commit SHA
            failing_tag_listings: Repositories whose tag listing is rejected
        """
        self._tags = tags or {}
        self._default_branches = default_branches or {}
        self._branch_shas = branch_shas or {}
        self._tag_shas = tag_shas or {}
        self._commit_shas = commit_shas or {}
        self._failing_tag_listings = failing_tag_listings or set()
        self._calls: list[tuple[str, ...]] = []
        self._tokens_seen: list[str | None] = []

    def list_tags(self, org_repo: str, *, token: str | None) -> list[str] | None:
        self._record(token, "list_tags", org_repo)
        if org_repo in self._failing_tag_listings:
            return None
        return list(self._tags.get(org_repo, []))

    def get_default_branch(self, org_repo: str, *, token: str | None) -> str | None:
        self._record(token, "get_default_branch", org_repo)
        return self._default_branches.get(org_repo)

    def get_branch_sha(self, org_repo: str, branch: str, *, token: str | None) -> str | None:
        self._record(token, "get_branch_sha", org_repo, branch)
        return self._branch_shas.get((org_repo, branch))

    def get_tag_sha(self, org_repo: str, tag: str, *, token: str | None) -> str | None:
        self._record(token, "get_tag_sha", org_repo, tag)
        return self._tag_shas.get((org_repo, tag))

    def get_commit_sha(self, org_repo: str, ref: str, *, token: str | None) -> str | None:
        self._record(token, "get_commit_sha", org_repo, ref)
        return self._commit_shas.get((org_repo, ref))

    def _record(self, token: str | None, *call: str) -> None:
        self._calls.append(call)
        self._tokens_seen.append(token)

    @property
    def calls(self) -> list[tuple[str, ...]]:
        """Get the list of lookups made, as (method, *args) tuples.

        This property is for test assertions only.
        """
        return list(self._calls)

    @property
    def tokens_seen(self) -> list[str | None]:
        """Get the token passed with each lookup, in call order."""
        return list(self._tokens_seen)
