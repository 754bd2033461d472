"""Production implementation of repository-metadata lookups."""

import logging
from typing import Any
from urllib.parse import quote

import httpx

from dotgithub.core.github.abc import GitHub

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
TAGS_PER_PAGE = 100
MAX_TAG_PAGES = 10


class RealGitHub(GitHub):
    """Production implementation using the GitHub REST API.

    A missing token is allowed: requests are then anonymous, which only
    lowers rate limits and hides private repositories.
    """

    def __init__(self, *, client: httpx.Client | None = None, base_url: str = GITHUB_API_URL):
        """Initialize RealGitHub.

        Args:
            client: Preconfigured client (tests pass one with a mock transport)
            base_url: API root used when no client is supplied
        """
        self._client = client if client is not None else httpx.Client(
            base_url=base_url,
            timeout=30.0,
            follow_redirects=True,
        )

    def list_tags(self, org_repo: str, *, token: str | None) -> list[str] | None:
        tags: list[str] = []
        for page in range(1, MAX_TAG_PAGES + 1):
            payload = self._get_json(
                f"/repos/{org_repo}/tags",
                token=token,
                params={"per_page": TAGS_PER_PAGE, "page": page},
            )
            if not isinstance(payload, list):
                # First page failing means the listing failed; later pages just end it
                return None if page == 1 else tags
            tags.extend(
                item["name"] for item in payload if isinstance(item, dict) and "name" in item
            )
            if len(payload) < TAGS_PER_PAGE:
                break
        return tags

    def get_default_branch(self, org_repo: str, *, token: str | None) -> str | None:
        payload = self._get_json(f"/repos/{org_repo}", token=token)
        if not isinstance(payload, dict):
            return None
        branch = payload.get("default_branch")
        return branch if isinstance(branch, str) else None

    def get_branch_sha(self, org_repo: str, branch: str, *, token: str | None) -> str | None:
        payload = self._get_json(f"/repos/{org_repo}/git/ref/heads/{quote(branch)}", token=token)
        return _ref_object_sha(payload, expected_type="commit")

    def get_tag_sha(self, org_repo: str, tag: str, *, token: str | None) -> str | None:
        payload = self._get_json(f"/repos/{org_repo}/git/ref/tags/{quote(tag)}", token=token)
        if not isinstance(payload, dict) or not isinstance(payload.get("object"), dict):
            return None

        target = payload["object"]
        if target.get("type") != "tag":
            return target.get("sha")

        # Annotated tag: follow the tag object to the commit it names
        tag_object = self._get_json(f"/repos/{org_repo}/git/tags/{target['sha']}", token=token)
        return _ref_object_sha(tag_object, expected_type="commit")

    def get_commit_sha(self, org_repo: str, ref: str, *, token: str | None) -> str | None:
        payload = self._get_json(f"/repos/{org_repo}/commits/{quote(ref)}", token=token)
        if not isinstance(payload, dict):
            return None
        sha = payload.get("sha")
        return sha if isinstance(sha, str) else None

    def _get_json(
        self,
        path: str,
        *,
        token: str | None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """GET a path and decode JSON, returning None on any rejection.

        Note: Uses try/except as an acceptable error boundary. Network errors,
        non-2xx responses and malformed bodies all mean "the provider did not
        accept this lookup" to callers.
        """
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = self._client.get(path, headers=headers, params=params)
        except httpx.HTTPError as e:
            logger.debug("GET %s failed: %s", path, e)
            return None

        if response.status_code != 200:
            logger.debug("GET %s returned %s", path, response.status_code)
            return None

        try:
            return response.json()
        except ValueError:
            logger.debug("GET %s returned a non-JSON body", path)
            return None


def _ref_object_sha(payload: Any, *, expected_type: str) -> str | None:
    if not isinstance(payload, dict):
        return None
    target = payload.get("object")
    if not isinstance(target, dict) or target.get("type") != expected_type:
        return None
    sha = target.get("sha")
    return sha if isinstance(sha, str) else None
