"""Production working-copy checkout using the git CLI."""

import base64
import logging
import os
from pathlib import Path

from dotgithub.core.git.abc import Git
from dotgithub.core.subprocess_utils import run_subprocess_with_context

logger = logging.getLogger(__name__)

GITHUB_URL = "https://github.com"


class RealGit(Git):
    """Shallow-fetches a single revision with git.

    Fetching by revision (instead of cloning a branch) works uniformly for
    branches, tags and commit SHAs.
    """

    def __init__(self, *, base_url: str = GITHUB_URL) -> None:
        self._base_url = base_url

    def checkout(
        self, org_repo: str, revision: str, destination: Path, *, token: str | None
    ) -> None:
        env = _auth_env(token)
        url = f"{self._base_url}/{org_repo}.git"
        logger.debug("Fetching %s at %s into %s", org_repo, revision, destination)

        run_subprocess_with_context(
            ["git", "init", "--quiet"],
            operation_context=f"initialize working copy for {org_repo}",
            cwd=destination,
        )
        run_subprocess_with_context(
            ["git", "fetch", "--quiet", "--depth", "1", url, revision],
            operation_context=f"fetch {org_repo}@{revision}",
            cwd=destination,
            env=env,
        )
        run_subprocess_with_context(
            ["git", "checkout", "--quiet", "FETCH_HEAD"],
            operation_context=f"check out {org_repo}@{revision}",
            cwd=destination,
        )


def _auth_env(token: str | None) -> dict[str, str] | None:
    """Pass the token as an extra HTTP header through git's environment config.

    Keeping it out of argv keeps it out of error messages and process listings.
    """
    if not token:
        return None
    credentials = base64.b64encode(f"x-access-token:{token}".encode()).decode()
    env = dict(os.environ)
    env["GIT_CONFIG_COUNT"] = "1"
    env["GIT_CONFIG_KEY_0"] = "http.extraheader"
    env["GIT_CONFIG_VALUE_0"] = f"AUTHORIZATION: basic {credentials}"
    return env
