"""Resolution of action references to immutable revisions.

Publishers conventionally move a major-version tag (v4) forward to track the
latest compatible release, so a bare major tag is preferred over the newest
patch tag when the user does not name a ref.
"""

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass

import semver

from dotgithub.core.errors import RevisionResolutionFailed
from dotgithub.core.github.abc import GitHub
from dotgithub.core.references import ActionReference

logger = logging.getLogger(__name__)

_MAJOR_ONLY_PATTERN = re.compile(r"^\d+$")


@dataclass(frozen=True)
class ResolvedRevision:
    """A ref resolved for pinning.

    Attributes:
        resolved_ref: Human-meaningful label (tag or branch) shown in comments and links
        immutable_id: Commit SHA used at call sites when pinning is enabled
    """

    resolved_ref: str
    immutable_id: str


def _strip_v(tag: str) -> str:
    return tag[1:] if tag.startswith("v") else tag


def _parse_semver(tag: str) -> semver.Version | None:
    try:
        return semver.Version.parse(_strip_v(tag))
    except ValueError:
        return None


def select_preferred_tag(tags: Iterable[str]) -> str | None:
    """Pick the tag a user most likely means by "the current release".

    Major-only tags (v4, 12) win, numerically greatest first. Without any,
    the greatest valid semantic version wins. Prereleases can never be
    major-only, so they only compete in the semver comparison.

    Returns:
        The preferred tag name, or None if no tag qualifies
    """
    tag_list = list(tags)

    best_major: tuple[int, str] | None = None
    for tag in tag_list:
        stripped = _strip_v(tag)
        if not _MAJOR_ONLY_PATTERN.match(stripped):
            continue
        number = int(stripped)
        if best_major is None or number > best_major[0]:
            best_major = (number, tag)
    if best_major is not None:
        return best_major[1]

    best_version: tuple[semver.Version, str] | None = None
    for tag in tag_list:
        version = _parse_semver(tag)
        if version is None:
            continue
        if best_version is None or version > best_version[0]:
            best_version = (version, tag)
    if best_version is not None:
        return best_version[1]

    return None


def resolve_revision(
    github: GitHub, reference: ActionReference, *, token: str | None
) -> ResolvedRevision:
    """Resolve a reference to a display label and an immutable commit id.

    Args:
        github: Repository-metadata provider
        reference: Parsed action reference
        token: Optional bearer token forwarded to the provider

    Raises:
        RevisionResolutionFailed: If no label or no immutable id can be found
    """
    resolved_ref = _resolve_label(github, reference, token=token)
    immutable_id = _resolve_immutable_id(github, reference.org_repo, resolved_ref, token=token)
    logger.debug("Resolved %s to %s (%s)", reference, resolved_ref, immutable_id)
    return ResolvedRevision(resolved_ref=resolved_ref, immutable_id=immutable_id)


def _resolve_label(github: GitHub, reference: ActionReference, *, token: str | None) -> str:
    if reference.ref is not None and not reference.is_latest:
        return reference.ref

    tags = github.list_tags(reference.org_repo, token=token)
    if tags is None:
        logger.debug("Tag listing failed for %s", reference.org_repo)
        tags = []

    preferred = select_preferred_tag(tags)
    if preferred is not None:
        return preferred

    if reference.is_latest:
        raise RevisionResolutionFailed(
            reference.org_repo, reference.ref, "no version tags found for 'latest'"
        )

    default_branch = github.get_default_branch(reference.org_repo, token=token)
    if default_branch is None:
        raise RevisionResolutionFailed(
            reference.org_repo, None, "no version tags and default branch is unavailable"
        )
    logger.debug("No version tags for %s, using %s", reference.org_repo, default_branch)
    return default_branch


def _resolve_immutable_id(
    github: GitHub, org_repo: str, resolved_ref: str, *, token: str | None
) -> str:
    sha = github.get_branch_sha(org_repo, resolved_ref, token=token)
    if sha is not None:
        return sha

    sha = github.get_tag_sha(org_repo, resolved_ref, token=token)
    if sha is not None:
        return sha

    sha = github.get_commit_sha(org_repo, resolved_ref, token=token)
    if sha is not None:
        return sha

    raise RevisionResolutionFailed(
        org_repo, resolved_ref, f"'{resolved_ref}' is not a branch, tag or commit"
    )
