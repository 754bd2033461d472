"""Parsing of user-supplied action reference strings."""

import re
from dataclasses import dataclass

from dotgithub.core.errors import InvalidReference

_SEGMENT_PATTERN = re.compile(r"^[A-Za-z0-9._-]+$")

LATEST_REF = "latest"


@dataclass(frozen=True)
class ActionReference:
    """An action coordinate with an optional ref.

    Attributes:
        org_repo: Repository coordinate in owner/name form
        ref: None (resolve automatically), "latest", or a branch/tag/commit token
    """

    org_repo: str
    ref: str | None

    @property
    def owner(self) -> str:
        return self.org_repo.split("/", 1)[0]

    @property
    def repo(self) -> str:
        return self.org_repo.split("/", 1)[1]

    @property
    def is_latest(self) -> bool:
        return self.ref == LATEST_REF

    def __str__(self) -> str:
        if self.ref is None:
            return self.org_repo
        return f"{self.org_repo}@{self.ref}"


def parse_org_repo(text: str) -> str:
    """Validate an owner/name coordinate and return it unchanged.

    Raises:
        InvalidReference: If text is not exactly two valid path segments
    """
    parts = text.split("/")
    if len(parts) != 2:
        raise InvalidReference(text, "expected owner/repo")
    for part in parts:
        if not part:
            raise InvalidReference(text, "owner and repo must be non-empty")
        if not _SEGMENT_PATTERN.match(part):
            raise InvalidReference(text, f"'{part}' contains invalid characters")
    return text


def parse_action_reference(text: str) -> ActionReference:
    """Parse owner/repo(@ref)? splitting at the last '@'.

    An empty ref ("owner/repo@") is treated the same as no ref at all.
    """
    stripped = text.strip()
    if not stripped:
        raise InvalidReference(text, "reference is empty")

    at_index = stripped.rfind("@")
    if at_index == -1:
        return ActionReference(org_repo=parse_org_repo(stripped), ref=None)

    org_repo = parse_org_repo(stripped[:at_index])
    ref = stripped[at_index + 1 :]
    return ActionReference(org_repo=org_repo, ref=ref if ref else None)
