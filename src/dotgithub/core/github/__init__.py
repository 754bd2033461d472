"""Repository-metadata provider.

Abstractions over tag, branch and commit lookups with a REST-backed
production implementation and an in-memory fake for tests.
"""

from dotgithub.core.github.abc import GitHub
from dotgithub.core.github.fake import FakeGitHub
from dotgithub.core.github.real import RealGitHub

__all__ = [
    "GitHub",
    "FakeGitHub",
    "RealGitHub",
]
