"""Working-copy provider.

Materializes a repository at a revision so schemas can be read from disk.
"""

from dotgithub.core.git.abc import Git
from dotgithub.core.git.fake import FakeGit
from dotgithub.core.git.real import RealGit

__all__ = [
    "Git",
    "FakeGit",
    "RealGit",
]
