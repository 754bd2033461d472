"""Application context with dependency injection."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotgithub.core.formatter.abc import Formatter
from dotgithub.core.formatter.noop import NoopFormatter
from dotgithub.core.formatter.real import RuffFormatter
from dotgithub.core.git.abc import Git
from dotgithub.core.git.fake import FakeGit
from dotgithub.core.git.real import RealGit
from dotgithub.core.github.abc import GitHub
from dotgithub.core.github.fake import FakeGitHub
from dotgithub.core.github.real import RealGitHub
from dotgithub.core.path_resolver import PathResolver
from dotgithub.core.registry import RegistryOptions
from dotgithub.core.registry_store import FilesystemRegistryStore, RegistryStore

TOKEN_ENV_VAR = "GITHUB_TOKEN"


@dataclass(frozen=True)
class DotGithubContext:
    """Immutable context holding all dependencies for dotgithub operations.

    Created at CLI entry point and threaded through the application.
    Frozen to prevent accidental modification at runtime.
    """

    github: GitHub
    git: Git
    formatter: Formatter
    path_resolver: PathResolver
    registry_store: RegistryStore
    cwd: Path
    explicit_token: str | None
    environ_token: str | None

    def token_for(self, options: RegistryOptions) -> str | None:
        """Bearer token for provider calls, or None to go anonymous.

        An explicit token always wins. The environment variable is consulted
        only when the registry's token source is "env".
        """
        if self.explicit_token:
            return self.explicit_token
        if options.token_source == "env" and self.environ_token:
            return self.environ_token
        return None

    def formatter_for(self, options: RegistryOptions) -> Formatter:
        if options.formatting.ruff:
            return self.formatter
        return NoopFormatter()

    @staticmethod
    def for_test(
        *,
        github: GitHub | None = None,
        git: Git | None = None,
        formatter: Formatter | None = None,
        cwd: Path | None = None,
        registry_path: Path | None = None,
        registry_store: RegistryStore | None = None,
        explicit_token: str | None = None,
        environ_token: str | None = None,
    ) -> "DotGithubContext":
        """Create test context with optional pre-configured fakes.

        Args:
            github: Optional GitHub implementation. Defaults to an empty FakeGitHub.
            git: Optional Git implementation. Defaults to an empty FakeGit.
            formatter: Optional Formatter. Defaults to NoopFormatter.
            cwd: Working directory. Defaults to a sentinel path.
            registry_path: Explicit registry document location
            registry_store: Optional store. Defaults to a filesystem store over the resolver.
            explicit_token: Token as if passed with --token
            environ_token: Token as if read from GITHUB_TOKEN

        Example:
            >>> github = FakeGitHub(tags={"actions/checkout": ["v4"]})
            >>> ctx = DotGithubContext.for_test(github=github, cwd=tmp_path)
        """
        resolved_cwd = cwd if cwd is not None else Path("/test/sentinel")
        path_resolver = PathResolver(resolved_cwd, registry_path)
        return DotGithubContext(
            github=github if github is not None else FakeGitHub(),
            git=git if git is not None else FakeGit(),
            formatter=formatter if formatter is not None else NoopFormatter(),
            path_resolver=path_resolver,
            registry_store=(
                registry_store
                if registry_store is not None
                else FilesystemRegistryStore(path_resolver)
            ),
            cwd=resolved_cwd,
            explicit_token=explicit_token,
            environ_token=environ_token,
        )


def create_context(*, registry_path: Path | None, token: str | None) -> DotGithubContext:
    """Create production context with real implementations.

    Called at CLI entry point to create the context for the entire
    command execution.

    Args:
        registry_path: Registry document from --config, or None to search upward
        token: Token from --token, or None

    Example:
        >>> ctx = create_context(registry_path=None, token=None)
        >>> registry = ctx.registry_store.load()
    """
    # 1. Capture cwd (no deps)
    cwd = Path.cwd()

    # 2. Path resolution (needs cwd), shared by the store
    path_resolver = PathResolver(cwd, registry_path)

    # 3. Create context with all values
    return DotGithubContext(
        github=RealGitHub(),
        git=RealGit(),
        formatter=RuffFormatter(),
        path_resolver=path_resolver,
        registry_store=FilesystemRegistryStore(path_resolver),
        cwd=cwd,
        explicit_token=token,
        environ_token=os.environ.get(TOKEN_ENV_VAR),
    )
