"""Error taxonomy for action registration and synthesis.

Every error raised by the core derives from DotGithubError so the command
layer can catch domain failures in one place and let programming errors
propagate.
"""


class DotGithubError(Exception):
    """Base class for all domain errors."""


class InvalidReference(DotGithubError):
    """An action reference string is not of the form owner/repo[@ref]."""

    def __init__(self, text: str, reason: str) -> None:
        self.text = text
        self.reason = reason
        super().__init__(f"Invalid action reference '{text}': {reason}")


class RevisionResolutionFailed(DotGithubError):
    """No tag, branch or commit could be resolved for a reference."""

    def __init__(self, org_repo: str, ref: str | None, reason: str) -> None:
        self.org_repo = org_repo
        self.ref = ref
        self.reason = reason
        target = f"{org_repo}@{ref}" if ref else org_repo
        super().__init__(f"Could not resolve {target}: {reason}")


class SchemaNotFound(DotGithubError):
    """No action.yml/action.yaml exists at the expected location."""

    def __init__(self, location: str, reason: str | None = None) -> None:
        self.location = location
        self.reason = reason
        message = f"No action schema found at '{location}'"
        if reason is not None:
            message += f": {reason}"
        super().__init__(message)


class SynthesisFailed(DotGithubError):
    """Every discovered schema of a repository failed to synthesize."""

    def __init__(self, org_repo: str, failures: dict[str, str]) -> None:
        self.org_repo = org_repo
        self.failures = failures
        details = "; ".join(
            f"{path or '<root>'}: {reason}" for path, reason in sorted(failures.items())
        )
        super().__init__(f"No actions could be generated for {org_repo} ({details})")


class RegistryCorrupt(DotGithubError):
    """The registry document exists but could not be parsed."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Registry document {path} is corrupt: {reason}")


class FilesystemError(DotGithubError):
    """Writing or deleting a generated file failed."""

    def __init__(self, path: str, operation: str, reason: str) -> None:
        self.path = path
        self.operation = operation
        self.reason = reason
        super().__init__(f"Failed to {operation} {path}: {reason}")


class ActionNotRegistered(DotGithubError):
    """An operation targeted a repository or subpath absent from the registry."""

    def __init__(self, org_repo: str, action_path: str | None = None) -> None:
        self.org_repo = org_repo
        self.action_path = action_path
        target = f"{org_repo} (path '{action_path}')" if action_path is not None else org_repo
        super().__init__(f"{target} is not in the registry")
