"""Pydantic models for JSON output schemas.

Every command that supports --format json emits one of these models, so the
machine-readable summaries are validated before they are printed.
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from dotgithub.core.registry import RegistryEntry
from dotgithub.core.synthesizer import RegenerateResult, RemovalResult, SynthesisResult


class RegistryEntryInfo(BaseModel):
    """One registry entry as shown by list, remove and add."""

    model_config = ConfigDict(strict=True)

    org_repo: str
    action_path: str | None
    pinned_revision: str
    display_version: str
    generated_identifier: str
    output_path: str | None

    @staticmethod
    def from_entry(entry: RegistryEntry) -> "RegistryEntryInfo":
        return RegistryEntryInfo(
            org_repo=entry.org_repo,
            action_path=entry.action_path,
            pinned_revision=entry.pinned_revision,
            display_version=entry.display_version,
            generated_identifier=entry.generated_identifier,
            output_path=entry.output_path,
        )


class GeneratedActionInfo(BaseModel):
    model_config = ConfigDict(strict=True)

    action_path: str
    type_name: str
    function_name: str
    path: str


class SchemaFailureInfo(BaseModel):
    model_config = ConfigDict(strict=True)

    action_path: str
    reason: str


class SynthesisResponse(BaseModel):
    """JSON response for one repository processed by add, update or regenerate.

    Attributes:
        org_repo: Repository coordinate
        status: "success" or "partial"
        display_version: Version label that was resolved
        immutable_id: Commit SHA the modules were generated from
        changed: Whether the pinned revision moved (always true for add)
        generated: Modules written
        failures: Subpaths that failed, with reasons
        removed_paths: Files deleted as replaced or stale
        warnings: Best-effort cleanup problems
    """

    model_config = ConfigDict(strict=True)

    org_repo: str
    status: str = Field(..., pattern="^(success|partial)$")
    display_version: str
    immutable_id: str
    changed: bool
    generated: list[GeneratedActionInfo]
    failures: list[SchemaFailureInfo]
    removed_paths: list[str]
    warnings: list[str]

    @staticmethod
    def from_result(result: SynthesisResult) -> "SynthesisResponse":
        return SynthesisResponse(
            org_repo=result.org_repo,
            status=result.status,
            display_version=result.revision.resolved_ref,
            immutable_id=result.revision.immutable_id,
            changed=result.changed,
            generated=[
                GeneratedActionInfo(
                    action_path=item.action_path,
                    type_name=item.type_name,
                    function_name=item.function_name,
                    path=str(item.path),
                )
                for item in result.generated
            ],
            failures=[
                SchemaFailureInfo(action_path=failure.action_path, reason=failure.reason)
                for failure in result.failures
            ],
            removed_paths=_paths(result.removed_paths),
            warnings=list(result.warnings),
        )


class RepositoryFailureInfo(BaseModel):
    model_config = ConfigDict(strict=True)

    org_repo: str
    error: str


class UpdateResponse(BaseModel):
    model_config = ConfigDict(strict=True)

    updated: list[SynthesisResponse]
    failures: list[RepositoryFailureInfo]


class RemoveResponse(BaseModel):
    model_config = ConfigDict(strict=True)

    org_repo: str
    removed: list[RegistryEntryInfo]
    removed_paths: list[str]
    warnings: list[str]

    @staticmethod
    def from_result(result: RemovalResult) -> "RemoveResponse":
        return RemoveResponse(
            org_repo=result.org_repo,
            removed=[RegistryEntryInfo.from_entry(entry) for entry in result.removed_entries],
            removed_paths=_paths(result.removed_paths),
            warnings=list(result.warnings),
        )


class ListResponse(BaseModel):
    model_config = ConfigDict(strict=True)

    registry_path: str
    output_root: str
    entries: list[RegistryEntryInfo]


class RegenerateResponse(BaseModel):
    model_config = ConfigDict(strict=True)

    regenerated: list[SynthesisResponse]
    failures: list[RepositoryFailureInfo]
    pruned_paths: list[str]
    warnings: list[str]

    @staticmethod
    def from_result(result: RegenerateResult) -> "RegenerateResponse":
        return RegenerateResponse(
            regenerated=[SynthesisResponse.from_result(item) for item in result.results],
            failures=[
                RepositoryFailureInfo(org_repo=org_repo, error=error)
                for org_repo, error in result.failures
            ],
            pruned_paths=_paths(result.pruned_paths),
            warnings=list(result.warnings),
        )


class InitResponse(BaseModel):
    model_config = ConfigDict(strict=True)

    registry_path: str
    output_dir: str
    created: bool


class ConfigShowResponse(BaseModel):
    model_config = ConfigDict(strict=True)

    registry_path: str
    exists: bool
    version: str
    output_dir: str
    output_root: str
    token_source: str
    formatting_ruff: bool
    entry_count: int


class ConfigSetResponse(BaseModel):
    model_config = ConfigDict(strict=True)

    registry_path: str
    key: str
    value: str


class ConvertResponse(BaseModel):
    model_config = ConfigDict(strict=True)

    workflow: str
    output_path: str | None
    converted: list[str]
    skipped: list[str]


def _paths(paths: tuple[Path, ...]) -> list[str]:
    return [str(path) for path in paths]
