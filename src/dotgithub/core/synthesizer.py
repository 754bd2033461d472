"""Orchestration of add, remove, update and regenerate over the generated tree.

Every operation takes the current Registry and returns a new one together
with a result record. Nothing here saves the registry: callers load,
transform and save, so a lock or transactional write can wrap the save
without touching this module.

Synthesis runs in two phases. Planning resolves, checks out and generates
every module in memory; nothing on disk changes if planning fails. Applying
then deletes replaced files, writes new ones, updates the registry and
rebuilds the aggregation files from a rescan of the tree.
"""

import fnmatch
import logging
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from dotgithub.core.codegen import (
    GeneratedModule,
    derive_identifiers,
    generate_action_module,
    unique_identifiers,
)
from dotgithub.core.context import DotGithubContext
from dotgithub.core.errors import (
    ActionNotRegistered,
    DotGithubError,
    RevisionResolutionFailed,
    SchemaNotFound,
    SynthesisFailed,
)
from dotgithub.core.references import ActionReference, parse_action_reference, parse_org_repo
from dotgithub.core.registry import Registry, RegistryEntry, RegistryKey
from dotgithub.core.revision import ResolvedRevision, resolve_revision
from dotgithub.core.schema import ActionSchema, find_action_paths, read_action_schema
from dotgithub.core.tree import (
    CleanupLog,
    delete_file,
    find_generated_modules,
    nested_module_path,
    rebuild_all,
    rebuild_for_repository,
    single_module_path,
    write_generated,
)

logger = logging.getLogger(__name__)

SynthesisStatus = Literal["success", "partial"]


@dataclass(frozen=True)
class GeneratedAction:
    action_path: str
    type_name: str
    function_name: str
    path: Path
    entry: RegistryEntry


@dataclass(frozen=True)
class SchemaFailure:
    action_path: str
    reason: str


@dataclass(frozen=True)
class SynthesisResult:
    """Outcome of synthesizing one repository.

    Attributes:
        org_repo: Repository coordinate
        revision: Revision the modules were generated at
        generated: One record per module written
        failures: Subpaths whose schema could not be synthesized
        removed_paths: Files deleted because they were replaced or went stale
        warnings: Best-effort cleanup problems
        previous_revision: Pinned revision before an update, None for add
    """

    org_repo: str
    revision: ResolvedRevision
    generated: tuple[GeneratedAction, ...]
    failures: tuple[SchemaFailure, ...]
    removed_paths: tuple[Path, ...]
    warnings: tuple[str, ...]
    previous_revision: str | None = None

    @property
    def status(self) -> SynthesisStatus:
        return "partial" if self.failures else "success"

    @property
    def changed(self) -> bool:
        if self.previous_revision is None:
            return True
        return any(item.entry.pinned_revision != self.previous_revision for item in self.generated)


@dataclass(frozen=True)
class RemovalResult:
    org_repo: str
    removed_entries: tuple[RegistryEntry, ...]
    removed_paths: tuple[Path, ...]
    warnings: tuple[str, ...]


@dataclass(frozen=True)
class RegenerateResult:
    results: tuple[SynthesisResult, ...]
    failures: tuple[tuple[str, str], ...]
    pruned_paths: tuple[Path, ...]
    warnings: tuple[str, ...]


@dataclass(frozen=True)
class _PlannedModule:
    action_path: str
    module: GeneratedModule
    path: Path


@dataclass(frozen=True)
class _Plan:
    org_repo: str
    revision: ResolvedRevision
    call_site_ref: str
    discovered_paths: tuple[str, ...]
    modules: tuple[_PlannedModule, ...]
    failures: tuple[SchemaFailure, ...]

    @property
    def failed_keys(self) -> set[RegistryKey]:
        return {(self.org_repo, failure.action_path) for failure in self.failures}


def add_action(
    ctx: DotGithubContext,
    registry: Registry,
    reference_text: str,
    *,
    action_name: str | None = None,
    pin: bool = True,
) -> tuple[Registry, SynthesisResult]:
    """Adopt every action of a repository, replacing what was generated before.

    Entries for subpaths that failed keep their previous generation; entries
    for subpaths that no longer exist upstream are removed.

    Raises:
        InvalidReference: If reference_text is malformed
        RevisionResolutionFailed: If the revision cannot be resolved or fetched
        SchemaNotFound: If the repository declares no schema
        SynthesisFailed: If every discovered schema failed
        FilesystemError: If a generated file cannot be written
    """
    reference = parse_action_reference(reference_text)
    token = ctx.token_for(registry.options)
    revision = resolve_revision(ctx.github, reference, token=token)
    plan = _plan(ctx, registry, reference.org_repo, revision, action_name=action_name, pin=pin)

    replaced = [
        entry
        for entry in registry.entries_for(reference.org_repo)
        if entry.key not in plan.failed_keys
    ]
    return _apply(ctx, registry, plan, replaced, previous_revision=None)


def update_action(
    ctx: DotGithubContext,
    registry: Registry,
    reference_text: str,
    *,
    latest: bool = False,
    action_name: str | None = None,
    pin: bool = True,
) -> tuple[Registry, SynthesisResult]:
    """Re-resolve a registered repository and regenerate it (remove, then add).

    The target ref is the one in reference_text, else "latest" when latest is
    set, else the stored display version (which picks up a moved major tag).

    Raises:
        ActionNotRegistered: If the repository has no registry entries
        RevisionResolutionFailed: If the target cannot be resolved
    """
    reference = parse_action_reference(reference_text)
    existing = registry.entries_for(reference.org_repo)
    if not existing:
        raise ActionNotRegistered(reference.org_repo)

    if reference.ref is not None:
        target = reference.ref
    elif latest:
        target = "latest"
    else:
        target = existing[0].display_version

    token = ctx.token_for(registry.options)
    revision = resolve_revision(
        ctx.github, ActionReference(org_repo=reference.org_repo, ref=target), token=token
    )
    plan = _plan(
        ctx,
        registry,
        reference.org_repo,
        revision,
        action_name=action_name,
        stored_identifier=_stored_identifier(existing),
        pin=pin,
    )

    replaced = [entry for entry in existing if entry.key not in plan.failed_keys]
    return _apply(ctx, registry, plan, replaced, previous_revision=existing[0].pinned_revision)


def remove_action(
    ctx: DotGithubContext,
    registry: Registry,
    org_repo: str,
    *,
    action_path: str | None = None,
    keep_files: bool = False,
) -> tuple[Registry, RemovalResult]:
    """Drop a repository's entries (or one subpath) and clean up the tree.

    File and directory deletion is best-effort: failures become warnings.

    Raises:
        InvalidReference: If org_repo is malformed
        ActionNotRegistered: If nothing matches
    """
    parse_org_repo(org_repo)
    targets = [
        entry
        for entry in registry.entries_for(org_repo)
        if action_path is None or entry.key == (org_repo, action_path)
    ]
    if not targets:
        raise ActionNotRegistered(org_repo, action_path)

    log = CleanupLog()
    output_root = ctx.path_resolver.output_root(registry.output_dir)
    for entry in targets:
        registry = registry.remove_entry(entry.key)
        if not keep_files and entry.output_path is not None:
            delete_file(output_root / entry.output_path, log, root=output_root)

    if not keep_files:
        rebuild_for_repository(output_root, org_repo, log)

    return registry, RemovalResult(
        org_repo=org_repo,
        removed_entries=tuple(targets),
        removed_paths=tuple(log.removed),
        warnings=tuple(log.warnings),
    )


def regenerate_actions(
    ctx: DotGithubContext,
    registry: Registry,
    pattern: str | None = None,
    *,
    prune: bool = False,
) -> tuple[Registry, RegenerateResult]:
    """Regenerate registered repositories at their stored revisions.

    No revision is re-resolved. A repository that fails is reported and left
    as it was; the others still regenerate.

    Args:
        pattern: fnmatch glob over org_repo selecting repositories
        prune: Also delete generated modules no registry entry references
    """
    results: list[SynthesisResult] = []
    failures: list[tuple[str, str]] = []
    for org_repo in registry.org_repos():
        if pattern is not None and not fnmatch.fnmatch(org_repo, pattern):
            continue
        existing = registry.entries_for(org_repo)
        stored = existing[0]
        revision = ResolvedRevision(
            resolved_ref=stored.display_version, immutable_id=stored.pinned_revision
        )
        try:
            plan = _plan(
                ctx,
                registry,
                org_repo,
                revision,
                action_name=None,
                stored_identifier=_stored_identifier(existing),
                pin=True,
            )
            replaced = [entry for entry in existing if entry.key not in plan.failed_keys]
            registry, result = _apply(
                ctx, registry, plan, replaced, previous_revision=stored.pinned_revision
            )
        except DotGithubError as e:
            logger.debug("Regenerating %s failed: %s", org_repo, e)
            failures.append((org_repo, str(e)))
            continue
        results.append(result)

    log = CleanupLog()
    if prune:
        output_root = ctx.path_resolver.output_root(registry.output_dir)
        tracked = {
            (output_root / entry.output_path).resolve()
            for entry in registry.entries
            if entry.output_path is not None
        }
        for path in find_generated_modules(output_root):
            if path.resolve() not in tracked:
                delete_file(path, log, root=output_root)
        rebuild_all(output_root, log)

    return registry, RegenerateResult(
        results=tuple(results),
        failures=tuple(failures),
        pruned_paths=tuple(log.removed),
        warnings=tuple(log.warnings),
    )


def _stored_identifier(existing: tuple[RegistryEntry, ...]) -> str | None:
    if len(existing) == 1 and existing[0].generated_identifier:
        return existing[0].generated_identifier
    return None


def _plan(
    ctx: DotGithubContext,
    registry: Registry,
    org_repo: str,
    revision: ResolvedRevision,
    *,
    action_name: str | None,
    pin: bool,
    stored_identifier: str | None = None,
) -> _Plan:
    """Check out, discover and generate every schema of a repository in memory.

    stored_identifier is the factory name of a single-action repository's
    existing entry. When it differs from what the schema name derives (a
    custom --name at add time), it is reused as the name so that updates keep
    the identifier stable.
    """
    token = ctx.token_for(registry.options)
    schemas: dict[str, ActionSchema] = {}
    failures: list[SchemaFailure] = []

    with tempfile.TemporaryDirectory(prefix="dotgithub-") as temp_dir:
        working_copy = Path(temp_dir)
        try:
            ctx.git.checkout(org_repo, revision.immutable_id, working_copy, token=token)
        except RuntimeError as e:
            raise RevisionResolutionFailed(
                org_repo, revision.resolved_ref, f"checkout failed: {e}"
            ) from e

        discovered = find_action_paths(working_copy)
        if not discovered:
            raise SchemaNotFound(org_repo, "repository declares no action.yml or action.yaml")

        for action_path in discovered:
            try:
                schemas[action_path] = read_action_schema(working_copy, action_path)
            except SchemaNotFound as e:
                failures.append(SchemaFailure(action_path=action_path, reason=str(e)))

    if not schemas:
        if len(discovered) == 1:
            raise SchemaNotFound(org_repo, failures[0].reason)
        reasons = {failure.action_path: failure.reason for failure in failures}
        raise SynthesisFailed(org_repo, reasons)

    call_site_ref = revision.immutable_id if pin else revision.resolved_ref
    output_root = ctx.path_resolver.output_root(registry.output_dir)
    single = discovered == [""]
    multi = len(discovered) > 1

    taken: set[str] = set()
    modules: list[_PlannedModule] = []
    for action_path, schema in schemas.items():
        name = action_name or schema.name or org_repo.split("/")[1]
        if action_name is None and stored_identifier is not None and len(discovered) == 1:
            if derive_identifiers(name).function_name != stored_identifier:
                name = stored_identifier
        identifiers = unique_identifiers(
            name, action_path, taken, include_path_words=multi and action_path != ""
        )
        taken.add(identifiers.function_name)
        module = generate_action_module(
            schema,
            org_repo,
            action_path or None,
            call_site_ref,
            revision.resolved_ref,
            identifiers=identifiers,
        )
        if single:
            path = single_module_path(output_root, org_repo)
        else:
            path = nested_module_path(output_root, org_repo, action_path, identifiers.module_name)
        modules.append(_PlannedModule(action_path=action_path, module=module, path=path))

    return _Plan(
        org_repo=org_repo,
        revision=revision,
        call_site_ref=call_site_ref,
        discovered_paths=tuple(discovered),
        modules=tuple(_avoid_package_shadowing(modules)),
        failures=tuple(failures),
    )


def _avoid_package_shadowing(modules: list[_PlannedModule]) -> list[_PlannedModule]:
    """Rename a module whose stem equals a sibling subpath directory.

    `restore.py` next to a `restore/` directory would shadow the directory's
    modules on import.
    """
    directories = {parent for planned in modules for parent in planned.path.parents}
    adjusted: list[_PlannedModule] = []
    for planned in modules:
        if planned.path.with_suffix("") in directories:
            renamed = planned.path.with_name(f"{planned.path.stem}_action.py")
            adjusted.append(
                _PlannedModule(
                    action_path=planned.action_path, module=planned.module, path=renamed
                )
            )
        else:
            adjusted.append(planned)
    return adjusted


def _apply(
    ctx: DotGithubContext,
    registry: Registry,
    plan: _Plan,
    replaced: list[RegistryEntry],
    *,
    previous_revision: str | None,
) -> tuple[Registry, SynthesisResult]:
    log = CleanupLog()
    output_root = ctx.path_resolver.output_root(registry.output_dir)
    formatter = ctx.formatter_for(registry.options)
    new_paths = {planned.path.resolve() for planned in plan.modules}

    for entry in replaced:
        registry = registry.remove_entry(entry.key)
        if entry.output_path is None:
            continue
        old_path = ctx.path_resolver.to_absolute(entry.output_path, output_dir=registry.output_dir)
        if old_path not in new_paths:
            delete_file(old_path, log, root=output_root)

    generated: list[GeneratedAction] = []
    for planned in plan.modules:
        write_generated(planned.path, formatter.format_source(planned.module.source))
        output_path = ctx.path_resolver.to_relative(planned.path, output_dir=registry.output_dir)
        entry = RegistryEntry(
            org_repo=plan.org_repo,
            action_path=planned.action_path or None,
            pinned_revision=plan.call_site_ref,
            display_version=plan.revision.resolved_ref,
            generated_identifier=planned.module.identifiers.function_name,
            output_path=output_path,
        )
        registry = registry.upsert_entry(entry)
        generated.append(
            GeneratedAction(
                action_path=planned.action_path,
                type_name=planned.module.identifiers.type_name,
                function_name=planned.module.identifiers.function_name,
                path=planned.path,
                entry=entry,
            )
        )
        logger.debug("Generated %s at %s", entry.uses, planned.path)

    # Always last, including for partial results, so the tree matches the registry
    rebuild_for_repository(output_root, plan.org_repo, log)

    return registry, SynthesisResult(
        org_repo=plan.org_repo,
        revision=plan.revision,
        generated=tuple(generated),
        failures=plan.failures,
        removed_paths=tuple(log.removed),
        warnings=tuple(log.warnings),
        previous_revision=previous_revision,
    )
