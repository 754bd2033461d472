"""The registry of adopted actions.

The registry is an immutable value: operations return a new Registry and the
caller decides when to persist it. Entries are unique per (org_repo, subpath)
and always kept sorted so the persisted document is deterministic.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from pathlib import PurePosixPath, PureWindowsPath
from typing import Any, Literal

logger = logging.getLogger(__name__)

DEFAULT_VERSION = "1.0.0"
DEFAULT_OUTPUT_DIR = "src"

TokenSource = Literal["env", "config"]
RegistryKey = tuple[str, str]


@dataclass(frozen=True)
class FormattingOptions:
    ruff: bool = False


@dataclass(frozen=True)
class RegistryOptions:
    token_source: TokenSource = "env"
    formatting: FormattingOptions = field(default_factory=FormattingOptions)


@dataclass(frozen=True)
class RegistryEntry:
    """One adopted action.

    Attributes:
        org_repo: Repository coordinate in owner/name form
        action_path: Subpath of the schema inside the repository, None for the root
        pinned_revision: Ref written into the generated factory
        display_version: Version the user asked for (tag or branch)
        generated_identifier: Name of the generated factory function
        output_path: Generated file, POSIX path relative to the output root
    """

    org_repo: str
    pinned_revision: str
    display_version: str
    generated_identifier: str
    output_path: str | None
    action_path: str | None = None

    @property
    def key(self) -> RegistryKey:
        return (self.org_repo, self.action_path or "")

    @property
    def uses(self) -> str:
        if self.action_path:
            return f"{self.org_repo}/{self.action_path}"
        return self.org_repo

    def to_document(self) -> dict[str, Any]:
        data: dict[str, Any] = {"orgRepo": self.org_repo}
        if self.action_path:
            data["actionPath"] = self.action_path
        data["pinnedRevision"] = self.pinned_revision
        data["displayVersion"] = self.display_version
        data["generatedIdentifier"] = self.generated_identifier
        if self.output_path is not None:
            data["outputPath"] = self.output_path
        return data


def sort_entries(entries: Iterable[RegistryEntry]) -> tuple[RegistryEntry, ...]:
    return tuple(sorted(entries, key=lambda entry: entry.key))


@dataclass(frozen=True)
class Registry:
    """The in-memory shape of the registry document, whatever its serialized form."""

    version: str
    output_dir: str
    entries: tuple[RegistryEntry, ...]
    plugins: tuple[dict[str, Any], ...] = ()
    stacks: tuple[dict[str, Any], ...] = ()
    options: RegistryOptions = field(default_factory=RegistryOptions)

    @staticmethod
    def default(output_dir: str = DEFAULT_OUTPUT_DIR) -> "Registry":
        return Registry(version=DEFAULT_VERSION, output_dir=output_dir, entries=())

    def get_entry(self, key: RegistryKey) -> RegistryEntry | None:
        for entry in self.entries:
            if entry.key == key:
                return entry
        return None

    def entries_for(self, org_repo: str) -> tuple[RegistryEntry, ...]:
        return tuple(entry for entry in self.entries if entry.org_repo == org_repo)

    def org_repos(self) -> list[str]:
        return sorted({entry.org_repo for entry in self.entries})

    def upsert_entry(self, entry: RegistryEntry) -> "Registry":
        """Return a registry where entry replaces any entry with the same key."""
        others = [existing for existing in self.entries if existing.key != entry.key]
        return replace(self, entries=sort_entries([*others, entry]))

    def remove_entry(self, key: RegistryKey) -> "Registry":
        return replace(
            self, entries=sort_entries([entry for entry in self.entries if entry.key != key])
        )

    def to_document(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "outputDir": self.output_dir,
            "actions": [entry.to_document() for entry in sort_entries(self.entries)],
            "plugins": [dict(plugin) for plugin in self.plugins],
            "stacks": [dict(stack) for stack in self.stacks],
            "options": {
                "tokenSource": self.options.token_source,
                "formatting": {"ruff": self.options.formatting.ruff},
            },
        }


# Keys written by earlier releases, mapped to their current names
_LEGACY_ENTRY_KEYS = {
    "ref": "pinnedRevision",
    "versionRef": "displayVersion",
    "actionName": "generatedIdentifier",
    "functionName": "generatedIdentifier",
}

_REQUIRED_ENTRY_KEYS = ("orgRepo", "pinnedRevision", "displayVersion")


def validate_and_migrate(data: dict[str, Any], *, source: str) -> Registry:
    """Build a Registry from a parsed document, filling defaults.

    Missing top-level fields get defaults. Entries lacking a required key and
    malformed plugins/stacks are dropped with a warning. Output paths that
    escape the output root are rewritten to stay inside it.

    Args:
        data: Parsed document
        source: Document location, used in warnings
    """
    version = str(data.get("version") or DEFAULT_VERSION)
    output_dir = str(data.get("outputDir") or DEFAULT_OUTPUT_DIR)

    entries: list[RegistryEntry] = []
    for index, raw_entry in enumerate(_list_field(data, "actions")):
        entry = _parse_entry(raw_entry, output_dir)
        if entry is None:
            logger.warning("%s: dropping invalid action entry #%d", source, index)
            continue
        entries.append(entry)

    deduplicated: dict[RegistryKey, RegistryEntry] = {}
    for entry in entries:
        # Last occurrence wins
        deduplicated[entry.key] = entry

    plugins = tuple(
        dict(item) for item in _list_field(data, "plugins") if _is_valid_plugin(item, source)
    )
    stacks = tuple(
        dict(item) for item in _list_field(data, "stacks") if _is_valid_stack(item, source)
    )

    return Registry(
        version=version,
        output_dir=output_dir,
        entries=sort_entries(list(deduplicated.values())),
        plugins=plugins,
        stacks=stacks,
        options=_parse_options(data.get("options")),
    )


def _list_field(data: dict[str, Any], key: str) -> list[Any]:
    value = data.get(key)
    return value if isinstance(value, list) else []


def _parse_entry(raw: Any, output_dir: str) -> RegistryEntry | None:
    if not isinstance(raw, dict):
        return None

    migrated = dict(raw)
    for legacy_key, current_key in _LEGACY_ENTRY_KEYS.items():
        if legacy_key in migrated and current_key not in migrated:
            migrated[current_key] = migrated[legacy_key]

    for key in _REQUIRED_ENTRY_KEYS:
        if not isinstance(migrated.get(key), str) or not migrated[key]:
            return None

    output_path = migrated.get("outputPath")
    if isinstance(output_path, str) and output_path:
        output_path = contain_output_path(output_path, output_dir) or None
    else:
        output_path = None

    action_path = migrated.get("actionPath")
    return RegistryEntry(
        org_repo=migrated["orgRepo"],
        action_path=action_path if isinstance(action_path, str) and action_path else None,
        pinned_revision=migrated["pinnedRevision"],
        display_version=migrated["displayVersion"],
        generated_identifier=str(migrated.get("generatedIdentifier") or ""),
        output_path=output_path,
    )


def contain_output_path(path: str, output_dir: str) -> str:
    """Rewrite an output path that escapes the output root back inside it.

    "../src/actions/checkout.py" with output dir "src" becomes
    "actions/checkout.py". Absolute paths, drive letters and any ".." segment
    count as escaping. A path with nothing left inside the root becomes "".
    """
    drive = PureWindowsPath(path).drive
    normalized = path[len(drive) :].replace("\\", "/")
    if not (drive or PurePosixPath(normalized).is_absolute() or ".." in normalized.split("/")):
        return path

    segments = [segment for segment in normalized.split("/") if segment not in ("", ".", "..")]
    root_segments = [segment for segment in output_dir.split("/") if segment not in ("", ".")]
    if root_segments and segments[: len(root_segments)] == root_segments:
        segments = segments[len(root_segments) :]
    fixed = "/".join(segments)
    logger.warning("Output path %s escapes the output root, using %s", path, fixed)
    return fixed


def _parse_options(raw: Any) -> RegistryOptions:
    if not isinstance(raw, dict):
        return RegistryOptions()

    token_source: TokenSource = "config" if raw.get("tokenSource") == "config" else "env"
    formatting_raw = raw.get("formatting")
    ruff = bool(formatting_raw.get("ruff", False)) if isinstance(formatting_raw, dict) else False
    return RegistryOptions(token_source=token_source, formatting=FormattingOptions(ruff=ruff))


def _is_valid_plugin(item: Any, source: str) -> bool:
    if isinstance(item, dict) and isinstance(item.get("name"), str) and item.get("package"):
        return True
    logger.warning("%s: dropping invalid plugin %r", source, item)
    return False


def _is_valid_stack(item: Any, source: str) -> bool:
    if isinstance(item, dict) and isinstance(item.get("name"), str):
        if isinstance(item.get("plugins"), list):
            return True
    logger.warning("%s: dropping invalid stack %r", source, item)
    return False
