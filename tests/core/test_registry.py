"""Tests for the registry value and document migration."""

import logging

import pytest

from dotgithub.core.registry import (
    DEFAULT_OUTPUT_DIR,
    DEFAULT_VERSION,
    FormattingOptions,
    Registry,
    RegistryEntry,
    RegistryOptions,
    contain_output_path,
    validate_and_migrate,
)


def _entry(
    org_repo: str, action_path: str | None = None, revision: str = "sha1"
) -> RegistryEntry:
    return RegistryEntry(
        org_repo=org_repo,
        action_path=action_path,
        pinned_revision=revision,
        display_version="v1",
        generated_identifier="fn",
        output_path=None,
    )


def test_upsert_keeps_one_entry_per_key() -> None:
    registry = Registry.default()
    for revision in ["sha1", "sha2", "sha3"]:
        registry = registry.upsert_entry(_entry("actions/cache", revision=revision))

    matching = [entry for entry in registry.entries if entry.key == ("actions/cache", "")]
    assert len(matching) == 1
    assert matching[0].pinned_revision == "sha3"


def test_entries_sorted_by_key() -> None:
    registry = Registry.default()
    registry = registry.upsert_entry(_entry("actions/cache", "save"))
    registry = registry.upsert_entry(_entry("actions/checkout"))
    registry = registry.upsert_entry(_entry("actions/cache"))
    registry = registry.upsert_entry(_entry("actions/cache", "restore"))

    assert [entry.uses for entry in registry.entries] == [
        "actions/cache",
        "actions/cache/restore",
        "actions/cache/save",
        "actions/checkout",
    ]


def test_remove_entry_and_lookups() -> None:
    registry = Registry.default()
    registry = registry.upsert_entry(_entry("actions/cache", "save"))
    registry = registry.upsert_entry(_entry("actions/cache", "restore"))
    registry = registry.upsert_entry(_entry("docker/login-action"))

    registry = registry.remove_entry(("actions/cache", "save"))

    assert registry.get_entry(("actions/cache", "save")) is None
    assert registry.get_entry(("actions/cache", "restore")) is not None
    assert [entry.action_path for entry in registry.entries_for("actions/cache")] == ["restore"]
    assert registry.org_repos() == ["actions/cache", "docker/login-action"]


def test_defaults_for_empty_document() -> None:
    registry = validate_and_migrate({}, source="test")

    assert registry.version == DEFAULT_VERSION
    assert registry.output_dir == DEFAULT_OUTPUT_DIR
    assert registry.entries == ()
    assert registry.options == RegistryOptions()


def test_legacy_keys_migrated() -> None:
    registry = validate_and_migrate(
        {
            "outputDir": "gen",
            "actions": [
                {
                    "orgRepo": "actions/checkout",
                    "ref": "abc123",
                    "versionRef": "v4",
                    "functionName": "checkout",
                    "outputPath": "actions/checkout.py",
                }
            ],
        },
        source="test",
    )

    assert registry.entries == (
        RegistryEntry(
            org_repo="actions/checkout",
            action_path=None,
            pinned_revision="abc123",
            display_version="v4",
            generated_identifier="checkout",
            output_path="actions/checkout.py",
        ),
    )
    assert registry.to_document()["actions"] == [
        {
            "orgRepo": "actions/checkout",
            "pinnedRevision": "abc123",
            "displayVersion": "v4",
            "generatedIdentifier": "checkout",
            "outputPath": "actions/checkout.py",
        }
    ]


def test_invalid_entries_dropped_with_warning(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        registry = validate_and_migrate(
            {
                "actions": [
                    {"orgRepo": "actions/checkout", "displayVersion": "v4"},
                    "not-a-mapping",
                    {"orgRepo": "actions/cache", "pinnedRevision": "s", "displayVersion": "v4"},
                ]
            },
            source="dotgithub.json",
        )

    assert [entry.org_repo for entry in registry.entries] == ["actions/cache"]
    assert "dropping invalid action entry #0" in caplog.text
    assert "dropping invalid action entry #1" in caplog.text


def test_duplicate_keys_last_wins() -> None:
    registry = validate_and_migrate(
        {
            "actions": [
                {"orgRepo": "a/b", "pinnedRevision": "old", "displayVersion": "v1"},
                {"orgRepo": "a/b", "pinnedRevision": "new", "displayVersion": "v2"},
            ]
        },
        source="test",
    )

    assert len(registry.entries) == 1
    assert registry.entries[0].pinned_revision == "new"


def test_escaping_output_path_contained() -> None:
    registry = validate_and_migrate(
        {
            "actions": [
                {
                    "orgRepo": "actions/checkout",
                    "pinnedRevision": "s",
                    "displayVersion": "v4",
                    "outputPath": "../src/actions/checkout.py",
                }
            ]
        },
        source="test",
    )

    assert registry.entries[0].output_path == "actions/checkout.py"


def test_contain_output_path() -> None:
    assert contain_output_path("actions/checkout.py", "src") == "actions/checkout.py"
    assert contain_output_path("../gen/a/b.py", "gen") == "a/b.py"
    assert contain_output_path("a/../b.py", "src") == "a/b.py"
    assert contain_output_path("/home/u/.bashrc", "src") == "home/u/.bashrc"
    assert contain_output_path("C://Users/u/x.py", "src") == "Users/u/x.py"
    assert contain_output_path("..", "src") == ""


def test_absolute_output_path_clamped_on_load() -> None:
    registry = validate_and_migrate(
        {
            "actions": [
                {
                    "orgRepo": "acme/tool",
                    "pinnedRevision": "v1",
                    "displayVersion": "v1",
                    "outputPath": "/etc/passwd",
                },
                {
                    "orgRepo": "acme/other",
                    "pinnedRevision": "v1",
                    "displayVersion": "v1",
                    "outputPath": "..",
                },
            ]
        },
        source="test",
    )

    assert [entry.output_path for entry in registry.entries] == [None, "etc/passwd"]


def test_plugins_and_stacks_validated(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        registry = validate_and_migrate(
            {
                "plugins": [{"name": "ci", "package": "acme-ci"}, {"name": "broken"}],
                "stacks": [{"name": "default", "plugins": ["ci"]}, {"name": "bad"}],
            },
            source="test",
        )

    assert registry.plugins == ({"name": "ci", "package": "acme-ci"},)
    assert registry.stacks == ({"name": "default", "plugins": ["ci"]},)
    assert "dropping invalid plugin" in caplog.text
    assert "dropping invalid stack" in caplog.text


def test_options_parsed() -> None:
    registry = validate_and_migrate(
        {"options": {"tokenSource": "config", "formatting": {"ruff": True}}}, source="test"
    )

    assert registry.options == RegistryOptions(
        token_source="config", formatting=FormattingOptions(ruff=True)
    )
    assert registry.to_document()["options"] == {
        "tokenSource": "config",
        "formatting": {"ruff": True},
    }
