"""Tests for action reference parsing."""

import pytest

from dotgithub.core.errors import InvalidReference
from dotgithub.core.references import ActionReference, parse_action_reference, parse_org_repo


def test_parse_reference_without_ref() -> None:
    reference = parse_action_reference("actions/checkout")

    assert reference == ActionReference(org_repo="actions/checkout", ref=None)
    assert reference.owner == "actions"
    assert reference.repo == "checkout"
    assert not reference.is_latest


def test_parse_reference_with_tag() -> None:
    reference = parse_action_reference("actions/setup-node@v4")

    assert reference.org_repo == "actions/setup-node"
    assert reference.ref == "v4"
    assert str(reference) == "actions/setup-node@v4"


def test_parse_reference_latest() -> None:
    assert parse_action_reference("actions/checkout@latest").is_latest


def test_parse_reference_empty_ref_means_no_ref() -> None:
    assert parse_action_reference("actions/checkout@").ref is None


def test_parse_reference_splits_at_last_at_sign() -> None:
    """Refs may not contain '@', but the split point is the last one."""
    with pytest.raises(InvalidReference):
        parse_action_reference("actions@checkout@v4")


def test_parse_reference_strips_surrounding_whitespace() -> None:
    assert parse_action_reference("  actions/cache@v4 \n").org_repo == "actions/cache"


@pytest.mark.parametrize(
    "text",
    ["", "checkout", "actions/checkout/extra", "/checkout", "actions/", "act ions/checkout"],
)
def test_parse_reference_rejects_malformed_coordinates(text: str) -> None:
    with pytest.raises(InvalidReference):
        parse_action_reference(text)


def test_parse_org_repo_returns_input() -> None:
    assert parse_org_repo("docker/build-push-action") == "docker/build-push-action"


def test_invalid_reference_message_names_input() -> None:
    with pytest.raises(InvalidReference, match="Invalid action reference 'nope'"):
        parse_org_repo("nope")
