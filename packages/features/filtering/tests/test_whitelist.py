"""Tests for field authorization."""

from __future__ import annotations

import pytest

from datakit_filtering.whitelist import FieldWhitelist, authorize_fields

FLAT = ["id", "name", "address", "bio.body", "mobile.carrier.name"]
NESTED = [
    "id",
    "name",
    "address.city",
    "address.state",
    "address.country",
    "bio.body.height",
    "bio.male",
    "bio.body.hair.color",
]


@pytest.mark.parametrize(
    ("requested", "expected"),
    [
        (["id", "name", "address", "email", "password", "otherProp"], ["id", "name", "address"]),
        (
            ["id", "name", "address.city", "address.state", "email"],
            ["id", "name", "address.city", "address.state"],
        ),
        (
            ["id", "name", "bio.body.height", "bio.male", "bio.dob.year", "bio.body.hair.color"],
            ["id", "name", "bio.body.height", "bio.body.hair.color"],
        ),
        (["carrier"], []),
        ([], []),
        (None, []),
    ],
)
def test_flat_allow_list(requested: list[str] | None, expected: list[str]) -> None:
    assert authorize_fields(requested, FLAT) == expected


def test_parent_expands_into_allowed_children() -> None:
    assert authorize_fields(["id", "name", "address"], NESTED) == [
        "id",
        "name",
        "address.city",
        "address.state",
        "address.country",
    ]
    assert authorize_fields(["id", "name", "bio.male", "bio.body"], NESTED) == [
        "id",
        "name",
        "bio.male",
        "bio.body.height",
        "bio.body.hair.color",
    ]


def test_no_allow_list_returns_request() -> None:
    assert authorize_fields(["a", "b"], None) == ["a", "b"]
    assert authorize_fields(["a"], []) == ["a"]
    assert authorize_fields(None, None) is None


def test_scenario_prefix_match() -> None:
    res = authorize_fields(["id", "name", "address.city", "email"], ["id", "name", "address"])
    assert res == ["id", "name", "address.city"]


def test_expansion_duplicates_are_kept() -> None:
    assert authorize_fields(["address", "address"], ["address.city"]) == [
        "address.city",
        "address.city",
    ]


@pytest.mark.parametrize("allow_list", [FLAT, NESTED])
def test_never_widens_access(allow_list: list[str]) -> None:
    requested = ["id", "address", "address.zip", "bio", "bio.body.hair", "mobile", "x.y.z"]
    for path in authorize_fields(requested, allow_list) or []:
        assert any(path == a or path.startswith(a + ".") for a in allow_list)


def test_field_whitelist_wrapper() -> None:
    whitelist = FieldWhitelist(FLAT)
    assert whitelist.restricted
    assert whitelist.allows("address.city")
    assert not whitelist.allows("email")
    assert not FieldWhitelist().restricted
    assert FieldWhitelist().authorize(["x"]) == ["x"]
