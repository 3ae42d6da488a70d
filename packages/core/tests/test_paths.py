"""Tests for the dot-path helpers and wildcard projection."""

from __future__ import annotations

import copy

import pytest

from datakit_core.paths import (
    MISSING,
    flatten,
    get_path,
    has_path,
    project,
    set_path,
    unset_path,
)

PERSON = {
    "id": 1,
    "name": "Walter",
    "address": {"city": "Albuquerque", "state": "NM", "zip": 87111},
}

GARAGE = {
    "id": 1,
    "name": "Walter",
    "cars": [
        {
            "id": 1,
            "name": "BMW",
            "model": "320i",
            "wheels": [
                {"placement": "front-left", "id": 1},
                {"placement": "front-right", "id": 2},
                {"placement": "behind-left", "id": 3},
                {"placement": "behind-right", "id": 4},
            ],
        },
        {
            "id": 2,
            "name": "BMW",
            "model": "520i",
            "wheels": [
                {"placement": "front-left", "id": 1},
                {"placement": "front-right", "id": 2},
                {"placement": "behind-left", "id": 3},
                {"placement": "behind-right", "id": 4},
            ],
        },
        {
            "id": 3,
            "name": "AUDI",
            "model": "Q7",
            "wheels": [
                {"placement": "front-left", "id": 1, "histories": []},
                {
                    "placement": "front-right",
                    "id": 2,
                    "histories": [{"date": "11/11/2011", "message": "replace new 2011"}],
                },
                {"placement": "behind-left", "id": 3, "histories": []},
                {
                    "placement": "behind-right",
                    "id": 4,
                    "histories": [{"date": "12/12/2012", "message": "replace new 2012"}],
                },
            ],
        },
    ],
    "models": {
        "id": 1,
        "desc": "not an array",
        "items": [
            {"id": 0, "desc": "0 desc", "name": "0 name"},
            {"id": 1, "desc": "1 desc", "name": "1 name"},
            {"id": 2, "desc": "2 desc", "name": "2 name"},
        ],
    },
}

NESTED = {"a": {"2": {"b": [{"c": [{"d": 3, "e": 4}, {"d": 5, "e": 6}]}]}}}


class TestGetSetUnset:
    def test_get_nested_and_indexed(self) -> None:
        assert get_path(PERSON, "address.city") == "Albuquerque"
        assert get_path(GARAGE, "cars.2.wheels.1.id") == 2

    def test_get_missing_returns_sentinel_or_default(self) -> None:
        assert get_path(PERSON, "address.country") is MISSING
        assert get_path(PERSON, "name.first", "x") == "x"
        assert not has_path(PERSON, "cars.0")
        assert has_path(PERSON, "address.zip")

    def test_get_none_value_is_present(self) -> None:
        assert has_path({"a": None}, "a")
        assert get_path({"a": None}, "a") is None

    def test_set_creates_intermediate_dicts(self) -> None:
        doc: dict = {}
        set_path(doc, "liked.by", [1, 2])
        assert doc == {"liked": {"by": [1, 2]}}

    def test_set_creates_list_for_numeric_segment(self) -> None:
        doc: dict = {}
        set_path(doc, "items.1.id", 7)
        assert doc == {"items": [None, {"id": 7}]}

    def test_set_replaces_scalar_in_the_way(self) -> None:
        doc = {"author": 3}
        set_path(doc, "author.name", "John")
        assert doc == {"author": {"name": "John"}}

    def test_unset_nested(self) -> None:
        doc = copy.deepcopy(PERSON)
        assert unset_path(doc, "address.city") is True
        assert unset_path(doc, "address.country") is False
        assert doc["address"] == {"state": "NM", "zip": 87111}

    def test_flatten_keeps_lists(self) -> None:
        assert flatten({"a": {"b": 1, "c": {"d": [1, 2]}}, "e": {}}) == {
            "a.b": 1,
            "a.c.d": [1, 2],
            "e": {},
        }


class TestProject:
    def test_top_level_and_nested_fields(self) -> None:
        assert project(PERSON, ["name", "address"]) == {
            "name": "Walter",
            "address": PERSON["address"],
        }
        assert project(PERSON, ["name", "address.city", "address.zip"]) == {
            "name": "Walter",
            "address": {"city": "Albuquerque", "zip": 87111},
        }

    def test_result_does_not_alias_source(self) -> None:
        res = project(PERSON, ["address"])
        res["address"]["city"] = "Santa Fe"
        assert PERSON["address"]["city"] == "Albuquerque"

    def test_wildcards_over_nested_arrays(self) -> None:
        res = project(
            GARAGE,
            [
                "name",
                "cars.$.id",
                "cars.$.name",
                "cars.$.wheels.$.placement",
                "cars.$.wheels.$.histories.$.date",
                "cars.$.wheels.$.histories.$.non-existed",
            ],
        )
        plain_wheels = [
            {"placement": "front-left"},
            {"placement": "front-right"},
            {"placement": "behind-left"},
            {"placement": "behind-right"},
        ]
        assert res == {
            "name": "Walter",
            "cars": [
                {"id": 1, "name": "BMW", "wheels": plain_wheels},
                {"id": 2, "name": "BMW", "wheels": plain_wheels},
                {
                    "id": 3,
                    "name": "AUDI",
                    "wheels": [
                        {"placement": "front-left"},
                        {"placement": "front-right", "histories": [{"date": "11/11/2011"}]},
                        {"placement": "behind-left"},
                        {"placement": "behind-right", "histories": [{"date": "12/12/2012"}]},
                    ],
                },
            ],
        }

    def test_wildcard_on_mapping_yields_nothing(self) -> None:
        assert project(GARAGE, ["models.$.desc", "name"]) == {"name": "Walter"}

    @pytest.mark.parametrize(
        ("paths", "items"),
        [
            (["models.items.$.id"], [{"id": 0}, {"id": 1}, {"id": 2}]),
            (["models.items.0.id"], [{"id": 0}]),
            (["models.items.1.id"], [None, {"id": 1}]),
            (
                [
                    "models.items.0.id",
                    "models.items.1.desc",
                    "models.items.2.name",
                    "models.items.3.invalid",
                ],
                [{"id": 0}, {"desc": "1 desc"}, {"name": "2 name"}],
            ),
        ],
    )
    def test_array_indexes(self, paths: list[str], items: list) -> None:
        assert project(GARAGE, ["name", *paths]) == {
            "name": "Walter",
            "models": {"items": items},
        }

    def test_numeric_object_key(self) -> None:
        assert project(NESTED, ["a.2.b.$.c.$.e"]) == {
            "a": {"2": {"b": [{"c": [{"e": 4}, {"e": 6}]}]}}
        }

    def test_wildcard_against_object_key_yields_nothing(self) -> None:
        assert project(NESTED, ["a.$.b.$.c.2.e"]) == {}

    def test_index_leaves_holes(self) -> None:
        assert project(NESTED, ["a.2.b.$.c.1.e"]) == {
            "a": {"2": {"b": [{"c": [None, {"e": 6}]}]}}
        }

    def test_whole_subtree_then_partial_keeps_subtree(self) -> None:
        res = project(NESTED, ["a.2.b", "a.2.b.$.c.1.e"])
        assert res == {"a": {"2": {"b": NESTED["a"]["2"]["b"]}}}

    def test_later_paths_merge(self) -> None:
        assert project(NESTED, ["a.2.b.$.c.1.d", "a.2.b.$.c.1.e"]) == {
            "a": {"2": {"b": [{"c": [None, {"d": 5, "e": 6}]}]}}
        }
        assert project(NESTED, ["a.2.b.$.c.$.d", "a.2.b.$.c.1.e"]) == {
            "a": {"2": {"b": [{"c": [{"d": 3}, {"d": 5, "e": 6}]}]}}
        }

    def test_dollar_as_literal_key(self) -> None:
        doc = {
            "$": [
                {"a": {"$": {"b": [{"c": 1, "d": 2}, {"c": 3, "d": 4}]}}},
                {"a": {"$": {"b": [{"c": 5, "d": 6}, {"c": 7, "d": 8}]}}},
            ]
        }
        assert project(doc, ["$.$.a.$.b.$.c"]) == {
            "$": [
                {"a": {"$": {"b": [{"c": 1}, {"c": 3}]}}},
                {"a": {"$": {"b": [{"c": 5}, {"c": 7}]}}},
            ]
        }
