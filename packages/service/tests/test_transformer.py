"""Tests for DocumentTransformer."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

import pytest

from datakit_core.adapters.memory import MemoryAdapter
from datakit_core.descriptor import FilterDescriptor
from datakit_core.settings import CollectionSettings
from datakit_service.transformer import DocumentTransformer

STORED = {
    "_id": "u1",
    "name": "Walter",
    "email": "walter@example.com",
    "password": "H3153n83rg",
    "address": {"city": "Albuquerque", "zip": 87111},
    "group": 7,
}


def _transformer(**settings: Any) -> DocumentTransformer:
    return DocumentTransformer(
        MemoryAdapter(),
        CollectionSettings(id_field="id", **settings),
        encode_id=lambda v: f"enc-{v}",
    )


@pytest.mark.asyncio
class TestDocumentTransformer:
    async def test_renames_and_encodes_id(self) -> None:
        res = await _transformer().transform(None, FilterDescriptor(), dict(STORED))
        assert res["id"] == "enc-u1"
        assert "_id" not in res

    async def test_does_not_mutate_input(self) -> None:
        raw = {"_id": "u1", "address": {"city": "x"}}
        await _transformer(exclude_fields=["address.city"]).transform(
            None, FilterDescriptor(), raw
        )
        assert raw == {"_id": "u1", "address": {"city": "x"}}

    @pytest.mark.parametrize(
        "value",
        [
            None,
            5,
            "text",
            True,
            Decimal("1.50"),
            datetime(2024, 1, 2, tzinfo=timezone.utc),
        ],
    )
    async def test_non_documents_pass_through(self, value: Any) -> None:
        assert await _transformer().transform(None, FilterDescriptor(), value) is value

    async def test_list_in_list_out(self) -> None:
        res = await _transformer().transform(
            None, FilterDescriptor(fields=["id"]), [dict(STORED), {"_id": "u2"}]
        )
        assert res == [{"id": "enc-u1"}, {"id": "enc-u2"}]

    async def test_default_allow_list_applies_without_requested_fields(self) -> None:
        t = _transformer(fields=["id", "name", "address"])
        res = await t.transform(None, FilterDescriptor(), dict(STORED))
        assert res == {"id": "enc-u1", "name": "Walter", "address": STORED["address"]}

    async def test_requested_fields_are_authorized(self) -> None:
        t = _transformer(fields=["id", "name", "address"])
        res = await t.transform(
            None,
            FilterDescriptor(fields=["name", "address.city", "password"]),
            dict(STORED),
        )
        assert res == {"name": "Walter", "address": {"city": "Albuquerque"}}

    async def test_exclusions_are_unioned(self) -> None:
        t = _transformer(exclude_fields=["password"])
        res = await t.transform(
            None, FilterDescriptor(exclude_fields=["email", "address.zip"]), dict(STORED)
        )
        assert set(res) == {"id", "name", "address", "group"}
        assert res["address"] == {"city": "Albuquerque"}

    async def test_exclusion_runs_after_projection(self) -> None:
        res = await _transformer().transform(
            None,
            FilterDescriptor(fields=["name", "email"], exclude_fields=["email"]),
            dict(STORED),
        )
        assert res == {"name": "Walter"}

    async def test_population_before_projection(
        self, make_caller: Callable[..., Any]
    ) -> None:
        caller = make_caller({"groups.get": {7: {"title": "Teachers", "secret": 1}}})
        t = _transformer(populates={"group": "groups.get"})
        res = await t.transform(
            caller,
            FilterDescriptor(populate=["group"], fields=["name", "group.title"]),
            dict(STORED),
        )
        assert res == {"name": "Walter", "group": {"title": "Teachers"}}

    async def test_population_needs_context(self) -> None:
        t = _transformer(populates={"group": "groups.get"})
        res = await t.transform(None, FilterDescriptor(populate=["group"]), dict(STORED))
        assert res["group"] == 7

    async def test_transform_mapping_keys_by_encoded_id(self) -> None:
        res = await _transformer().transform_mapping(
            None, FilterDescriptor(fields=["name"]), [dict(STORED), {"_id": "u2"}]
        )
        assert res == {"enc-u1": {"name": "Walter"}, "enc-u2": {}}
