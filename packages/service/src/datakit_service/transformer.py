"""DocumentTransformer - storage entities -> client-facing documents."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from datakit_filtering.whitelist import authorize_fields

from .population import PopulationResolver
from .projection import exclude_fields, filter_fields

if TYPE_CHECKING:
    from datakit_core.descriptor import FilterDescriptor
    from datakit_core.ports.adapter import IAdapter
    from datakit_core.ports.caller import IActionCaller
    from datakit_core.settings import CollectionSettings

IdCodec = Callable[[Any], Any]


def identity(value: Any) -> Any:
    return value


def _merge_unique(*groups: list[str] | None) -> list[str]:
    out: list[str] = []
    for group in groups:
        for path in group or ():
            if path not in out:
                out.append(path)
    return out


class DocumentTransformer:
    """Runs the per-document pipeline for one collection.

    Order: ``entity_to_object`` → ``after_retrieve_transform_id`` →
    id encoding → population → projection → exclusion. A list in gives a
    list out, a single document gives a document, and anything else
    (counts, ``None``) is returned untouched.
    """

    def __init__(
        self,
        adapter: IAdapter,
        settings: CollectionSettings,
        populator: PopulationResolver | None = None,
        *,
        encode_id: IdCodec = identity,
    ) -> None:
        self._adapter = adapter
        self._settings = settings
        self._populator = populator or PopulationResolver(settings.rules)
        self._encode_id = encode_id

    def to_json(self, entity: Any) -> dict[str, Any]:
        """Steps 1-3: plain mapping with the configured, encoded id field."""
        id_field = self._settings.id_field
        doc = self._adapter.entity_to_object(entity)
        doc = self._adapter.after_retrieve_transform_id(doc, id_field)
        if id_field in doc:
            doc[id_field] = self._encode_id(doc[id_field])
        return doc

    def projected_fields(self, descriptor: FilterDescriptor) -> list[str] | None:
        fields = descriptor.fields
        if fields is None:
            fields = self._settings.fields
        return authorize_fields(fields, self._settings.fields)

    def excluded_fields(self, descriptor: FilterDescriptor) -> list[str]:
        return _merge_unique(descriptor.exclude_fields, self._settings.exclude_fields)

    async def transform(
        self, ctx: IActionCaller | None, descriptor: FilterDescriptor, docs: Any
    ) -> Any:
        if not isinstance(docs, Mapping | list | tuple):
            return docs
        single = not isinstance(docs, list | tuple)
        batch = [self.to_json(doc) for doc in ([docs] if single else docs)]

        if ctx is not None and descriptor.populate and self._settings.rules:
            await self._populator.populate(ctx, batch, descriptor.populate)

        fields = self.projected_fields(descriptor)
        excluded = self.excluded_fields(descriptor)
        batch = [exclude_fields(filter_fields(doc, fields), excluded) for doc in batch]
        return batch[0] if single else batch

    async def transform_mapping(
        self, ctx: IActionCaller | None, descriptor: FilterDescriptor, docs: list[Any]
    ) -> dict[Any, Any]:
        """Transform *docs* keyed by each document's encoded id, in input order."""
        id_field = self._settings.id_field
        keys = [self.to_json(doc).get(id_field) for doc in docs]
        json = await self.transform(ctx, descriptor, docs)
        return dict(zip(keys, json, strict=True))
