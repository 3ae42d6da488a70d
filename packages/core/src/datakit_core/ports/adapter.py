"""IAdapter - the storage adapter contract every backend implements."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..descriptor import FilterDescriptor


@runtime_checkable
class IAdapter(Protocol):
    """
    Uniform CRUD/query contract over a single collection of a storage backend.

    ``find``/``count`` receive a normalized
    :class:`~datakit_core.descriptor.FilterDescriptor` (or ``None`` for
    "everything"). ``query`` predicates passed to ``find_one``,
    ``update_many`` and ``remove_many`` are in the adapter's own dialect.
    Update patches use the ``{"$set": {...}}`` form.

    Entities returned by the I/O methods are backend-native; callers convert
    them with :meth:`entity_to_object` before handing them to clients.
    Adapters may use a native primary-key name different from the
    collection's configured ``id_field``; :meth:`before_save_transform_id`
    and :meth:`after_retrieve_transform_id` translate between the two.
    """

    async def connect(self) -> None: ...

    async def disconnect(self) -> None: ...

    async def find(self, descriptor: FilterDescriptor | None = None) -> list[Any]: ...

    async def find_one(self, query: Any) -> Any | None: ...

    async def find_by_id(self, entity_id: Any) -> Any | None: ...

    async def find_by_ids(self, entity_ids: list[Any]) -> list[Any]: ...

    async def count(self, descriptor: FilterDescriptor | None = None) -> int: ...

    async def insert(self, entity: dict[str, Any]) -> Any: ...

    async def insert_many(self, entities: list[dict[str, Any]]) -> list[Any]: ...

    async def update_by_id(self, entity_id: Any, patch: dict[str, Any]) -> Any | None:
        ...

    async def update_many(self, query: Any, patch: dict[str, Any]) -> int: ...

    async def remove_by_id(self, entity_id: Any) -> Any | None: ...

    async def remove_many(self, query: Any) -> int: ...

    async def clear(self) -> int: ...

    def entity_to_object(self, entity: Any) -> dict[str, Any]: ...

    def before_save_transform_id(
        self, entity: dict[str, Any], id_field: str
    ) -> dict[str, Any]: ...

    def after_retrieve_transform_id(
        self, entity: dict[str, Any], id_field: str
    ) -> dict[str, Any]: ...
