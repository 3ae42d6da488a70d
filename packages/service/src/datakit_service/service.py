"""DataAccessService - request-facing CRUD/query operations of one collection."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import TYPE_CHECKING, Any

from datakit_core.adapters.memory import MemoryAdapter
from datakit_core.descriptor import FilterDescriptor
from datakit_core.paths import flatten
from datakit_core.primitives.exceptions import (
    EntityNotFoundError,
    InvalidParameterError,
    ValidationError,
)
from datakit_core.retry import RetryPolicy
from datakit_core.settings import CollectionSettings
from datakit_core.validation.result import ValidationResult
from datakit_filtering.normalizer import FilterNormalizer

from .listing import Paginator
from .population import PopulationResolver
from .transformer import DocumentTransformer, IdCodec, identity

if TYPE_CHECKING:
    from datakit_core.ports.adapter import IAdapter
    from datakit_core.ports.cache import ICacheService
    from datakit_core.ports.caller import IActionCaller
    from datakit_core.ports.validation import IEntityValidator

    from .context import Context, LocalBroker

logger = logging.getLogger(__name__)

EntityHook = Callable[[Any, "IActionCaller | None"], Awaitable[None]]
LifecycleHook = Callable[[], Awaitable[None]]

#: Operations exposed as ``<name>.<op>`` actions by :meth:`DataAccessService.register`.
ACTIONS = ("find", "count", "list", "create", "insert", "get", "update", "remove")

_EMPTY = FilterDescriptor()


class DataAccessService:
    """Uniform CRUD and query surface over one collection.

    Constructed once with its adapter and :class:`CollectionSettings`;
    every operation takes the request context first and the raw request
    params second. Reads run through the filter normalizer and the
    document transformer; writes additionally clear the ``"<name>."``
    cache namespace and fire the matching ``entity_*`` hook.

    Parameters
    ----------
    name:
        Collection/service name, used as action and cache prefix.
    adapter:
        Storage adapter; defaults to a fresh
        :class:`~datakit_core.adapters.memory.MemoryAdapter`.
    entity_validator:
        Optional validator applied to every entity before ``create``/``insert``.
    encode_id / decode_id:
        Map storage ids to external ids and back (identity by default).
    retry_policy:
        Backoff used by :meth:`start` while the adapter cannot connect.
    """

    def __init__(
        self,
        name: str,
        adapter: IAdapter | None = None,
        settings: CollectionSettings | None = None,
        *,
        entity_validator: IEntityValidator | None = None,
        cache: ICacheService | None = None,
        entity_created: EntityHook | None = None,
        entity_updated: EntityHook | None = None,
        entity_removed: EntityHook | None = None,
        after_connected: LifecycleHook | None = None,
        encode_id: IdCodec = identity,
        decode_id: IdCodec = identity,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self.name = name
        self.adapter: IAdapter = adapter if adapter is not None else MemoryAdapter()
        self.settings = settings or CollectionSettings()
        self.entity_validator = entity_validator
        self.cache = cache
        self._hooks: dict[str, EntityHook | None] = {
            "created": entity_created,
            "updated": entity_updated,
            "removed": entity_removed,
        }
        self._after_connected = after_connected
        self.encode_id = encode_id
        self.decode_id = decode_id
        self.retry_policy = retry_policy or RetryPolicy()

        self.normalizer = FilterNormalizer(self.settings)
        self.populator = PopulationResolver(self.settings.rules)
        self.transformer = DocumentTransformer(
            self.adapter, self.settings, self.populator, encode_id=encode_id
        )
        self.paginator = Paginator(self.adapter)

    # ── Lifecycle ────────────────────────────────────────────────

    async def start(self) -> None:
        """Connect the adapter, retrying per :attr:`retry_policy`."""
        attempt = 0
        while True:
            attempt += 1
            try:
                await self.adapter.connect()
                break
            except Exception as exc:
                if not self.retry_policy.should_retry(attempt):
                    logger.error(
                        "Connection error for %s after %d attempt(s)",
                        self.name,
                        attempt,
                    )
                    raise
                logger.warning(
                    "Connection error for %s: %s. Reconnecting...", self.name, exc
                )
                await self.retry_policy.wait_before_retry(attempt)
        logger.debug("Adapter of %s connected", self.name)
        if self._after_connected is not None:
            await self._after_connected()

    async def stop(self) -> None:
        await self.adapter.disconnect()

    # ── Reads ────────────────────────────────────────────────────

    async def find(self, ctx: IActionCaller | None, params: Any = None) -> Any:
        descriptor = self.normalizer.normalize(params)
        docs = await self.adapter.find(descriptor)
        return await self.transformer.transform(ctx, descriptor, docs)

    async def count(self, ctx: IActionCaller | None, params: Any = None) -> int:
        descriptor = self.normalizer.normalize(params).without_pagination()
        return await self.adapter.count(descriptor)

    async def list(
        self, ctx: IActionCaller | None, params: Any = None
    ) -> dict[str, Any]:
        descriptor = self.normalizer.normalize(params, paginated=True)
        envelope = await self.paginator.paginate(
            ctx, descriptor, self.transformer.transform
        )
        return envelope.to_dict()

    async def get(self, ctx: IActionCaller | None, params: Any) -> Any:
        """Fetch by ``id`` (scalar or list); ``mapping=True`` keys results by id."""
        descriptor = self.normalizer.normalize(params)
        raw_id = descriptor.extra.get("id")
        if raw_id is None:
            raise InvalidParameterError("The 'id' parameter is required", param="id")
        mapping = descriptor.extra.get("mapping") is True

        if isinstance(raw_id, list | tuple):
            docs = await self.adapter.find_by_ids([self.decode_id(i) for i in raw_id])
            if mapping:
                return await self.transformer.transform_mapping(ctx, descriptor, docs)
            return await self.transformer.transform(ctx, descriptor, docs)

        doc = await self.adapter.find_by_id(self.decode_id(raw_id))
        if doc is None:
            raise EntityNotFoundError(raw_id)
        if mapping:
            return await self.transformer.transform_mapping(ctx, descriptor, [doc])
        return await self.transformer.transform(ctx, descriptor, doc)

    # ── Writes ───────────────────────────────────────────────────

    async def create(self, ctx: IActionCaller | None, entity: Mapping[str, Any]) -> Any:
        await self.validate_entity(entity)
        id_field = self.settings.id_field
        saved = self.adapter.before_save_transform_id(dict(entity), id_field)
        doc = await self.adapter.insert(saved)
        json = await self.transformer.transform(ctx, _EMPTY, doc)
        await self.entity_changed("created", json, ctx)
        return json

    async def insert(self, ctx: IActionCaller | None, params: Mapping[str, Any]) -> Any:
        """Insert ``params["entities"]`` (list) or ``params["entity"]``."""
        id_field = self.settings.id_field
        entities = params.get("entities")
        entity = params.get("entity")
        if isinstance(entities, list):
            await self.validate_entity(entities)
            prepared = [
                self.adapter.before_save_transform_id(dict(e), id_field)
                for e in entities
            ]
            docs = await self.adapter.insert_many(prepared)
        elif entity:
            await self.validate_entity(entity)
            docs = await self.adapter.insert(
                self.adapter.before_save_transform_id(dict(entity), id_field)
            )
        else:
            raise InvalidParameterError(
                "Invalid request! The 'params' must contain 'entity' or 'entities'!"
            )
        json = await self.transformer.transform(ctx, _EMPTY, docs)
        await self.entity_changed("created", json, ctx)
        return json

    async def update(self, ctx: IActionCaller | None, params: Mapping[str, Any]) -> Any:
        """Set every param except ``id``/``id_field`` on the identified entity."""
        entity_id: Any = None
        sets: dict[str, Any] = {}
        for prop, value in params.items():
            if prop in ("id", self.settings.id_field):
                entity_id = self.decode_id(value)
            else:
                sets[prop] = value
        if entity_id is None:
            raise InvalidParameterError("The 'id' parameter is required", param="id")
        if self.settings.use_dot_notation:
            sets = flatten(sets)

        doc = await self.adapter.update_by_id(entity_id, {"$set": sets})
        if doc is None:
            raise EntityNotFoundError(entity_id)
        json = await self.transformer.transform(ctx, _EMPTY, doc)
        await self.entity_changed("updated", json, ctx)
        return json

    async def remove(self, ctx: IActionCaller | None, params: Mapping[str, Any]) -> Any:
        raw_id = params.get("id")
        if raw_id is None:
            raise InvalidParameterError("The 'id' parameter is required", param="id")
        doc = await self.adapter.remove_by_id(self.decode_id(raw_id))
        if doc is None:
            raise EntityNotFoundError(raw_id)
        json = await self.transformer.transform(ctx, _EMPTY, doc)
        await self.entity_changed("removed", json, ctx)
        return json

    # ── Helpers ──────────────────────────────────────────────────

    async def validate_entity(self, entity: Any) -> None:
        """Raise :class:`ValidationError` unless every entity is valid."""
        if self.entity_validator is None:
            return
        if isinstance(entity, list):
            result = ValidationResult.success()
            for index, item in enumerate(entity):
                item_result = await self.entity_validator.validate(item)
                result = result.merge(item_result.prefixed(str(index)))
        else:
            result = await self.entity_validator.validate(dict(entity))
        if not result.is_valid:
            raise ValidationError(result.errors)

    async def entity_changed(
        self, change: str, json: Any, ctx: IActionCaller | None
    ) -> None:
        """Clear the cache namespace and fire the ``entity_<change>`` hook."""
        if self.cache is not None:
            await self.cache.clear_namespace(f"{self.name}.")
        hook = self._hooks.get(change)
        if hook is not None:
            await hook(json, ctx)

    # ── Broker wiring ────────────────────────────────────────────

    def register(self, broker: LocalBroker) -> None:
        """Expose every operation as ``<name>.<op>`` on *broker*."""
        for op in ACTIONS:
            broker.register(f"{self.name}.{op}", self._action(op))

    def _action(self, op: str) -> Callable[[Context], Awaitable[Any]]:
        method = getattr(self, op)

        async def handler(ctx: Context) -> Any:
            return await method(ctx, ctx.params)

        handler.__name__ = f"{self.name}.{op}"
        return handler
