"""PopulationResolver - batched resolution of reference fields.

For every population rule matched by the requested paths, ids are
collected across the whole batch and resolved with exactly one lookup
(remote action or local handler). Results are spliced back in place.
Nested paths such as ``author.group`` are forwarded to the remote action
as its own ``populate`` parameter, so population recurses across
collections.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from datakit_core.paths import MISSING, get_path, set_path
from datakit_core.settings import ActionRule, HandlerRule

if TYPE_CHECKING:
    from datakit_core.ports.caller import IActionCaller
    from datakit_core.settings import PopulationRule

logger = logging.getLogger(__name__)


def _flatten(value: Any, out: list[Any]) -> None:
    if isinstance(value, list | tuple):
        for item in value:
            _flatten(item, out)
    elif value is not None and value is not MISSING:
        out.append(value)


def collect_ids(docs: Sequence[Mapping[str, Any]], field: str) -> list[Any]:
    """Distinct non-null ids found at *field*, in first-seen order."""
    flat: list[Any] = []
    for doc in docs:
        _flatten(get_path(doc, field), flat)
    ids: list[Any] = []
    seen: set[Any] = set()
    for value in flat:
        marker = value if value.__hash__ is not None else repr(value)
        if marker in seen:
            continue
        seen.add(marker)
        ids.append(value)
    return ids


def _lookup(mapping: Mapping[Any, Any], entity_id: Any) -> Any:
    if entity_id.__hash__ is None:
        return MISSING
    if entity_id in mapping:
        return mapping[entity_id]
    return mapping.get(str(entity_id), MISSING)


class PopulationResolver:
    """Resolves population paths against a fixed set of rules."""

    def __init__(self, rules: Sequence[PopulationRule]) -> None:
        self._rules = list(rules)

    @property
    def rules(self) -> list[PopulationRule]:
        return list(self._rules)

    def group(self, paths: Sequence[str]) -> list[tuple[PopulationRule, list[str]]]:
        """Match *paths* to rules by longest key prefix.

        Returns ``(rule, child_paths)`` pairs in rule declaration order;
        child paths have the rule key prefix stripped. Unmatched paths and
        rules without a matching path are left out.
        """
        children: dict[str, list[str]] = {}
        for path in paths:
            best: PopulationRule | None = None
            for rule in self._rules:
                if path == rule.key or path.startswith(rule.key + "."):
                    if best is None or len(rule.key) > len(best.key):
                        best = rule
            if best is None:
                logger.debug("No population rule for path %r", path)
                continue
            child = children.setdefault(best.key, [])
            if path != best.key:
                child.append(path[len(best.key) + 1 :])
        return [
            (rule, children[rule.key]) for rule in self._rules if rule.key in children
        ]

    async def populate(
        self, ctx: IActionCaller, docs: Any, paths: Sequence[str] | None
    ) -> Any:
        """Populate *docs* (a document or a list of them) in place and return it."""
        if not self._rules or not paths:
            return docs
        if isinstance(docs, list):
            batch = docs
        elif isinstance(docs, Mapping):
            batch = [docs]
        else:
            return docs

        groups = self.group(paths)
        jobs = [self._resolve(ctx, batch, rule, child) for rule, child in groups]
        if jobs:
            await asyncio.gather(*jobs)
        return docs

    async def _resolve(
        self,
        ctx: IActionCaller,
        docs: list[Any],
        rule: PopulationRule,
        child_paths: list[str],
    ) -> None:
        ids = collect_ids(docs, rule.field)

        if isinstance(rule, HandlerRule):
            logger.debug("Populating %r with handler (%d ids)", rule.key, len(ids))
            result = rule.handler(ids, docs, rule, ctx)
            if inspect.isawaitable(result):
                await result
            return

        if not ids:
            return
        params: dict[str, Any] = {"id": ids, "mapping": True}
        populate = child_paths or rule.populate
        if populate:
            params["populate"] = list(populate)
        params.update(rule.params)

        logger.debug("Populating %r via %s (%d ids)", rule.key, rule.action, len(ids))
        resolved = await ctx.call(rule.action, params)
        self._splice(docs, rule, resolved or {})

    @staticmethod
    def _splice(docs: list[Any], rule: ActionRule, resolved: Mapping[Any, Any]) -> None:
        for doc in docs:
            value = get_path(doc, rule.field)
            if isinstance(value, list | tuple):
                flat: list[Any] = []
                _flatten(value, flat)
                models = [_lookup(resolved, entity_id) for entity_id in flat]
                found = [m for m in models if m is not MISSING and m is not None]
                set_path(doc, rule.key, found)
            elif value is MISSING or value is None:
                set_path(doc, rule.key, None)
            else:
                model = _lookup(resolved, value)
                set_path(doc, rule.key, None if model is MISSING else model)
