"""datakit-service - document pipeline, population and the collection service."""

from __future__ import annotations

from .context import Context, LocalBroker
from .listing import Paginator
from .population import PopulationResolver, collect_ids
from .projection import exclude_fields, filter_fields
from .service import ACTIONS, DataAccessService
from .transformer import DocumentTransformer, identity

__all__ = [
    "ACTIONS",
    "Context",
    "DataAccessService",
    "DocumentTransformer",
    "LocalBroker",
    "Paginator",
    "PopulationResolver",
    "collect_ids",
    "exclude_fields",
    "filter_fields",
    "identity",
]
