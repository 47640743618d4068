# Overview: Client synchronization layer (HTTP client, optimistic cache, stores).

from .api import ApiClient, ApiError, CatalogResource, Resource, RollResource
from .cache import OptimisticCache
from .stores import CatalogStore, EntityStore, RollStore

__all__ = [
    "ApiClient",
    "ApiError",
    "Resource",
    "RollResource",
    "CatalogResource",
    "OptimisticCache",
    "EntityStore",
    "RollStore",
    "CatalogStore",
]
