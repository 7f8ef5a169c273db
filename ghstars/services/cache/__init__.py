"""Star cache and its persistence port."""

from ghstars.services.cache.persistence import JsonFilePersistence, PersistencePort
from ghstars.services.cache.store import CacheEntry, StarCache, current_time_ms

__all__ = [
    "CacheEntry",
    "JsonFilePersistence",
    "PersistencePort",
    "StarCache",
    "current_time_ms",
]
