"""
infrastructure/cache_manager.py

Centralized cache management for the Shrdlite interpreter and planner.

Features:
- Singleton CacheManager for process-wide cache coordination
- Named caches with configurable policies (maxsize, TTL)
- Thread-safe operations with RLock protection
- Statistics tracking (hits, misses, hit rate)
- Cache invalidation (per-key or entire cache)

Named caches used by the core:
- "heuristic_estimates": (formula, world state) -> heuristic value
- "entity_resolution":  (description, quantifier, world state) -> resolution

Usage:
    from infrastructure.cache_manager import get_cache_manager

    cache_mgr = get_cache_manager()
    cache_mgr.ensure_cache("heuristic_estimates", maxsize=50000, ttl=300)

    cache_mgr.set("heuristic_estimates", key, 3)
    value = cache_mgr.get("heuristic_estimates", key)  # None on miss

    stats = cache_mgr.get_stats("heuristic_estimates")
    print(f"Hit rate: {stats['hit_rate']:.2%}")
"""

import threading
from cachetools import TTLCache
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Hashable, List, Optional

from component_13_logging_config import get_logger

logger = get_logger(__name__)

HEURISTIC_CACHE: str = "heuristic_estimates"
RESOLUTION_CACHE: str = "entity_resolution"


# ============================================================================
# Data Structures
# ============================================================================


@dataclass
class CacheStatistics:
    """Statistics for a single cache."""

    cache_name: str
    hits: int = 0
    misses: int = 0
    sets: int = 0
    invalidations: int = 0
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def total_requests(self) -> int:
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        """Cache hit rate (0.0-1.0)."""
        if self.total_requests == 0:
            return 0.0
        return self.hits / self.total_requests


@dataclass
class CachePolicy:
    """Configuration policy for a cache."""

    maxsize: int
    ttl: int  # seconds


# ============================================================================
# Cache Manager (Singleton)
# ============================================================================


class CacheManager:
    """
    Centralized cache management system.

    Each named cache is a separate TTLCache with its own policy and statistics.
    All operations are protected by one RLock.

    Attributes:
        caches: cache_name -> TTLCache
        policies: cache_name -> CachePolicy
        statistics: cache_name -> CacheStatistics
    """

    _instance: Optional["CacheManager"] = None
    _lock = threading.RLock()

    def __new__(cls) -> "CacheManager":
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self.caches: Dict[str, TTLCache] = {}
        self.policies: Dict[str, CachePolicy] = {}
        self.statistics: Dict[str, CacheStatistics] = {}
        self._cache_lock = threading.RLock()
        self._initialized = True

        logger.debug("CacheManager initialized (singleton)")

    def register_cache(self, name: str, maxsize: int, ttl: int, overwrite: bool = False) -> None:
        """
        Register a named cache with the given policy.

        Args:
            name: Unique cache identifier
            maxsize: Maximum number of entries
            ttl: Time-to-live in seconds
            overwrite: Replace an existing cache instead of failing

        Raises:
            ValueError: If the cache exists and overwrite=False, or on
                non-positive maxsize/ttl
        """
        if maxsize <= 0:
            raise ValueError(f"maxsize must be positive, got {maxsize}")
        if ttl <= 0:
            raise ValueError(f"ttl must be positive, got {ttl}")

        with self._cache_lock:
            existed = name in self.caches
            if existed and not overwrite:
                raise ValueError(
                    f"Cache '{name}' already registered. Use overwrite=True to replace."
                )

            self.caches[name] = TTLCache(maxsize=maxsize, ttl=ttl)
            self.policies[name] = CachePolicy(maxsize=maxsize, ttl=ttl)
            self.statistics[name] = CacheStatistics(cache_name=name)

            logger.debug(
                "Cache %s: %s (maxsize=%d, ttl=%ds)",
                "replaced" if existed else "registered",
                name,
                maxsize,
                ttl,
            )

    def ensure_cache(self, name: str, maxsize: int, ttl: int) -> None:
        """Register the cache unless a cache of that name already exists."""
        with self._cache_lock:
            if name not in self.caches:
                self.register_cache(name, maxsize=maxsize, ttl=ttl)

    def _require(self, cache_name: str) -> TTLCache:
        if cache_name not in self.caches:
            raise ValueError(f"Cache '{cache_name}' not registered")
        return self.caches[cache_name]

    def get(self, cache_name: str, key: Hashable) -> Optional[Any]:
        """
        Get a value from a cache.

        Returns:
            Cached value if found and not expired, None otherwise

        Raises:
            ValueError: If the cache is not registered
        """
        with self._cache_lock:
            cache = self._require(cache_name)
            stats = self.statistics[cache_name]

            if key in cache:
                stats.hits += 1
                return cache[key]
            stats.misses += 1
            return None

    def set(self, cache_name: str, key: Hashable, value: Any) -> None:
        """Store a value; raises ValueError if the cache is not registered."""
        with self._cache_lock:
            cache = self._require(cache_name)
            cache[key] = value
            self.statistics[cache_name].sets += 1

    def invalidate(self, cache_name: str, key: Optional[Hashable] = None) -> int:
        """
        Invalidate cache entries.

        Args:
            cache_name: Name of the cache
            key: Specific key to invalidate, or None to clear the entire cache

        Returns:
            Number of entries invalidated
        """
        with self._cache_lock:
            cache = self._require(cache_name)
            stats = self.statistics[cache_name]

            if key is not None:
                if key in cache:
                    del cache[key]
                    stats.invalidations += 1
                    return 1
                return 0

            count = len(cache)
            cache.clear()
            stats.invalidations += count
            logger.info("Cache CLEARED: %s (%d entries)", cache_name, count)
            return count

    def get_stats(self, cache_name: Optional[str] = None) -> Dict[str, Any]:
        """
        Get cache statistics.

        Args:
            cache_name: Name of a specific cache, or None for all caches

        Returns:
            For a specific cache: hits, misses, sets, invalidations, hit_rate,
            size, maxsize, ttl, created_at. For all caches: cache_name -> stats.
        """
        with self._cache_lock:
            if cache_name is None:
                return {name: self.get_stats(name) for name in self.caches}

            cache = self._require(cache_name)
            policy = self.policies[cache_name]
            stats = self.statistics[cache_name]

            return {
                "cache_name": cache_name,
                "hits": stats.hits,
                "misses": stats.misses,
                "sets": stats.sets,
                "invalidations": stats.invalidations,
                "total_requests": stats.total_requests,
                "hit_rate": stats.hit_rate,
                "size": len(cache),
                "maxsize": policy.maxsize,
                "ttl": policy.ttl,
                "created_at": stats.created_at.isoformat(),
            }

    def list_caches(self) -> List[str]:
        with self._cache_lock:
            return sorted(self.caches.keys())

    def get_global_stats(self) -> Dict[str, Any]:
        """Aggregated statistics across all caches."""
        with self._cache_lock:
            total_entries = sum(len(cache) for cache in self.caches.values())
            total_hits = sum(stats.hits for stats in self.statistics.values())
            total_misses = sum(stats.misses for stats in self.statistics.values())
            total_requests = total_hits + total_misses

            return {
                "total_caches": len(self.caches),
                "total_entries": total_entries,
                "total_hits": total_hits,
                "total_misses": total_misses,
                "total_requests": total_requests,
                "global_hit_rate": total_hits / total_requests if total_requests > 0 else 0.0,
            }

    def reset_statistics(self, cache_name: Optional[str] = None) -> None:
        """Reset hit/miss statistics without clearing cached data."""
        with self._cache_lock:
            names = [cache_name] if cache_name is not None else list(self.caches)
            for name in names:
                self._require(name)
                self.statistics[name] = CacheStatistics(cache_name=name)


# ============================================================================
# Module-level Functions (Convenience API)
# ============================================================================

_cache_manager_instance: Optional[CacheManager] = None
_instance_lock = threading.RLock()


def get_cache_manager() -> CacheManager:
    """Get the global CacheManager singleton instance."""
    global _cache_manager_instance

    if _cache_manager_instance is None:
        with _instance_lock:
            if _cache_manager_instance is None:
                _cache_manager_instance = CacheManager()

    return _cache_manager_instance


def get_shrdlite_caches() -> CacheManager:
    """Return the cache manager with the heuristic and resolution caches registered."""
    from shrdlite_config import get_config

    cache_cfg = get_config().cache
    cache_mgr = get_cache_manager()
    cache_mgr.ensure_cache(
        HEURISTIC_CACHE, maxsize=cache_cfg.heuristic_maxsize, ttl=cache_cfg.heuristic_ttl
    )
    cache_mgr.ensure_cache(
        RESOLUTION_CACHE, maxsize=cache_cfg.resolution_maxsize, ttl=cache_cfg.resolution_ttl
    )
    return cache_mgr


def reset_cache_manager() -> None:
    """
    Reset the global CacheManager singleton.

    WARNING: Only use in tests. Clears all registered caches and statistics.
    """
    global _cache_manager_instance

    with _instance_lock:
        if _cache_manager_instance is not None:
            with _cache_manager_instance._cache_lock:
                _cache_manager_instance.caches.clear()
                _cache_manager_instance.policies.clear()
                _cache_manager_instance.statistics.clear()

            _cache_manager_instance = None
            CacheManager._instance = None
            logger.debug("CacheManager singleton reset")
