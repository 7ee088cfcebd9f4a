"""
tests/test_infrastructure.py

Unit tests for the infrastructure package.

Tests cover:
- CacheManager: registration, get/set, statistics, invalidation, reset
- Named Shrdlite caches built from the configuration
- Candidate outcomes: recoverable errors collected, invariant violations propagated
"""

import pytest

from infrastructure.cache_manager import (
    HEURISTIC_CACHE,
    RESOLUTION_CACHE,
    CacheManager,
    get_cache_manager,
    get_shrdlite_caches,
    reset_cache_manager,
)
from infrastructure.interfaces import (
    CandidateOutcome,
    collect_outcomes,
    evaluate_candidates,
    successes_or_first_error,
)
from shrdlite_config import ShrdliteConfig, set_config
from shrdlite_exceptions import InvariantViolation, NoMatchingObject, NoPlanFound

# ==================== Cache Manager ====================


class TestCacheManager:
    """Tests for CacheManager."""

    def test_singleton(self):
        assert CacheManager() is CacheManager()
        assert get_cache_manager() is get_cache_manager()

    def test_register_and_use(self):
        cache_mgr = get_cache_manager()
        cache_mgr.register_cache("demo", maxsize=10, ttl=60)
        assert cache_mgr.get("demo", "k") is None
        cache_mgr.set("demo", "k", 42)
        assert cache_mgr.get("demo", "k") == 42

        stats = cache_mgr.get_stats("demo")
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["hit_rate"] == 0.5
        assert stats["size"] == 1

    def test_duplicate_registration(self):
        cache_mgr = get_cache_manager()
        cache_mgr.register_cache("demo", maxsize=10, ttl=60)
        with pytest.raises(ValueError):
            cache_mgr.register_cache("demo", maxsize=10, ttl=60)
        cache_mgr.register_cache("demo", maxsize=20, ttl=60, overwrite=True)
        assert cache_mgr.get_stats("demo")["maxsize"] == 20

    def test_invalid_policy(self):
        with pytest.raises(ValueError):
            get_cache_manager().register_cache("demo", maxsize=0, ttl=60)

    def test_unregistered_cache(self):
        with pytest.raises(ValueError):
            get_cache_manager().get("nowhere", "k")

    def test_invalidate(self):
        cache_mgr = get_cache_manager()
        cache_mgr.register_cache("demo", maxsize=10, ttl=60)
        cache_mgr.set("demo", "a", 1)
        cache_mgr.set("demo", "b", 2)
        assert cache_mgr.invalidate("demo", "a") == 1
        assert cache_mgr.invalidate("demo", "a") == 0
        assert cache_mgr.invalidate("demo") == 1
        assert cache_mgr.get_stats("demo")["invalidations"] == 2

    def test_global_stats(self):
        cache_mgr = get_cache_manager()
        cache_mgr.register_cache("one", maxsize=10, ttl=60)
        cache_mgr.register_cache("two", maxsize=10, ttl=60)
        cache_mgr.set("one", "k", 1)
        cache_mgr.get("one", "k")
        cache_mgr.get("two", "k")
        stats = cache_mgr.get_global_stats()
        assert stats["total_caches"] == 2
        assert stats["total_entries"] == 1
        assert stats["global_hit_rate"] == 0.5

    def test_reset_statistics_keeps_data(self):
        cache_mgr = get_cache_manager()
        cache_mgr.register_cache("demo", maxsize=10, ttl=60)
        cache_mgr.set("demo", "k", 1)
        cache_mgr.get("demo", "k")
        cache_mgr.reset_statistics("demo")
        assert cache_mgr.get_stats("demo")["hits"] == 0
        assert cache_mgr.get("demo", "k") == 1

    def test_reset_cache_manager(self):
        first = get_cache_manager()
        first.register_cache("demo", maxsize=10, ttl=60)
        reset_cache_manager()
        second = get_cache_manager()
        assert second is not first
        assert second.list_caches() == []

    def test_shrdlite_caches_from_config(self):
        config = ShrdliteConfig()
        config.cache.resolution_maxsize = 12
        set_config(config)
        cache_mgr = get_shrdlite_caches()
        assert cache_mgr.list_caches() == [RESOLUTION_CACHE, HEURISTIC_CACHE]
        assert cache_mgr.get_stats(RESOLUTION_CACHE)["maxsize"] == 12


# ==================== Candidate Outcomes ====================


def lookup(name: str) -> str:
    if name == "missing":
        raise NoMatchingObject("not there", description=name)
    if name == "broken":
        raise InvariantViolation("broken input")
    return name.upper()


class TestCandidateOutcomes:
    """Tests for infrastructure.interfaces."""

    def test_outcomes_per_candidate(self):
        outcomes = evaluate_candidates(["a", "missing", "b"], lookup)
        assert [o.success for o in outcomes] == [True, False, True]
        assert isinstance(outcomes[1].error, NoMatchingObject)
        assert outcomes[1].metadata == {"index": 1}

    def test_successes_returned(self):
        assert collect_outcomes(["missing", "a"], lookup) == ["A"]

    def test_first_error_raised(self):
        outcomes = [
            CandidateOutcome(success=False, error=NoPlanFound("first")),
            CandidateOutcome(success=False, error=NoPlanFound("second")),
        ]
        with pytest.raises(NoPlanFound, match="first"):
            successes_or_first_error(outcomes)

    def test_no_candidates(self):
        assert collect_outcomes([], lookup) == []

    def test_invariant_violation_propagates(self):
        with pytest.raises(InvariantViolation):
            evaluate_candidates(["a", "broken"], lookup)

    def test_inconsistent_outcome(self):
        with pytest.raises(ValueError):
            CandidateOutcome(success=True, error=NoPlanFound("x"))
        with pytest.raises(ValueError):
            CandidateOutcome(success=False)
