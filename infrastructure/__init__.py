"""
infrastructure package

Shared infrastructure components for the Shrdlite interpreter and planner.

Modules:
    - interfaces: Per-candidate outcome type and aggregation helpers
    - cache_manager: Centralized cache management system
"""

from infrastructure.cache_manager import CacheManager, get_cache_manager
from infrastructure.interfaces import CandidateOutcome, collect_outcomes

__all__ = [
    "CandidateOutcome",
    "collect_outcomes",
    "CacheManager",
    "get_cache_manager",
]
