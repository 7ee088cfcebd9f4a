"""
Component 9: Planning Heuristics

Heuristic functions estimating the number of arm actions left to reach a goal
formula:
- MaxLiteralHeuristic: min over conjunctions of the largest literal estimate
  (admissible, the planner default)
- SumLiteralHeuristic: min over conjunctions of the summed literal estimates
  (better informed, may overestimate when literals share work)
- ZeroHeuristic: uniform-cost search, used as the optimality baseline
- CachedHeuristic: memoises another heuristic in the cache manager

Per-literal estimates come from the relation's distance estimator; an
unsatisfied negative literal costs one action.
"""

from typing import Callable, Iterable, Optional

from common.constants import HEURISTIC_MAX, HEURISTIC_SUM
from component_1_world_state import WorldState
from component_13_logging_config import get_logger
from component_5_goal_formula import DNFFormula, Literal
from infrastructure.cache_manager import HEURISTIC_CACHE, get_shrdlite_caches
from shrdlite_config import get_config
from shrdlite_exceptions import InvalidConfigError

logger = get_logger(__name__)


def literal_estimate(literal: Literal, state: WorldState) -> int:
    """Lower bound on the actions needed to make one literal hold."""
    if literal.holds(state):
        return 0
    if not literal.polarity:
        return 1
    return literal.relation.estimate(state, *literal.args)


# ============================================================================
# Heuristics
# ============================================================================


class Heuristic:
    """Base class for planning heuristics."""

    name = "base"
    admissible = False

    def estimate(self, state: WorldState, goal: DNFFormula) -> float:
        """Estimate cost from state to goal."""
        raise NotImplementedError


class ZeroHeuristic(Heuristic):
    """Always 0: turns A* into uniform-cost search."""

    name = "zero"
    admissible = True

    def estimate(self, state: WorldState, goal: DNFFormula) -> float:
        return 0.0


class ConjunctionHeuristic(Heuristic):
    """Minimum over conjunctions of a combination of literal estimates."""

    combine: Callable[[Iterable[int]], int] = max

    def estimate(self, state: WorldState, goal: DNFFormula) -> float:
        return float(
            min(
                type(self).combine(literal_estimate(literal, state) for literal in conjunction)
                for conjunction in goal
            )
        )


class MaxLiteralHeuristic(ConjunctionHeuristic):
    """
    Largest literal estimate per conjunction.

    Every literal estimate is a lower bound on the plan length, so their
    maximum is one as well; the minimum over conjunctions keeps that property
    for the whole formula.
    """

    name = HEURISTIC_MAX
    admissible = True
    combine = max


class SumLiteralHeuristic(ConjunctionHeuristic):
    """Summed literal estimates per conjunction (not admissible)."""

    name = HEURISTIC_SUM
    admissible = False
    combine = sum


class CachedHeuristic(Heuristic):
    """Memoises another heuristic keyed by (strategy, goal, state)."""

    def __init__(self, inner: Heuristic):
        self.inner = inner
        self.name = inner.name
        self.admissible = inner.admissible
        self.cache_mgr = get_shrdlite_caches()

    def estimate(self, state: WorldState, goal: DNFFormula) -> float:
        key = (self.inner.name, goal, state)
        value = self.cache_mgr.get(HEURISTIC_CACHE, key)
        if value is None:
            value = self.inner.estimate(state, goal)
            self.cache_mgr.set(HEURISTIC_CACHE, key, value)
        return value


_STRATEGIES = {
    HEURISTIC_MAX: MaxLiteralHeuristic,
    HEURISTIC_SUM: SumLiteralHeuristic,
}


def create_heuristic(strategy: Optional[str] = None, use_cache: bool = True) -> Heuristic:
    """
    Build the configured heuristic.

    Args:
        strategy: "max" or "sum" (default: search.heuristic from the config)
        use_cache: Wrap the heuristic in a CachedHeuristic

    Raises:
        InvalidConfigError: Unknown strategy
    """
    strategy = strategy or get_config().search.heuristic
    if strategy not in _STRATEGIES:
        raise InvalidConfigError(f"Unknown heuristic strategy '{strategy}'", context={"strategy": strategy})
    heuristic = _STRATEGIES[strategy]()
    if not heuristic.admissible:
        logger.info(f"Heuristic '{strategy}' is not admissible; plans may be longer than optimal")
    return CachedHeuristic(heuristic) if use_cache else heuristic
