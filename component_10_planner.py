"""
Component 10: Planner

Finds arm action sequences that make a goal formula true.

Features:
- A* over the world transition graph with the configured heuristic
- Goal test: some conjunction of the formula holds
- Plans as action labels ("l", "r", "p", "d"); an already satisfied goal
  yields the already-satisfied message instead of an empty plan
- One plan per interpretation; failing interpretations are skipped unless
  every one fails, then the first error is raised

Usage:
    planner = Planner()
    results = planner.plan(interpretations, state)
    print(results[0].plan)   # ['p', 'r', 'd']
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from common.constants import ALREADY_SATISFIED_MESSAGE
from component_1_world_state import WorldState
from component_13_logging_config import get_logger
from component_5_goal_formula import DNFFormula
from component_7_search_engine import AStarSearch
from component_8_world_transitions import ShrdliteGraph, StateNode
from component_9_heuristics import Heuristic, create_heuristic
from component_11_interpreter import Interpretation
from infrastructure.interfaces import collect_outcomes
from shrdlite_config import get_config
from shrdlite_exceptions import NoPlanFound

logger = get_logger(__name__)


@dataclass
class PlanResult:
    """
    A plan for one interpretation.

    Attributes:
        interpretation: The interpretation that was planned for
        plan: Action labels, or [ALREADY_SATISFIED_MESSAGE]
        cost: Number of actions
        stats: Search statistics
    """

    interpretation: Interpretation
    plan: List[str]
    cost: float = 0.0
    stats: Dict[str, Any] = field(default_factory=dict)

    @property
    def actions(self) -> List[str]:
        """The plan without the already-satisfied message."""
        return [] if self.plan == [ALREADY_SATISFIED_MESSAGE] else list(self.plan)


class Planner:
    """
    A* planner for goal formulas.

    Attributes:
        heuristic: Heuristic used to guide the search
        timeout: Wall-clock limit per search in seconds
    """

    def __init__(self, heuristic: Optional[Heuristic] = None, timeout: Optional[float] = None):
        config = get_config()
        self.heuristic = heuristic or create_heuristic()
        self.timeout = timeout if timeout is not None else config.search.timeout_seconds
        self.graph = ShrdliteGraph()

    def plan_formula(self, formula: DNFFormula, state: WorldState) -> PlanResult:
        """
        Plan for a single formula.

        Raises:
            SearchTimeout: The search ran out of time
            NoPlanFound: No reachable state satisfies the formula
        """
        return self._plan(Interpretation(formula=formula), state)

    def _plan(self, interpretation: Interpretation, state: WorldState) -> PlanResult:
        formula = interpretation.formula
        engine = AStarSearch(
            self.graph,
            goal=lambda node: formula.holds(node.state),
            heuristic=lambda node: self.heuristic.estimate(node.state, formula),
            timeout=self.timeout,
        )

        result = engine.search(StateNode(state))
        if result is None:
            raise NoPlanFound(f"No sequence of actions achieves {formula}", context={"goal": str(formula)})

        actions = [node.action for node in result.path[1:]]
        logger.info(
            f"Plan for {formula}: {' '.join(actions) or '(none)'}",
            extra={"cost": result.cost, "expansions": engine.stats["expansions"]},
        )
        return PlanResult(
            interpretation=interpretation,
            plan=actions or [ALREADY_SATISFIED_MESSAGE],
            cost=result.cost,
            stats=dict(engine.stats),
        )

    def plan(self, interpretations: List[Interpretation], state: WorldState) -> List[PlanResult]:
        """
        Plan for every interpretation.

        Returns:
            One PlanResult per interpretation that could be planned

        Raises:
            The first planning error, when no interpretation could be planned
        """
        return collect_outcomes(
            interpretations, lambda interpretation: self._plan(interpretation, state), stage="planning"
        )


def plan(interpretations: List[Interpretation], state: WorldState) -> List[PlanResult]:
    """Module-level convenience wrapper around Planner.plan."""
    return Planner().plan(interpretations, state)
