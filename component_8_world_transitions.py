"""
Component 8: World Transition Model

The arm as a search graph over world states:
- StateNode: a world state plus the action that produced it
- ShrdliteGraph: successor edges for the four arm actions, each of cost 1
- apply_action / apply_actions: replay action labels, rejecting illegal steps

Actions:
- "l" / "r": move the arm one column left / right
- "p": pick up the top object of the arm column (hand must be empty)
- "d": drop the held object on the arm column, if the physical laws allow it
  (inside when the column top is a box, on top otherwise, the floor if empty)
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from common.constants import (
    ACTION_COST,
    ACTION_DROP,
    ACTION_LEFT,
    ACTION_PICK,
    ACTION_RIGHT,
    BOX_FORM,
    FLOOR,
)
from component_1_world_state import WorldState
from component_13_logging_config import get_logger
from component_2_relations import RelationKind
from component_7_search_engine import Edge, Graph
from shrdlite_exceptions import PlanExecutionError

logger = get_logger(__name__)

ACTIONS = (ACTION_LEFT, ACTION_RIGHT, ACTION_PICK, ACTION_DROP)


@dataclass(frozen=True)
class StateNode:
    """Search node; two nodes are equal when their world states are."""

    state: WorldState
    action: Optional[str] = field(default=None, compare=False)


def drop_relation(state: WorldState) -> RelationKind:
    """Relation the held object would have to the top of the arm column."""
    top = state.top_of(state.arm)
    if top is not None and state.definition(top).form == BOX_FORM:
        return RelationKind.INSIDE
    return RelationKind.ONTOP


def can_drop(state: WorldState) -> bool:
    if state.holding is None:
        return False
    target = state.top_of(state.arm) or FLOOR
    return drop_relation(state).legal(state.holding, target, state).valid


def successor(state: WorldState, action: str) -> Optional[WorldState]:
    """The state after `action`, or None when the action is not applicable."""
    if action == ACTION_LEFT:
        return state.with_arm(state.arm - 1) if state.arm > 0 else None
    if action == ACTION_RIGHT:
        return state.with_arm(state.arm + 1) if state.arm < state.column_count - 1 else None
    if action == ACTION_PICK:
        if state.holding is None and state.stacks[state.arm]:
            return state.with_top_picked()
        return None
    if action == ACTION_DROP:
        return state.with_held_dropped() if can_drop(state) else None
    raise PlanExecutionError(f"Unknown action '{action}'", action=action)


class ShrdliteGraph(Graph[StateNode]):
    """Implicit graph of world states reachable by arm actions."""

    def outgoing_edges(self, node: StateNode) -> List[Edge[StateNode]]:
        edges = []
        for action in ACTIONS:
            next_state = successor(node.state, action)
            if next_state is not None:
                edges.append(Edge(node, StateNode(next_state, action), ACTION_COST))
        return edges


def apply_action(state: WorldState, action: str, step_index: Optional[int] = None) -> WorldState:
    """
    Perform one action.

    Raises:
        PlanExecutionError: Unknown or inapplicable action
    """
    next_state = successor(state, action)
    if next_state is None:
        raise PlanExecutionError(
            f"Action '{action}' is not possible with the arm at column {state.arm}",
            step_index=step_index,
            action=action,
        )
    return next_state


def apply_actions(state: WorldState, actions: Sequence[str]) -> WorldState:
    """Replay an action sequence and return the final state."""
    for index, action in enumerate(actions):
        state = apply_action(state, action, step_index=index)
    logger.debug("Replayed actions", extra={"steps": len(actions), "arm": state.arm})
    return state
