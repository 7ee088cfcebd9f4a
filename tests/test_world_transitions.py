"""
tests/test_world_transitions.py

Unit tests for the arm transition model (component_8_world_transitions).

Tests cover:
- Applicability of the four arm actions
- Drop legality (boxes, balls, size rules)
- Successor edges of the search graph
- Replaying action sequences
"""

import pytest

from component_2_relations import RelationKind
from component_8_world_transitions import (
    ShrdliteGraph,
    StateNode,
    apply_action,
    apply_actions,
    can_drop,
    drop_relation,
    successor,
)
from shrdlite_exceptions import PlanExecutionError

# ==================== Actions ====================


class TestSuccessor:
    """Tests for single actions."""

    def test_left_at_first_column(self, test_world):
        assert successor(test_world, "l") is None

    def test_right_at_last_column(self, test_world):
        assert successor(test_world.with_arm(2), "r") is None

    def test_pick_empty_column(self, test_world):
        assert successor(test_world.with_arm(2), "p") is None

    def test_pick_with_full_hand(self, small_world):
        assert successor(small_world, "p") is None

    def test_drop_with_empty_hand(self, test_world):
        assert successor(test_world, "d") is None

    def test_unknown_action(self, test_world):
        with pytest.raises(PlanExecutionError):
            successor(test_world, "x")

    def test_nothing_lands_on_a_ball(self, small_world):
        # arm over the white ball, holding the green brick
        assert not can_drop(small_world)

    def test_drop_into_box(self, small_world):
        over_box = small_world.with_arm(1)
        assert drop_relation(over_box) is RelationKind.INSIDE
        assert can_drop(over_box)

    def test_pick_and_drop_back(self, small_world):
        state = apply_actions(small_world, ["r", "d", "r", "r", "p"])
        assert state.holding == "f"
        dropped = successor(state, "d")
        assert dropped.stacks[3] == ("k", "m", "f")

    def test_drop_on_floor(self, small_world):
        state = successor(small_world.with_arm(2), "d")
        assert state.stacks[2] == ("a",)
        assert state.holding is None


# ==================== Graph ====================


class TestShrdliteGraph:
    """Tests for ShrdliteGraph.outgoing_edges."""

    def test_edges_at_start(self, test_world):
        edges = ShrdliteGraph().outgoing_edges(StateNode(test_world))
        assert [edge.to_node.action for edge in edges] == ["r", "p"]
        assert all(edge.cost == 1 for edge in edges)

    def test_nodes_compare_by_state(self, test_world):
        assert StateNode(test_world, "l") == StateNode(test_world, "r")


# ==================== Replay ====================


class TestApplyActions:
    """Tests for apply_action / apply_actions."""

    def test_replay(self, test_world):
        state = apply_actions(test_world, ["p", "r", "d"])
        assert state.stacks[1] == ("b", "a")
        assert state.arm == 1

    def test_illegal_step_reports_index(self, test_world):
        with pytest.raises(PlanExecutionError) as exc_info:
            apply_actions(test_world, ["p", "p"])
        assert exc_info.value.context["step_index"] == 1
        assert exc_info.value.context["action"] == "p"

    def test_drop_on_ball_rejected(self, small_world):
        with pytest.raises(PlanExecutionError):
            # the green brick cannot go on the black ball
            apply_action(apply_actions(small_world, ["r", "r", "r"]), "d")
