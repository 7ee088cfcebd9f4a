"""
tests/test_goal_formula.py

Unit tests for goal formula types (component_5_goal_formula).

Tests cover:
- Literal arity, self reference and negation
- Conjunction / DNFFormula construction and stringification
- Goal evaluation, repeated on an untouched state
"""

import pytest

from common.constants import FLOOR
from component_1_world_state import WorldState
from component_2_relations import RelationKind
from component_5_goal_formula import Conjunction, DNFFormula, Literal, stringify_formula
from shrdlite_exceptions import InvariantViolation


class TestLiteral:
    """Tests for Literal."""

    def test_wrong_arity(self):
        with pytest.raises(InvariantViolation):
            Literal(RelationKind.HOLDING, ("a", "b"))

    def test_self_reference(self):
        with pytest.raises(InvariantViolation):
            Literal(RelationKind.BESIDE, ("a", "a"))

    def test_negation(self, small_world):
        literal = Literal(RelationKind.ONTOP, ("m", "k"))
        assert literal.holds(small_world)
        assert not literal.negated().holds(small_world)
        assert str(literal.negated()) == "-ontop(m,k)"

    def test_hashable(self):
        assert len({Literal(RelationKind.HOLDING, ("a",)), Literal(RelationKind.HOLDING, ("a",))}) == 1


class TestFormula:
    """Tests for Conjunction and DNFFormula."""

    def test_stringify(self):
        formula = DNFFormula.of(
            [
                Conjunction.of([Literal(RelationKind.ONTOP, ("e", FLOOR)), Literal(RelationKind.INSIDE, ("f", "k"))]),
                Conjunction.of([Literal(RelationKind.HOLDING, ("a",))]),
            ]
        )
        assert stringify_formula(formula) == "ontop(e,floor) & inside(f,k) | holding(a)"

    def test_duplicates_dropped(self):
        literal = Literal(RelationKind.HOLDING, ("a",))
        conjunction = Conjunction.of([literal, literal])
        assert len(conjunction) == 1
        assert len(DNFFormula.of([conjunction, conjunction])) == 1

    def test_empty_rejected(self):
        with pytest.raises(InvariantViolation):
            Conjunction.of([])
        with pytest.raises(InvariantViolation):
            DNFFormula.of([])

    def test_goal_test(self, small_world):
        unsatisfied = Conjunction.of([Literal(RelationKind.HOLDING, ("e",))])
        satisfied = Conjunction.of([Literal(RelationKind.INSIDE, ("f", "m")), Literal(RelationKind.HOLDING, ("a",))])
        assert not DNFFormula.of([unsatisfied]).holds(small_world)
        assert DNFFormula.of([unsatisfied, satisfied]).holds(small_world)

    @pytest.mark.parametrize(
        "literal, expected",
        [
            (Literal(RelationKind.INSIDE, ("f", "m")), True),
            (Literal(RelationKind.LEFTOF, ("f", "e")), False),
        ],
    )
    def test_evaluation_leaves_state_alone(self, small_world, literal, expected):
        formula = DNFFormula.of([Conjunction.of([literal])])
        stacks = small_world.stacks
        snapshot = WorldState.from_dict(small_world.to_dict())

        first = formula.holds(small_world)
        second = formula.holds(small_world)

        assert first == second == expected
        assert small_world == snapshot
        assert small_world.stacks is stacks
