"""
tests/test_relations.py

Unit tests for the relation model (component_2_relations).

Tests cover:
- Relation vocabulary lookup and arity
- Physical laws, including floor restrictions and self reference
- Evaluators on the small example world
- Distance estimators: zero when satisfied, exact on simple cases
"""

import pytest

from common.constants import FLOOR
from component_2_relations import RelationKind, _verify_relation_tables, check_legality
from shrdlite_exceptions import InvariantViolation, UnknownRelation

# ==================== Vocabulary ====================


class TestRelationKind:
    """Tests for RelationKind."""

    def test_from_name(self):
        assert RelationKind.from_name("leftof") is RelationKind.LEFTOF

    def test_unknown_name(self):
        with pytest.raises(UnknownRelation) as exc_info:
            RelationKind.from_name("near")
        assert exc_info.value.context["relation"] == "near"

    def test_arity(self):
        assert RelationKind.HOLDING.arity == 1
        assert all(kind.arity == 2 for kind in RelationKind if kind is not RelationKind.HOLDING)

    def test_floor_accepted_only_by_ontop_and_above(self):
        accepting = {kind for kind in RelationKind if kind.accepts_floor}
        assert accepting == {RelationKind.ONTOP, RelationKind.ABOVE}

    def test_tables_complete(self):
        _verify_relation_tables()


# ==================== Physical Laws ====================


class TestLegality:
    """Tests for check_legality."""

    @pytest.mark.parametrize(
        "relation, a, b",
        [
            ("inside", "f", "k"),  # small ball in large box
            ("inside", "e", "l"),  # large ball in large box
            ("ontop", "e", FLOOR),
            ("ontop", "l", "g"),  # box on table
            ("above", "f", FLOOR),
            ("above", "m", "g"),
            ("under", "g", "m"),
            ("beside", "e", "f"),
            ("leftof", "a", "k"),
            ("holding", "k", None),
        ],
    )
    def test_legal(self, small_world, relation, a, b):
        assert check_legality(RelationKind(relation), a, b, small_world).valid

    @pytest.mark.parametrize(
        "relation, a, b, reason",
        [
            ("ontop", "e", "g", "balls must be in boxes"),
            ("ontop", "a", "m", "inside boxes"),
            ("ontop", "g", "f", "balls cannot support"),
            ("inside", "e", "m", "do not fit"),
            ("inside", "f", "g", "only boxes"),
            ("under", "e", "g", "balls cannot support"),
            ("under", "m", "g", "small objects cannot support"),
            ("above", "a", "m", "small objects cannot support"),
        ],
    )
    def test_illegal(self, small_world, relation, a, b, reason):
        verdict = check_legality(RelationKind(relation), a, b, small_world)
        assert not verdict
        assert reason in verdict.explanation

    def test_explanation_names_both_objects(self, small_world):
        verdict = check_legality(RelationKind.INSIDE, "e", "m", small_world)
        assert verdict.explanation.startswith("the large white ball cannot be inside the small blue box")

    @pytest.mark.parametrize("relation", ["inside", "under", "beside", "leftof", "rightof"])
    def test_floor_rejected_as_location(self, small_world, relation):
        assert not check_legality(RelationKind(relation), "e", FLOOR, small_world)

    def test_floor_cannot_be_moved(self, small_world):
        assert not check_legality(RelationKind.ONTOP, FLOOR, "g", small_world)
        assert not check_legality(RelationKind.HOLDING, FLOOR, None, small_world)

    def test_object_never_related_to_itself(self, small_world):
        verdict = check_legality(RelationKind.BESIDE, "k", "k", small_world)
        assert not verdict
        assert "itself" in verdict.explanation

    def test_binary_relation_needs_second_argument(self, small_world):
        with pytest.raises(InvariantViolation):
            check_legality(RelationKind.ONTOP, "e", None, small_world)


# ==================== Evaluators ====================


class TestEvaluators:
    """Relation facts of the small example world."""

    @pytest.mark.parametrize(
        "relation, a, b, expected",
        [
            ("ontop", "m", "k", True),
            ("ontop", "k", "m", False),
            ("inside", "f", "m", True),
            ("beside", "l", "e", True),
            ("beside", "l", "k", False),
            ("above", "f", "k", True),
            ("under", "k", "f", True),
            ("under", "f", "k", False),
            ("leftof", "e", "k", True),
            ("rightof", "k", "e", True),
            ("rightof", "e", "k", False),
            ("ontop", "e", FLOOR, True),
            ("ontop", "l", FLOOR, False),
            ("above", "l", FLOOR, True),
        ],
    )
    def test_facts(self, small_world, relation, a, b, expected):
        assert RelationKind(relation).holds(small_world, a, b) is expected

    def test_holding(self, small_world):
        assert RelationKind.HOLDING.holds(small_world, "a")
        assert not RelationKind.HOLDING.holds(small_world, "e")

    @pytest.mark.parametrize("relation", ["ontop", "beside", "leftof", "rightof"])
    def test_held_object_has_no_position(self, small_world, relation):
        other = FLOOR if relation == "ontop" else "e"
        assert not RelationKind(relation).holds(small_world, "a", other)

    def test_everything_is_above_the_floor(self, small_world):
        # a is held, f is placed
        assert RelationKind.ABOVE.holds(small_world, "a", FLOOR)
        assert RelationKind.ABOVE.holds(small_world, "f", FLOOR)
        assert RelationKind.ABOVE.estimate(small_world, "a", FLOOR) == 0
        assert not RelationKind.ABOVE.holds(small_world, "a", "e")

    def test_leftof_rightof_symmetry(self, small_world):
        placed = [obj_id for obj_id, _, _ in small_world.iter_placed()]
        for a in placed:
            for b in placed:
                if a == b:
                    continue
                assert RelationKind.LEFTOF.holds(small_world, a, b) == RelationKind.RIGHTOF.holds(
                    small_world, b, a
                )
                assert RelationKind.ABOVE.holds(small_world, a, b) == RelationKind.UNDER.holds(
                    small_world, b, a
                )


# ==================== Estimators ====================


class TestEstimators:
    """Tests for the distance estimators."""

    def test_zero_when_satisfied(self, small_world):
        assert RelationKind.ONTOP.estimate(small_world, "m", "k") == 0
        assert RelationKind.HOLDING.estimate(small_world, "a") == 0

    def test_holding_counts_travel_drop_and_pick(self, small_world):
        # arm at 0 holding a: drop it, travel three columns, pick f
        assert RelationKind.HOLDING.estimate(small_world, "f") == 5

    def test_pick_move_drop(self, test_world):
        assert RelationKind.ONTOP.estimate(test_world, "a", "b") == 3

    def test_held_object_drop(self, test_world):
        held = test_world.with_top_picked()
        assert RelationKind.ONTOP.estimate(held, "a", "b") == 2
        assert RelationKind.ABOVE.estimate(held, "a", "b") == 2

    def test_estimates_are_positive_when_unsatisfied(self, small_world):
        for relation in (RelationKind.ONTOP, RelationKind.ABOVE, RelationKind.BESIDE, RelationKind.LEFTOF):
            for a, b in (("e", "k"), ("k", "e"), ("f", "l")):
                if not relation.holds(small_world, a, b):
                    assert relation.estimate(small_world, a, b) > 0
