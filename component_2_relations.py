"""
Component 2: Relation Model

The spatial relations of the blocks world and everything that depends only on
the relation kind:
- RelationKind: the relation vocabulary (ontop, inside, above, under, beside,
  leftof, rightof, holding)
- Physical laws: which (object, location) pairs may stand in a relation
- Evaluators: whether a relation holds in a given world state
- Distance estimators: admissible lower bounds on the number of arm actions
  needed to make a relation hold

Every RelationKind member must have all three behaviors; the tables are
checked when the module is imported.

Estimator vocabulary (all counts are arm actions):
- dist(x): columns between the arm and x
- blockers(x): objects stacked above x; clearing one takes pick, move away,
  drop, move back
- held: 1 when the arm holds an object unrelated to the literal (it must be
  dropped first)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional

from common.constants import BALL_FORM, BLOCKER_RELOCATION_COST, BOX_FORM, FLOOR, SIZE_LARGE, SIZE_SMALL
from component_1_world_state import ObjectDefinition, WorldState
from component_3_parse_tree import describe_object
from shrdlite_exceptions import InvariantViolation, UnknownRelation

# ============================================================================
# Relation Vocabulary
# ============================================================================


class RelationKind(Enum):
    """Spatial relations between objects (holding relates the arm to one object)."""

    ONTOP = "ontop"
    INSIDE = "inside"
    ABOVE = "above"
    UNDER = "under"
    BESIDE = "beside"
    LEFTOF = "leftof"
    RIGHTOF = "rightof"
    HOLDING = "holding"

    @classmethod
    def from_name(cls, name: str) -> "RelationKind":
        """
        Look up a relation by its parser name.

        Raises:
            UnknownRelation: If the name is not in the vocabulary
        """
        try:
            return cls(name)
        except ValueError:
            raise UnknownRelation(f"Unknown relation '{name}'", relation=name) from None

    @property
    def arity(self) -> int:
        return 1 if self is RelationKind.HOLDING else 2

    @property
    def is_support(self) -> bool:
        """True for relations that put the first argument directly on the second."""
        return self in (RelationKind.ONTOP, RelationKind.INSIDE)

    @property
    def accepts_floor(self) -> bool:
        """Whether the floor may be the second argument."""
        return self in (RelationKind.ONTOP, RelationKind.ABOVE)

    def legal(self, a: str, b: Optional[str], state: WorldState) -> "LegalityVerdict":
        return check_legality(self, a, b, state)

    def holds(self, state: WorldState, a: str, b: Optional[str] = None) -> bool:
        return _EVALUATORS[self](state, a, b)

    def estimate(self, state: WorldState, a: str, b: Optional[str] = None) -> int:
        """Lower bound on the actions needed to make the relation hold (0 if it holds)."""
        if self.holds(state, a, b):
            return 0
        return _ESTIMATORS[self](state, a, b)


# ============================================================================
# Physical Laws
# ============================================================================


@dataclass(frozen=True)
class LegalityVerdict:
    """Outcome of a physical law check; explanation is empty when valid."""

    valid: bool
    explanation: str = ""

    def __bool__(self) -> bool:
        return self.valid


_LEGAL = LegalityVerdict(True)


def _name(obj_id: str, definition: ObjectDefinition) -> str:
    return "the floor" if obj_id == FLOOR else f"the {describe_object(definition)}"


def _ontop_law(a: ObjectDefinition, b: ObjectDefinition) -> Optional[str]:
    if b.form == BOX_FORM:
        return "objects go inside boxes, not on top of them"
    if a.form == BALL_FORM and not b.is_floor:
        return "balls must be in boxes or on the floor"
    if b.form == BALL_FORM:
        return "balls cannot support anything"
    if a.size == SIZE_LARGE and b.size == SIZE_SMALL:
        return "small objects cannot support large objects"
    return None


def _inside_law(a: ObjectDefinition, b: ObjectDefinition) -> Optional[str]:
    if b.form != BOX_FORM:
        return "only boxes can contain objects"
    if a.size == SIZE_LARGE and b.size == SIZE_SMALL:
        return "large objects do not fit in small boxes"
    return None


def _under_law(a: ObjectDefinition, b: ObjectDefinition) -> Optional[str]:
    if a.form == BALL_FORM:
        return "balls cannot support anything"
    if a.size == SIZE_SMALL and b.size == SIZE_LARGE:
        return "small objects cannot support large objects"
    return None


def _above_law(a: ObjectDefinition, b: ObjectDefinition) -> Optional[str]:
    if a.size == SIZE_LARGE and b.size == SIZE_SMALL:
        return "small objects cannot support large objects"
    return None


def _no_law(a: ObjectDefinition, b: Optional[ObjectDefinition]) -> Optional[str]:
    return None


_LEGALITY_RULES: Dict[RelationKind, Callable[..., Optional[str]]] = {
    RelationKind.ONTOP: _ontop_law,
    RelationKind.INSIDE: _inside_law,
    RelationKind.ABOVE: _above_law,
    RelationKind.UNDER: _under_law,
    RelationKind.BESIDE: _no_law,
    RelationKind.LEFTOF: _no_law,
    RelationKind.RIGHTOF: _no_law,
    RelationKind.HOLDING: _no_law,
}


def check_legality(
    relation: RelationKind, a: str, b: Optional[str], state: WorldState
) -> LegalityVerdict:
    """
    Check whether `relation(a, b)` is physically possible.

    The floor may only be the second argument of ontop and above; an object
    is never related to itself.

    Returns:
        LegalityVerdict with an English explanation when invalid
    """
    def_a = state.definition(a)
    verb = "held" if relation is RelationKind.HOLDING else relation.value

    if a == FLOOR:
        return LegalityVerdict(False, f"the floor cannot be {verb}")
    if relation.arity == 1:
        return _LEGAL
    if b is None:
        raise InvariantViolation(f"Relation '{relation.value}' needs two arguments")
    if a == b:
        return LegalityVerdict(False, f"{_name(a, def_a)} cannot be {verb} itself")

    def_b = state.definition(b)
    if b == FLOOR and not relation.accepts_floor:
        return LegalityVerdict(False, f"nothing can be {verb} the floor")

    reason = _LEGALITY_RULES[relation](def_a, def_b)
    if reason is not None:
        return LegalityVerdict(False, f"{_name(a, def_a)} cannot be {verb} {_name(b, def_b)}: {reason}")
    return _LEGAL


# ============================================================================
# Evaluators
# ============================================================================


def _holds_ontop(state: WorldState, a: str, b: Optional[str]) -> bool:
    if b == FLOOR:
        return state.height_of(a) == 0
    return (
        state.is_placed(a)
        and state.column_of(a) == state.column_of(b)
        and state.height_of(a) == state.height_of(b) + 1
    )


def _holds_above(state: WorldState, a: str, b: Optional[str]) -> bool:
    if b == FLOOR:
        # held objects count as above the floor too
        return True
    return (
        state.is_placed(a)
        and state.column_of(a) == state.column_of(b)
        and state.height_of(a) > state.height_of(b)
    )


def _holds_under(state: WorldState, a: str, b: Optional[str]) -> bool:
    return _holds_above(state, b, a)


def _holds_beside(state: WorldState, a: str, b: Optional[str]) -> bool:
    if not (state.is_placed(a) and state.is_placed(b)):
        return False
    return abs(state.column_of(a) - state.column_of(b)) == 1


def _holds_leftof(state: WorldState, a: str, b: Optional[str]) -> bool:
    if not (state.is_placed(a) and state.is_placed(b)):
        return False
    return state.column_of(a) < state.column_of(b)


def _holds_rightof(state: WorldState, a: str, b: Optional[str]) -> bool:
    return _holds_leftof(state, b, a)


def _holds_holding(state: WorldState, a: str, b: Optional[str]) -> bool:
    return state.holding == a


_EVALUATORS: Dict[RelationKind, Callable[[WorldState, str, Optional[str]], bool]] = {
    RelationKind.ONTOP: _holds_ontop,
    RelationKind.INSIDE: _holds_ontop,
    RelationKind.ABOVE: _holds_above,
    RelationKind.UNDER: _holds_under,
    RelationKind.BESIDE: _holds_beside,
    RelationKind.LEFTOF: _holds_leftof,
    RelationKind.RIGHTOF: _holds_rightof,
    RelationKind.HOLDING: _holds_holding,
}


# ============================================================================
# Distance Estimators
# ============================================================================
# Called only for unsatisfied relations. Every branch is a lower bound on the
# remaining plan length.


def _dist(state: WorldState, column: int) -> int:
    return abs(state.arm - column)


def _clearing(state: WorldState, obj_id: str) -> int:
    """Travel to obj_id plus relocation of everything stacked on it."""
    return _dist(state, state.column_of(obj_id)) + BLOCKER_RELOCATION_COST * state.objects_above(obj_id)


def _held_other(state: WorldState, *related: str) -> int:
    return 1 if state.holding is not None and state.holding not in related else 0


def _estimate_holding(state: WorldState, a: str, b: Optional[str]) -> int:
    return _clearing(state, a) + 1 + _held_other(state, a)


def _estimate_ontop(state: WorldState, a: str, b: Optional[str]) -> int:
    if b == FLOOR:
        if state.holding == a:
            return 1
        # pick, move to another column, drop
        return _clearing(state, a) + 3 + _held_other(state, a)

    if state.holding == a:
        col_b = state.column_of(b)
        if state.is_clear(b):
            return _dist(state, col_b) + 1
        # drop a elsewhere, clear b, fetch a again
        return _dist(state, col_b) + BLOCKER_RELOCATION_COST * state.objects_above(b) + 3
    if state.holding == b:
        return _clearing(state, a) + 3

    held = _held_other(state, a, b)
    col_a, col_b = state.column_of(a), state.column_of(b)
    if col_a == col_b:
        if state.height_of(a) < state.height_of(b):
            # b is one of the blockers of a
            return _clearing(state, a) + 3 + held
        # everything above b, a included, has to leave the column
        return _dist(state, col_b) + BLOCKER_RELOCATION_COST * state.objects_above(b) + 2 + held

    travel = min(_dist(state, col_a), _dist(state, col_b)) + abs(col_a - col_b)
    # blockers in different columns may be relocated along the way: pick and drop only
    return travel + 2 * (state.objects_above(a) + state.objects_above(b)) + 2 + held


def _estimate_above(state: WorldState, a: str, b: Optional[str]) -> int:
    if state.holding == a:
        return _dist(state, state.column_of(b)) + 1
    if state.holding == b:
        return _clearing(state, a) + 3
    return _clearing(state, a) + 3 + _held_other(state, a, b)


def _estimate_under(state: WorldState, a: str, b: Optional[str]) -> int:
    return _estimate_above(state, b, a)


def _estimate_beside(state: WorldState, a: str, b: Optional[str]) -> int:
    for held, other in ((a, b), (b, a)):
        if state.holding == held:
            distance = _dist(state, state.column_of(other))
            return 2 if distance == 0 else distance
    cheapest = min(_clearing(state, a), _clearing(state, b))
    return cheapest + 3 + _held_other(state, a, b)


def _estimate_leftof(state: WorldState, a: str, b: Optional[str]) -> int:
    col_a, col_b = state.column_of(a), state.column_of(b)
    if state.holding == a:
        return 1 if state.arm < col_b else state.arm - col_b + 2
    if state.holding == b:
        return 1 if state.arm > col_a else col_a - state.arm + 2
    cheapest = min(_clearing(state, a), _clearing(state, b))
    return cheapest + 2 + (col_a - col_b + 1) + _held_other(state, a, b)


def _estimate_rightof(state: WorldState, a: str, b: Optional[str]) -> int:
    return _estimate_leftof(state, b, a)


_ESTIMATORS: Dict[RelationKind, Callable[[WorldState, str, Optional[str]], int]] = {
    RelationKind.ONTOP: _estimate_ontop,
    RelationKind.INSIDE: _estimate_ontop,
    RelationKind.ABOVE: _estimate_above,
    RelationKind.UNDER: _estimate_under,
    RelationKind.BESIDE: _estimate_beside,
    RelationKind.LEFTOF: _estimate_leftof,
    RelationKind.RIGHTOF: _estimate_rightof,
    RelationKind.HOLDING: _estimate_holding,
}


def _verify_relation_tables() -> None:
    for table_name, table in (
        ("legality rule", _LEGALITY_RULES),
        ("evaluator", _EVALUATORS),
        ("estimator", _ESTIMATORS),
    ):
        missing = [kind.value for kind in RelationKind if kind not in table]
        if missing:
            raise InvariantViolation(
                f"Relations without {table_name}: {', '.join(missing)}",
                context={"missing": missing},
            )


_verify_relation_tables()
