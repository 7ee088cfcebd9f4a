"""
Component 6: Goal Compiler

Turns resolved object ids, a relation and quantifiers into a DNFFormula whose
conjunctions are all physically possible.

Features:
- Physical law filtering of every (object, location) pair
- Quantifier semantics:
  * "the": exactly one object (AmbiguousCommand / AmbiguousLocation otherwise)
  * "a", "an", "any", "one", "some": one conjunction per legal choice
  * "all": every object at once; on the location side, every location at once
  * "two", "three": every subset of exactly that many objects
- Multi-object assignments enumerated by iterative backtracking with eager
  pruning of jointly infeasible partial assignments:
  * two objects directly on the same support, or one object on two supports
  * more objects on the floor than there are columns
  * cycles in the vertical (ontop/inside/above/under) or horizontal
    (leftof/rightof) ordering
- Enumeration capped by interpreter.max_goal_combinations

Usage:
    compiler = GoalCompiler()
    formula = compiler.compile_relation(
        ["e", "f"], "all", RelationKind.INSIDE, ["k", "l", "m"], "any", state
    )
"""

from collections import defaultdict
from itertools import combinations
from typing import Dict, List, Optional, Sequence, Set, Tuple, Union

from common.constants import (
    COUNTING_QUANTIFIERS,
    EXISTENTIAL_QUANTIFIERS,
    FLOOR,
    QUANTIFIER_ALL,
    QUANTIFIER_THE,
)
from component_1_world_state import WorldState
from component_13_logging_config import get_logger
from component_2_relations import RelationKind
from component_5_goal_formula import Conjunction, DNFFormula, Literal
from shrdlite_config import get_config
from shrdlite_exceptions import (
    AmbiguousCommand,
    AmbiguousLocation,
    MalformedParse,
    NoMatchingObject,
    PhysicallyImpossible,
)

logger = get_logger(__name__)

Option = Tuple[Literal, ...]
QuantifierKind = Union[str, int]

ANY = "any"


def quantifier_kind(quantifier: str) -> QuantifierKind:
    """
    Normalise a determiner.

    Returns:
        "the", "any", "all", or the subset size of a counting quantifier

    Raises:
        MalformedParse: Unknown determiner
    """
    if quantifier == QUANTIFIER_THE:
        return QUANTIFIER_THE
    if quantifier == QUANTIFIER_ALL:
        return QUANTIFIER_ALL
    if quantifier in EXISTENTIAL_QUANTIFIERS:
        return ANY
    if quantifier in COUNTING_QUANTIFIERS:
        return COUNTING_QUANTIFIERS[quantifier]
    raise MalformedParse(f"Unknown quantifier '{quantifier}'", context={"quantifier": quantifier})


def _unique(items: Sequence[str]) -> List[str]:
    return list(dict.fromkeys(items))


# ============================================================================
# Joint feasibility
# ============================================================================


def _has_cycle(edges: Dict[str, Set[str]]) -> bool:
    """Iterative three-color DFS over a small directed graph."""
    WHITE, GREY, BLACK = 0, 1, 2
    color: Dict[str, int] = defaultdict(int)
    for root in list(edges):
        if color[root] != WHITE:
            continue
        color[root] = GREY
        stack = [(root, iter(edges[root]))]
        while stack:
            node, children = stack[-1]
            child = next(children, None)
            if child is None:
                color[node] = BLACK
                stack.pop()
            elif color[child] == GREY:
                return True
            elif color[child] == WHITE:
                color[child] = GREY
                stack.append((child, iter(edges.get(child, ()))))
    return False


def jointly_feasible(literals: Sequence[Literal], column_count: int) -> bool:
    """
    Necessary conditions for positive literals to hold in one state.

    Returns False for assignments that no world state can satisfy.
    """
    support: Dict[str, str] = {}
    supported_by: Dict[str, str] = {}
    on_floor = 0
    higher: Dict[str, Set[str]] = defaultdict(set)
    further_left: Dict[str, Set[str]] = defaultdict(set)

    for literal in literals:
        if literal.relation.arity == 1:
            continue
        a, b = literal.args
        relation = literal.relation

        if relation.is_support:
            if support.setdefault(a, b) != b:
                return False
            if b == FLOOR:
                on_floor += 1
                if on_floor > column_count:
                    return False
            elif supported_by.setdefault(b, a) != a:
                return False

        if FLOOR in (a, b):
            continue
        if relation.is_support or relation is RelationKind.ABOVE:
            higher[a].add(b)
        elif relation is RelationKind.UNDER:
            higher[b].add(a)
        elif relation is RelationKind.LEFTOF:
            further_left[a].add(b)
        elif relation is RelationKind.RIGHTOF:
            further_left[b].add(a)

    return not (_has_cycle(higher) or _has_cycle(further_left))


# ============================================================================
# Goal Compiler
# ============================================================================


class GoalCompiler:
    """
    Compiles resolved commands into goal formulas.

    Attributes:
        max_combinations: Cap on conjunctions per multi-object goal
        stats: Counters of the last compilation (options, pruned, emitted)
    """

    def __init__(self, max_combinations: Optional[int] = None):
        self.max_combinations = (
            max_combinations
            if max_combinations is not None
            else get_config().interpreter.max_goal_combinations
        )
        self.stats = {"pairs_checked": 0, "pruned": 0, "emitted": 0, "capped": False}

    def _reset_stats(self) -> None:
        self.stats = {"pairs_checked": 0, "pruned": 0, "emitted": 0, "capped": False}

    # ------------------------------------------------------------------
    # holding
    # ------------------------------------------------------------------

    def compile_holding(self, objects: Sequence[str], quantifier: str, state: WorldState) -> DNFFormula:
        """
        Goal for "take": the arm holds one of the objects.

        Raises:
            PhysicallyImpossible: Nothing can be held, or several objects are required
            AmbiguousCommand: "the" with several legal objects
        """
        self._reset_stats()
        kind = quantifier_kind(quantifier)
        relation = RelationKind.HOLDING

        legal, explanations = [], []
        for obj in _unique(objects):
            self.stats["pairs_checked"] += 1
            verdict = relation.legal(obj, None, state)
            if verdict:
                legal.append(obj)
            else:
                explanations.append(verdict.explanation)

        if not legal:
            raise PhysicallyImpossible("Nothing matching can be held", explanations=explanations)

        if kind == QUANTIFIER_THE and len(legal) > 1:
            raise AmbiguousCommand(f"{len(legal)} objects match", candidates=legal)

        required = len(legal) if kind == QUANTIFIER_ALL else kind if isinstance(kind, int) else 1
        if kind == QUANTIFIER_ALL and len(legal) < len(_unique(objects)):
            raise PhysicallyImpossible("Not every matching object can be held", explanations=explanations)
        if required > 1:
            raise PhysicallyImpossible(
                f"Cannot hold {required} objects",
                explanations=["the arm can only hold one object at a time"],
            )

        formula = DNFFormula.of(Conjunction((Literal(relation, (obj,)),)) for obj in legal)
        self.stats["emitted"] = len(formula)
        return formula

    # ------------------------------------------------------------------
    # two-argument relations
    # ------------------------------------------------------------------

    def compile_relation(
        self,
        objects: Sequence[str],
        object_quantifier: str,
        relation: RelationKind,
        locations: Sequence[str],
        location_quantifier: str,
        state: WorldState,
    ) -> DNFFormula:
        """
        Goal for "move"/"put": objects in `relation` to locations.

        Raises:
            PhysicallyImpossible: No legal pairing / no jointly feasible assignment
            AmbiguousCommand: "the" object with several legal objects
            AmbiguousLocation: "the" location with several legal locations
            NoMatchingObject: Fewer objects than a counting quantifier asks for
        """
        self._reset_stats()
        object_kind = quantifier_kind(object_quantifier)
        location_kind = quantifier_kind(location_quantifier)
        objects = _unique(objects)
        locations = _unique(locations)

        legal_pairs: Dict[str, List[str]] = {}
        explanations: List[str] = []
        for obj in objects:
            for loc in locations:
                self.stats["pairs_checked"] += 1
                verdict = relation.legal(obj, loc, state)
                if verdict:
                    legal_pairs.setdefault(obj, []).append(loc)
                else:
                    explanations.append(verdict.explanation)

        if not legal_pairs:
            raise PhysicallyImpossible(
                f"No object can be {relation.value} any of the locations", explanations=explanations
            )

        legal_objects = list(legal_pairs)
        legal_locations = _unique([loc for locs in legal_pairs.values() for loc in locs])
        if object_kind == QUANTIFIER_THE and len(legal_objects) > 1:
            raise AmbiguousCommand(f"{len(legal_objects)} objects match", candidates=legal_objects)
        if location_kind == QUANTIFIER_THE and len(legal_locations) > 1:
            raise AmbiguousLocation(f"{len(legal_locations)} locations match", candidates=legal_locations)

        options = {
            obj: self._location_options(obj, relation, locations, legal_pairs.get(obj, []), location_kind)
            for obj in objects
        }

        if object_kind in (QUANTIFIER_THE, ANY):
            conjunctions = [Conjunction.of(option) for obj in legal_objects for option in options[obj]]
            conjunctions = [c for c in conjunctions if jointly_feasible(c.literals, state.column_count)]
        elif object_kind == QUANTIFIER_ALL:
            conjunctions = self._enumerate_assignments(objects, options, state)
        else:
            conjunctions = self._enumerate_subsets(objects, object_kind, options, state)

        if not conjunctions:
            raise PhysicallyImpossible(
                f"The objects cannot all be {relation.value} the locations at the same time",
                explanations=explanations or ["the required placements contradict each other"],
            )

        formula = DNFFormula.of(conjunctions)
        self.stats["emitted"] = len(formula)
        logger.debug(
            "Goal compiled",
            extra={"relation": relation.value, "conjunctions": len(formula), **self.stats},
        )
        return formula

    def _location_options(
        self,
        obj: str,
        relation: RelationKind,
        locations: List[str],
        legal_locations: List[str],
        location_kind: QuantifierKind,
    ) -> List[Option]:
        """The ways a single object can satisfy the location part of the command."""
        literals = [Literal(relation, (obj, loc)) for loc in legal_locations]
        if location_kind == QUANTIFIER_ALL:
            others = [loc for loc in locations if loc != obj]
            if not others or len(legal_locations) < len(others):
                return []
            return [tuple(literals)]
        if isinstance(location_kind, int):
            return [tuple(subset) for subset in combinations(literals, location_kind)]
        return [(literal,) for literal in literals]

    def _enumerate_subsets(
        self,
        objects: List[str],
        size: int,
        options: Dict[str, List[Option]],
        state: WorldState,
    ) -> List[Conjunction]:
        candidates = [obj for obj in objects if options[obj]]
        if len(candidates) < size:
            raise NoMatchingObject(
                f"Only {len(candidates)} matching object(s) can be placed, {size} requested",
                description=f"{size} matching objects",
            )

        results: List[Conjunction] = []
        for subset in combinations(candidates, size):
            remaining = self.max_combinations - len(results)
            results.extend(self._enumerate_assignments(list(subset), options, state, limit=remaining))
            if len(results) >= self.max_combinations:
                break
        return results

    def _enumerate_assignments(
        self,
        objects: List[str],
        options: Dict[str, List[Option]],
        state: WorldState,
        limit: Optional[int] = None,
    ) -> List[Conjunction]:
        """
        Iterative backtracking over one location option per object.

        The arena holds every option of every object; choice[i] indexes the
        arena slice of objects[i]. A partial assignment is extended only while
        it stays jointly feasible.
        """
        limit = self.max_combinations if limit is None else limit
        if not objects or any(not options[obj] for obj in objects):
            return []

        arena: List[Option] = []
        bounds: List[Tuple[int, int]] = []
        for obj in objects:
            bounds.append((len(arena), len(arena) + len(options[obj])))
            arena.extend(options[obj])

        results: List[Conjunction] = []
        chosen: List[Literal] = []
        sizes: List[int] = []
        choice = [start - 1 for start, _ in bounds]
        depth = 0

        while depth >= 0:
            start, end = bounds[depth]
            choice[depth] += 1
            if choice[depth] >= end:
                choice[depth] = start - 1
                depth -= 1
                if sizes:
                    del chosen[len(chosen) - sizes.pop():]
                continue

            option = arena[choice[depth]]
            if not jointly_feasible(chosen + list(option), state.column_count):
                self.stats["pruned"] += 1
                continue

            if depth == len(objects) - 1:
                results.append(Conjunction.of(chosen + list(option)))
                if len(results) >= limit:
                    self.stats["capped"] = True
                    logger.warning(
                        "Goal enumeration capped",
                        extra={"objects": len(objects), "limit": limit},
                    )
                    break
            else:
                chosen.extend(option)
                sizes.append(len(option))
                depth += 1

        return results
