"""
Component 5: Goal Formula Types

Goals are formulas in disjunctive normal form over relation literals:
- Literal: [not] relation(a[, b])
- Conjunction: literals that must all hold
- DNFFormula: conjunctions of which one must hold

All three are frozen and hashable so they can key the heuristic cache.
Rendering follows the compact notation "ontop(a,b) & -leftof(c,d) | holding(e)".
"""

from dataclasses import dataclass
from typing import Iterable, Tuple

from component_1_world_state import WorldState
from component_2_relations import RelationKind
from shrdlite_exceptions import InvariantViolation


@dataclass(frozen=True)
class Literal:
    """One relation between objects (or an object and the floor), possibly negated."""

    relation: RelationKind
    args: Tuple[str, ...]
    polarity: bool = True

    def __post_init__(self):
        if len(self.args) != self.relation.arity:
            raise InvariantViolation(
                f"'{self.relation.value}' takes {self.relation.arity} argument(s), got {len(self.args)}",
                context={"args": self.args},
            )
        if len(set(self.args)) != len(self.args):
            raise InvariantViolation(
                f"Literal relates '{self.args[0]}' to itself", context={"relation": self.relation.value}
            )

    def holds(self, state: WorldState) -> bool:
        return self.relation.holds(state, *self.args) == self.polarity

    def negated(self) -> "Literal":
        return Literal(self.relation, self.args, not self.polarity)

    def __str__(self) -> str:
        return stringify_literal(self)


@dataclass(frozen=True)
class Conjunction:
    literals: Tuple[Literal, ...]

    def __post_init__(self):
        if not self.literals:
            raise InvariantViolation("A conjunction needs at least one literal")

    @classmethod
    def of(cls, literals: Iterable[Literal]) -> "Conjunction":
        """Build a conjunction, dropping duplicate literals but keeping order."""
        return cls(tuple(dict.fromkeys(literals)))

    def holds(self, state: WorldState) -> bool:
        return all(literal.holds(state) for literal in self.literals)

    def __iter__(self):
        return iter(self.literals)

    def __len__(self) -> int:
        return len(self.literals)

    def __str__(self) -> str:
        return " & ".join(stringify_literal(literal) for literal in self.literals)


@dataclass(frozen=True)
class DNFFormula:
    conjunctions: Tuple[Conjunction, ...]

    def __post_init__(self):
        if not self.conjunctions:
            raise InvariantViolation("A goal formula needs at least one conjunction")

    @classmethod
    def of(cls, conjunctions: Iterable[Conjunction]) -> "DNFFormula":
        return cls(tuple(dict.fromkeys(conjunctions)))

    def holds(self, state: WorldState) -> bool:
        """Goal test: some conjunction is fully satisfied."""
        return any(conjunction.holds(state) for conjunction in self.conjunctions)

    def __iter__(self):
        return iter(self.conjunctions)

    def __len__(self) -> int:
        return len(self.conjunctions)

    def __str__(self) -> str:
        return stringify_formula(self)


def stringify_literal(literal: Literal) -> str:
    return f"{'' if literal.polarity else '-'}{literal.relation.value}({','.join(literal.args)})"


def stringify_formula(formula: DNFFormula) -> str:
    return " | ".join(str(conjunction) for conjunction in formula.conjunctions)
