"""
Centralized constants for the Shrdlite blocks-world interpreter and planner.

This module provides a single source of truth for the vocabulary, magic numbers
and fixed messages used throughout the codebase. Values that operators may want
to tune at runtime (search timeout, heuristic strategy, cache sizes) live in
shrdlite_config.py instead; the defaults there are taken from here.

Organization:
    - World Vocabulary: Floor sentinel, sizes, wildcard forms
    - Arm Actions: Primitive action labels and their cost
    - Quantifiers: Determiners understood by the interpreter
    - Search Defaults: Timeout and heuristic strategy
    - Heuristic Costs: Action counts used by the distance estimators
    - Cache Configuration: Defaults for the named caches
    - Messages: Fixed user-facing strings

Usage:
    from common.constants import FLOOR, ALREADY_SATISFIED_MESSAGE
"""

from typing import FrozenSet

# =============================================================================
# World Vocabulary
# =============================================================================

FLOOR: str = "floor"
"""
Identifier of the floor pseudo-object.

The floor never appears in WorldState.stacks or WorldState.objects. It is
produced by the entity resolver for descriptions whose form is "floor" and may
only be used as the second argument of "ontop" and "above" literals.
"""

FLOOR_FORM: str = "floor"
FLOOR_SIZE: str = "large"
"""
Descriptive attributes of the floor pseudo-object.

The floor is modeled as a large object so that the size rules of the physical
law checker treat it as able to support anything.
"""

SIZE_SMALL: str = "small"
SIZE_LARGE: str = "large"

ANY_FORM: str = "anyform"
"""Form value produced by the parser for "object"/"thing"; matches any form."""

ANAPHORIC_FORM: str = "one"
"""Form value of anaphoric references ("the red one")."""

BALL_FORM: str = "ball"
BOX_FORM: str = "box"

# =============================================================================
# Arm Actions
# =============================================================================

ACTION_LEFT: str = "l"
ACTION_RIGHT: str = "r"
ACTION_PICK: str = "p"
ACTION_DROP: str = "d"

ACTION_COST: int = 1
"""
Cost of every primitive arm action.

All four actions cost the same, so the cost of a plan is its length.
"""

# =============================================================================
# Quantifiers
# =============================================================================

QUANTIFIER_THE: str = "the"
QUANTIFIER_ALL: str = "all"

EXISTENTIAL_QUANTIFIERS: FrozenSet[str] = frozenset({"a", "an", "any", "one", "some"})
"""Determiners for which any single matching object satisfies the command."""

COUNTING_QUANTIFIERS = {"two": 2, "three": 3}
"""Determiners that select a fixed-size subset of the matching objects."""

# =============================================================================
# Search Defaults
# =============================================================================

DEFAULT_SEARCH_TIMEOUT: float = 10.0
"""
Wall-clock limit for one A* search, in seconds.

Checked once per iteration of the search loop; exceeding it raises
SearchTimeout. There is no other cancellation mechanism.
"""

HEURISTIC_MAX: str = "max"
HEURISTIC_SUM: str = "sum"

DEFAULT_HEURISTIC_STRATEGY: str = HEURISTIC_MAX
"""
How per-literal estimates are combined inside one conjunction.

- "max": admissible (each estimator is a lower bound, so their maximum is too)
- "sum": better informed but may overestimate when literals share work
"""

# =============================================================================
# Heuristic Costs
# =============================================================================

BLOCKER_RELOCATION_COST: int = 4
"""
Minimum number of actions needed to clear one object stacked above a target.

Pick it up, move at least one column away, drop it, move back. The object can
neither be dropped in its own column (it would land on top again) nor be
carried together with another one, so 4 is a lower bound per blocker.
"""

# =============================================================================
# Interpreter Defaults
# =============================================================================

DEFAULT_MAX_GOAL_COMBINATIONS: int = 2000
"""
Upper bound on the number of conjunctions produced for one multi-object goal.

Quantifiers such as "all" and "three" enumerate assignments of objects to
locations; the number of assignments grows as |locations| ** |objects|.
Enumeration stops (with a warning) once this many feasible assignments exist.
"""

# =============================================================================
# Cache Configuration
# =============================================================================

CACHE_HEURISTIC_MAXSIZE: int = 50000
CACHE_HEURISTIC_TTL: int = 300
"""
Heuristic memoisation cache (5 minutes).

Keys are (formula, state) pairs; a single search may touch tens of thousands
of states, so the cache is sized generously.
"""

CACHE_RESOLUTION_MAXSIZE: int = 1000
CACHE_RESOLUTION_TTL: int = 300
"""Entity resolution cache, keyed by (description, state)."""

# =============================================================================
# Messages
# =============================================================================

ALREADY_SATISFIED_MESSAGE: str = "That is already true!"
"""
Plan entry returned instead of an empty action list.

Produced when the start state already satisfies the goal formula.
"""
