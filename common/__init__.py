"""
Common utilities and constants for the Shrdlite project.

This package provides the centralized vocabulary, default values and fixed
messages used throughout the interpreter and planner.
"""

from common.constants import *

__all__ = [
    # World Vocabulary
    "FLOOR",
    "FLOOR_FORM",
    "FLOOR_SIZE",
    "SIZE_SMALL",
    "SIZE_LARGE",
    "ANY_FORM",
    "ANAPHORIC_FORM",
    "BALL_FORM",
    "BOX_FORM",
    # Arm Actions
    "ACTION_LEFT",
    "ACTION_RIGHT",
    "ACTION_PICK",
    "ACTION_DROP",
    "ACTION_COST",
    # Quantifiers
    "QUANTIFIER_THE",
    "QUANTIFIER_ALL",
    "EXISTENTIAL_QUANTIFIERS",
    "COUNTING_QUANTIFIERS",
    # Search Defaults
    "DEFAULT_SEARCH_TIMEOUT",
    "HEURISTIC_MAX",
    "HEURISTIC_SUM",
    "DEFAULT_HEURISTIC_STRATEGY",
    # Heuristic Costs
    "BLOCKER_RELOCATION_COST",
    # Interpreter Defaults
    "DEFAULT_MAX_GOAL_COMBINATIONS",
    # Cache Configuration
    "CACHE_HEURISTIC_MAXSIZE",
    "CACHE_HEURISTIC_TTL",
    "CACHE_RESOLUTION_MAXSIZE",
    "CACHE_RESOLUTION_TTL",
    # Messages
    "ALREADY_SATISFIED_MESSAGE",
]
