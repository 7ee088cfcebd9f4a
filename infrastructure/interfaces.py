"""
infrastructure/interfaces.py

Per-candidate outcome type shared by the interpreter, planner and answerer.

Every stage of the pipeline works on a list of candidates (parses,
interpretations) and must not let one failing candidate hide the others.
Each candidate is processed into a CandidateOutcome; successes are returned,
and only when every candidate failed is the first recoverable error re-raised.

Usage:
    from infrastructure.interfaces import collect_outcomes

    interpretations = collect_outcomes(
        parses, lambda parse: compile_parse(parse, state), stage="interpretation"
    )
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, Iterable, List, Optional, Tuple, Type, TypeVar

from component_13_logging_config import get_logger
from shrdlite_exceptions import (
    InterpretationException,
    PlanningException,
    ShrdliteException,
)

logger = get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")

RECOVERABLE_ERRORS: Tuple[Type[ShrdliteException], ...] = (
    InterpretationException,
    PlanningException,
)


@dataclass
class CandidateOutcome(Generic[R]):
    """
    Result of processing one candidate.

    Attributes:
        success: Whether processing produced a value
        value: The produced value (None on failure)
        error: The recoverable error raised for this candidate (None on success)
        metadata: Stage-specific information (e.g. candidate index)
    """

    success: bool
    value: Optional[R] = None
    error: Optional[ShrdliteException] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.success and self.error is not None:
            raise ValueError("A successful outcome cannot carry an error")
        if not self.success and self.error is None:
            raise ValueError("A failed outcome must carry an error")


def evaluate_candidates(
    candidates: Iterable[T],
    process: Callable[[T], R],
    stage: str = "candidate",
) -> List[CandidateOutcome[R]]:
    """
    Process every candidate, capturing recoverable errors as failed outcomes.

    Invariant violations and any other exception propagate unchanged.
    """
    outcomes: List[CandidateOutcome[R]] = []
    for index, candidate in enumerate(candidates):
        try:
            value = process(candidate)
        except RECOVERABLE_ERRORS as e:
            logger.debug(
                f"{stage} #{index} failed: {type(e).__name__}",
                extra={"error": e.message},
            )
            outcomes.append(CandidateOutcome(success=False, error=e, metadata={"index": index}))
        else:
            outcomes.append(CandidateOutcome(success=True, value=value, metadata={"index": index}))
    return outcomes


def successes_or_first_error(outcomes: List[CandidateOutcome[R]]) -> List[R]:
    """
    Return the values of all successful outcomes.

    Raises:
        The error of the first failed outcome, when no outcome succeeded
    """
    values = [outcome.value for outcome in outcomes if outcome.success]
    if values or not outcomes:
        return values
    raise outcomes[0].error


def collect_outcomes(
    candidates: Iterable[T],
    process: Callable[[T], R],
    stage: str = "candidate",
) -> List[R]:
    """evaluate_candidates followed by successes_or_first_error."""
    return successes_or_first_error(evaluate_candidates(candidates, process, stage))
