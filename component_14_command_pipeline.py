"""
Component 14: Command Pipeline

Ties the interpreter, planner and answerer together for one user utterance:

    parses -> interpretations -> plans (commands) | answers (questions)

Recoverable failures end up as a user-facing error_message; invariant
violations and configuration errors propagate.

Usage:
    from component_14_command_pipeline import process

    result = process(parses, state)
    if result.ok:
        print(result.plans[0].plan)
    else:
        print(result.error_message)
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from component_1_world_state import WorldState
from component_10_planner import Planner, PlanResult
from component_11_interpreter import Interpretation, Interpreter
from component_12_answerer import Answer, Answerer
from component_13_logging_config import (
    get_logger,
    log_component_end,
    log_component_error,
    log_component_start,
)
from component_3_parse_tree import ParseResult
from shrdlite_exceptions import (
    InterpretationException,
    InvariantViolation,
    PlanningException,
    get_user_friendly_message,
)

logger = get_logger(__name__)

KIND_COMMAND = "command"
KIND_QUESTION = "question"


@dataclass
class PipelineResult:
    """
    Outcome of processing one utterance.

    Attributes:
        kind: "command" or "question"
        interpretations: Interpretations that were planned for / answered
        plans: One PlanResult per plannable command interpretation
        answers: One Answer per question interpretation
        error_message: User-facing explanation when nothing could be done
    """

    kind: str
    interpretations: List[Interpretation] = field(default_factory=list)
    plans: List[PlanResult] = field(default_factory=list)
    answers: List[Answer] = field(default_factory=list)
    error_message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error_message is None


class CommandPipeline:
    """Runs interpretation followed by planning or answering."""

    def __init__(
        self,
        interpreter: Optional[Interpreter] = None,
        planner: Optional[Planner] = None,
        answerer: Optional[Answerer] = None,
    ):
        self.interpreter = interpreter or Interpreter()
        self.planner = planner or Planner()
        self.answerer = answerer or Answerer()

    def process(self, parses: Sequence[Any], state: WorldState) -> PipelineResult:
        parses = [p if isinstance(p, ParseResult) else ParseResult.from_dict(p) for p in parses]
        kind = KIND_COMMAND if any(p.is_command for p in parses) else KIND_QUESTION
        result = PipelineResult(kind=kind)
        log_component_start(logger, "CommandPipeline", parses=len(parses))

        try:
            result.interpretations = self.interpreter.interpret(parses, state)
            if result.interpretations and result.interpretations[0].is_question:
                result.kind = KIND_QUESTION
                result.answers = self.answerer.answer(result.interpretations, state)
            else:
                result.kind = KIND_COMMAND
                result.plans = self.planner.plan(result.interpretations, state)
        except (InterpretationException, PlanningException) as e:
            logger.info(f"Utterance failed: {type(e).__name__}", extra={"error": e.message})
            result.error_message = get_user_friendly_message(e)
        except InvariantViolation as e:
            log_component_error(logger, "CommandPipeline", e, parses=len(parses))
            raise

        log_component_end(logger, "CommandPipeline", kind=result.kind, ok=result.ok)
        return result


def process(parses: Sequence[Any], state: WorldState) -> PipelineResult:
    """Module-level convenience wrapper around CommandPipeline.process."""
    return CommandPipeline().process(parses, state)
