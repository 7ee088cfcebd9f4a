"""
Component 11: Interpreter

Top level of the Entity/Goal Interpreter: turns parse results into
interpretations.

- Commands ("move", "take", "put") become goal formulas
- Questions ("where is", "how many") become the resolved subject objects
- Every parse is interpreted independently; command interpretations win over
  question interpretations, and when no parse can be interpreted the first
  error is raised

Anaphora: the location of a command is resolved with the objects of the
command entity as previously seen ("put the red box on the blue one").
"""

from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple, Union

from common.constants import QUANTIFIER_THE
from component_1_world_state import WorldState
from component_13_logging_config import PerformanceLogger, get_logger
from component_2_relations import RelationKind
from component_3_parse_tree import Command, ParseResult, Question, describe_object, innermost_object
from component_4_entity_resolver import EntityResolver
from component_5_goal_formula import DNFFormula
from component_6_goal_compiler import GoalCompiler
from infrastructure.interfaces import evaluate_candidates, successes_or_first_error
from shrdlite_exceptions import AmbiguousCommand, MalformedParse, NoMatchingObject

logger = get_logger(__name__)


@dataclass
class Interpretation:
    """
    The meaning of one parse.

    Attributes:
        formula: Goal formula (commands only)
        parse: The parse this interpretation came from
        question: Question word (questions only)
        objects: Resolved subject ids (questions only)
    """

    formula: Optional[DNFFormula] = None
    parse: Optional[ParseResult] = None
    question: Optional[str] = None
    objects: Tuple[str, ...] = ()

    @property
    def is_question(self) -> bool:
        return self.question is not None

    def __str__(self) -> str:
        if self.is_question:
            return f"{self.question} {', '.join(self.objects) or '(nothing)'}"
        return str(self.formula)


class Interpreter:
    """
    Interprets parses against a world state.

    Usage:
        interpreter = Interpreter()
        interpretations = interpreter.interpret(parses, state)
    """

    def __init__(self, resolver: Optional[EntityResolver] = None, compiler: Optional[GoalCompiler] = None):
        self.resolver = resolver or EntityResolver()
        self.compiler = compiler or GoalCompiler()

    def interpret(
        self, parses: Sequence[Union[ParseResult, Any]], state: WorldState
    ) -> List[Interpretation]:
        """
        Interpret every parse.

        Args:
            parses: ParseResult objects or their plain-data form
            state: Current world state

        Returns:
            Command interpretations if any command parse succeeded, otherwise
            question interpretations

        Raises:
            The first recoverable error, when no parse could be interpreted
            MalformedParse: No parses at all, or malformed parse data
        """
        parses = [p if isinstance(p, ParseResult) else ParseResult.from_dict(p) for p in parses]
        if not parses:
            raise MalformedParse("Nothing to interpret")

        with PerformanceLogger(logger.logger, "interpretation", parses=len(parses)):
            outcomes = evaluate_candidates(
                parses, lambda parse: self.interpret_parse(parse, state), stage="interpretation"
            )

        commands = [o.value for o in outcomes if o.success and not o.value.is_question]
        if commands:
            return commands
        return successes_or_first_error(outcomes)

    def interpret_parse(self, parse: ParseResult, state: WorldState) -> Interpretation:
        if parse.is_command:
            formula = self.interpret_command(parse.parse, state)
            logger.info(f"Interpreted '{parse.input}' as {formula}")
            return Interpretation(formula=formula, parse=parse)
        question = parse.parse
        return Interpretation(
            parse=parse,
            question=question.question,
            objects=self.interpret_question(question, state),
        )

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def interpret_command(self, command: Command, state: WorldState) -> DNFFormula:
        """
        Compile a command into a goal formula.

        Raises:
            NoMatchingObject, AmbiguousCommand, AmbiguousLocation,
            PhysicallyImpossible: The command cannot be carried out as stated
        """
        if command.command == "take":
            resolution = self.resolver.resolve_entity(command.entity, state)
            return self.compiler.compile_holding(
                resolution.sorted_objects(), command.entity.quantifier, state
            )

        if command.command == "put":
            if state.holding is None:
                raise NoMatchingObject(
                    "'put' needs an object in the arm", description="anything held by the arm"
                )
            objects, quantifier, seen = [state.holding], QUANTIFIER_THE, {state.holding}
        else:
            resolution = self.resolver.resolve_entity(command.entity, state)
            objects, quantifier, seen = resolution.sorted_objects(), command.entity.quantifier, resolution.seen

        relation = RelationKind.from_name(command.location.relation)
        if relation.arity != 2:
            raise MalformedParse(f"'{relation.value}' cannot describe a location")

        locations = self.resolver.resolve_entity(command.location.entity, state, previously_seen=seen)
        return self.compiler.compile_relation(
            objects,
            quantifier,
            relation,
            locations.sorted_objects(),
            command.location.entity.quantifier,
            state,
        )

    # ------------------------------------------------------------------
    # Questions
    # ------------------------------------------------------------------

    def interpret_question(self, question: Question, state: WorldState) -> Tuple[str, ...]:
        """
        Resolve the subject of a question.

        "how many" counts, so an empty match is a valid answer; "where is"
        with "the" must single out one object.
        """
        try:
            resolution = self.resolver.resolve_object(question.subject, state)
        except NoMatchingObject:
            if question.question == "how many":
                return ()
            raise

        objects = tuple(resolution.sorted_objects())
        quantifier = question.entity.quantifier if question.entity is not None else None
        if question.question == "where is" and quantifier == QUANTIFIER_THE and len(objects) > 1:
            raise AmbiguousCommand(
                f"'the {describe_object(innermost_object(question.subject))}' matches {len(objects)} objects",
                candidates=list(objects),
            )
        return objects


def interpret(parses: Sequence[Union[ParseResult, Any]], state: WorldState) -> List[Interpretation]:
    """Module-level convenience wrapper around Interpreter.interpret."""
    return Interpreter().interpret(parses, state)
