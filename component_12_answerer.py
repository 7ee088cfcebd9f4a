"""
Component 12: Answerer

Answers question interpretations in English:
- "where is": support (arm, floor, box, object) and horizontal placement
  relative to the nearest occupied column
- "how many": number of matching objects, zero included
"""

from dataclasses import dataclass
from typing import List, Optional

from common.constants import BOX_FORM, FLOOR
from component_1_world_state import WorldState
from component_11_interpreter import Interpretation
from component_13_logging_config import get_logger
from component_3_parse_tree import describe_object, innermost_object
from shrdlite_exceptions import InvariantViolation

logger = get_logger(__name__)


@dataclass
class Answer:
    interpretation: Interpretation
    answer: str


def pluralize(description: str) -> str:
    if description.endswith(("s", "x")):
        return description + "es"
    return description + "s"


class Answerer:
    """Builds answers for question interpretations."""

    def answer(self, interpretations: List[Interpretation], state: WorldState) -> List[Answer]:
        """
        Answer every question interpretation.

        Raises:
            InvariantViolation: A command interpretation was passed in
        """
        answers = []
        for interpretation in interpretations:
            if not interpretation.is_question:
                raise InvariantViolation("Only questions can be answered", context={"formula": str(interpretation)})
            if interpretation.question == "where is":
                text = self.answer_where_is(interpretation, state)
            else:
                text = self.answer_how_many(interpretation, state)
            logger.info(f"Answer: {text}")
            answers.append(Answer(interpretation=interpretation, answer=text))
        return answers

    # ------------------------------------------------------------------
    # where is
    # ------------------------------------------------------------------

    def answer_where_is(self, interpretation: Interpretation, state: WorldState) -> str:
        subject = self._subject_description(interpretation)
        if len(interpretation.objects) == 1:
            return self.locate(interpretation.objects[0], subject, state)
        # several objects for "a"/"any": name each by its own attributes
        return ". ".join(
            self.locate(obj_id, describe_object(state.definition(obj_id)), state)
            for obj_id in interpretation.objects
        )

    def locate(self, obj_id: str, name: str, state: WorldState) -> str:
        if obj_id == FLOOR:
            return "The floor is under everything"
        if state.holding == obj_id:
            return f"The {name} is held by the arm"

        sentence = f"The {name} is " + self._support_phrase(obj_id, state)
        horizontal = self._horizontal_phrase(state.column_of(obj_id), state)
        return f"{sentence} {horizontal}" if horizontal else sentence

    def _support_phrase(self, obj_id: str, state: WorldState) -> str:
        below = state.below(obj_id)
        if below is None:
            return "on the floor"
        definition = state.definition(below)
        preposition = "in" if definition.form == BOX_FORM else "on top of"
        return f"{preposition} the {describe_object(definition)}"

    def _horizontal_phrase(self, column: int, state: WorldState) -> Optional[str]:
        if column == 0:
            return "furthest to the left"
        if column == state.column_count - 1:
            return "furthest to the right"

        left = next((c for c in range(column - 1, -1, -1) if state.stacks[c]), None)
        right = next((c for c in range(column + 1, state.column_count) if state.stacks[c]), None)
        if left is None and right is None:
            return None
        if right is None or (left is not None and column - left <= right - column):
            return f"right of the {describe_object(state.definition(state.stacks[left][0]))}"
        return f"left of the {describe_object(state.definition(state.stacks[right][0]))}"

    # ------------------------------------------------------------------
    # how many
    # ------------------------------------------------------------------

    def answer_how_many(self, interpretation: Interpretation, state: WorldState) -> str:
        description = self._subject_description(interpretation)
        count = len(interpretation.objects)
        if count == 1:
            return f"There is 1 {description}"
        return f"There are {count} {pluralize(description)}"

    def _subject_description(self, interpretation: Interpretation) -> str:
        question = interpretation.parse.parse
        return describe_object(innermost_object(question.subject))


def answer(interpretations: List[Interpretation], state: WorldState) -> List[Answer]:
    """Module-level convenience wrapper around Answerer.answer."""
    return Answerer().answer(interpretations, state)
