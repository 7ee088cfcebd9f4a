"""
Component 3: Parse Tree Types

Frozen dataclasses for the output of the (external) natural-language parser:
- ParseResult: input string plus one Command or Question utterance
- Command: move / take / put with an entity and an optional destination
- Question: "where is" / "how many" about an entity
- Entity, Location, ObjectDescription: quantified, possibly recursive descriptions

Parse trees arrive as JSON-shaped data; the from_dict constructors turn them
into these types and raise MalformedParse on anything they do not recognise.
The describe_* helpers render descriptions back into English for answers and
error messages.
"""

from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Union

from common.constants import ANY_FORM
from shrdlite_exceptions import MalformedParse

COMMAND_VERBS = ("move", "take", "put")
QUESTION_WORDS = ("where is", "how many")


def _require_mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise MalformedParse(f"Expected a mapping for {what}", context={"data": data})
    return data


# ============================================================================
# Descriptions
# ============================================================================


@dataclass(frozen=True)
class ObjectDescription:
    """
    A description of an object.

    A simple description sets any of size/color/form (None is a wildcard).
    A complex description sets `object` and `location` instead: "the ball
    (object) inside the box (location)".
    """

    size: Optional[str] = None
    color: Optional[str] = None
    form: Optional[str] = None
    object: Optional["ObjectDescription"] = None
    location: Optional["Location"] = None

    @property
    def is_complex(self) -> bool:
        return self.location is not None

    @classmethod
    def from_dict(cls, data: Any) -> "ObjectDescription":
        data = _require_mapping(data, "object")
        if data.get("location") is not None:
            if data.get("object") is None:
                raise MalformedParse("Relative clause without an object", context={"data": dict(data)})
            return cls(
                object=cls.from_dict(data["object"]),
                location=Location.from_dict(data["location"]),
            )
        return cls(size=data.get("size"), color=data.get("color"), form=data.get("form"))


@dataclass(frozen=True)
class Entity:
    """A quantified reference: "the"/"a"/"any"/"all"/"two"/... plus a description."""

    quantifier: str
    object: ObjectDescription

    @classmethod
    def from_dict(cls, data: Any) -> "Entity":
        data = _require_mapping(data, "entity")
        if "quantifier" not in data or "object" not in data:
            raise MalformedParse("Entity needs a quantifier and an object", context={"data": dict(data)})
        return cls(quantifier=data["quantifier"], object=ObjectDescription.from_dict(data["object"]))


@dataclass(frozen=True)
class Location:
    """A preposition ("inside", "leftof", ...) relative to an entity."""

    relation: str
    entity: Entity

    @classmethod
    def from_dict(cls, data: Any) -> "Location":
        data = _require_mapping(data, "location")
        if "relation" not in data or "entity" not in data:
            raise MalformedParse("Location needs a relation and an entity", context={"data": dict(data)})
        return cls(relation=data["relation"], entity=Entity.from_dict(data["entity"]))


# ============================================================================
# Utterances
# ============================================================================


@dataclass(frozen=True)
class Command:
    """
    A command for the arm.

    move: entity + location; take: entity; put: location (the held object).
    """

    command: str
    entity: Optional[Entity] = None
    location: Optional[Location] = None

    def __post_init__(self):
        if self.command not in COMMAND_VERBS:
            raise MalformedParse(f"Unknown command '{self.command}'", context={"command": self.command})
        if self.command in ("move", "take") and self.entity is None:
            raise MalformedParse(f"'{self.command}' needs an entity")
        if self.command in ("move", "put") and self.location is None:
            raise MalformedParse(f"'{self.command}' needs a location")

    @classmethod
    def from_dict(cls, data: Any) -> "Command":
        data = _require_mapping(data, "command")
        return cls(
            command=data.get("command"),
            entity=Entity.from_dict(data["entity"]) if data.get("entity") is not None else None,
            location=Location.from_dict(data["location"]) if data.get("location") is not None else None,
        )


@dataclass(frozen=True)
class Question:
    """A question about the world. "how many" may carry a bare object instead of an entity."""

    question: str
    entity: Optional[Entity] = None
    object: Optional[ObjectDescription] = None

    def __post_init__(self):
        if self.question not in QUESTION_WORDS:
            raise MalformedParse(f"Unknown question '{self.question}'", context={"question": self.question})
        if self.entity is None and self.object is None:
            raise MalformedParse(f"'{self.question}' needs an entity")

    @property
    def subject(self) -> ObjectDescription:
        """The description the question is about."""
        return self.entity.object if self.entity is not None else self.object

    @classmethod
    def from_dict(cls, data: Any) -> "Question":
        data = _require_mapping(data, "question")
        return cls(
            question=data.get("question"),
            entity=Entity.from_dict(data["entity"]) if data.get("entity") is not None else None,
            object=ObjectDescription.from_dict(data["object"]) if data.get("object") is not None else None,
        )


Utterance = Union[Command, Question]


@dataclass(frozen=True)
class ParseResult:
    """One parse of the user's input."""

    input: str
    parse: Utterance

    @property
    def is_command(self) -> bool:
        return isinstance(self.parse, Command)

    @property
    def is_question(self) -> bool:
        return isinstance(self.parse, Question)

    @classmethod
    def from_dict(cls, data: Any) -> "ParseResult":
        """
        Accepts {"input", "parse": {"type": "command"|"question", "command"|"question": {...}}}
        as well as the untyped form where "parse" is the command mapping itself.
        """
        data = _require_mapping(data, "parse result")
        parse = _require_mapping(data.get("parse"), "parse")
        kind = parse.get("type")
        if kind is None:
            kind = "question" if "question" in parse else "command" if "command" in parse else None
        if kind not in ("command", "question"):
            raise MalformedParse("Parse is neither a command nor a question", context={"type": kind})

        # Typed form nests the utterance under its kind, untyped form is the utterance
        body = parse.get(kind)
        if not isinstance(body, Mapping):
            body = parse
        utterance = Question.from_dict(body) if kind == "question" else Command.from_dict(body)
        return cls(input=data.get("input", ""), parse=utterance)


def parse_result_from_dict(data: Any) -> ParseResult:
    return ParseResult.from_dict(data)


def parse_results_from_list(data: List[Any]) -> List[ParseResult]:
    return [ParseResult.from_dict(item) for item in data]


# ============================================================================
# Rendering
# ============================================================================


def describe_object(obj: Any) -> str:
    """
    Describe a simple description or a world object: "[size ][color ]form".

    Works on anything with size/color/form attributes. "anyform" (and a
    missing form) is rendered as "object".
    """
    parts = []
    if obj.size is not None:
        parts.append(obj.size)
    if obj.color is not None:
        parts.append(obj.color)
    parts.append(obj.form if obj.form not in (None, ANY_FORM) else "object")
    return " ".join(parts)


def describe_complex_object(obj: ObjectDescription) -> str:
    """Unfold relative clauses: "(ball that is inside (box that is ontop floor))"."""
    if not obj.is_complex:
        return describe_object(obj)
    return (
        f"({describe_complex_object(obj.object)} that is {obj.location.relation} "
        f"{describe_complex_object(obj.location.entity.object)})"
    )


def describe_entity(entity: Entity) -> str:
    return f"{entity.quantifier} {describe_complex_object(entity.object)}"


def innermost_object(obj: ObjectDescription) -> ObjectDescription:
    """The simple description at the core of a chain of relative clauses."""
    while obj.object is not None:
        obj = obj.object
    return obj
