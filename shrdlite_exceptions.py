"""
shrdlite_exceptions.py

Central exception hierarchy for the Shrdlite interpreter and planner.
Defines specialised exception classes for every failure scenario.

Exception hierarchy:
    ShrdliteException (base)
    ├── InterpretationException          recoverable, per parse
    │   ├── NoMatchingObject
    │   ├── AmbiguousCommand
    │   ├── AmbiguousLocation
    │   └── PhysicallyImpossible
    ├── PlanningException                recoverable, per interpretation
    │   ├── SearchTimeout
    │   ├── NoPlanFound
    │   └── PlanExecutionError
    ├── InvariantViolation               fatal, never collected
    │   ├── UnknownRelation
    │   ├── InvalidWorldState
    │   └── MalformedParse
    └── ConfigurationException
        └── InvalidConfigError

Interpretation and planning exceptions describe things the user said or asked
for that cannot be done; the interpreter and planner collect them per
candidate and only surface the first one when every candidate failed.
Invariant violations describe malformed input or programming errors and always
propagate.

Usage:
    from shrdlite_exceptions import NoMatchingObject, get_user_friendly_message

    try:
        resolver.resolve(entity.obj, state)
    except NoMatchingObject as e:
        logger.info(f"Nothing matched: {e.context}")
"""

from typing import Any, Dict, List, Optional


class ShrdliteException(Exception):
    """
    Base exception for all Shrdlite-specific errors.

    All Shrdlite exceptions support:
    - A human-readable message
    - Contextual information (dict)
    - Original exception chaining
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception

    def __str__(self) -> str:
        base_msg = self.message

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"

        return base_msg

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, context={self.context!r})"


# ============================================================================
# INTERPRETATION EXCEPTIONS
# ============================================================================


class InterpretationException(ShrdliteException):
    """Base exception for failures to turn a parse into a goal."""


class NoMatchingObject(InterpretationException):
    """
    A description resolved to zero objects in the current world.

    Causes:
    - No object has the requested size/color/form
    - No object stands in the requested relation to the related entity
    - "put" while the arm holds nothing
    """

    def __init__(self, message: str, description: Optional[str] = None, **kwargs):
        context = kwargs.get("context", {})
        context["description"] = description
        kwargs["context"] = context
        super().__init__(message, **kwargs)


class AmbiguousCommand(InterpretationException):
    """
    A "the"-quantified object description matched more than one object.

    The candidate identifiers are kept so that a driver can ask back.
    """

    def __init__(self, message: str, candidates: Optional[List[str]] = None, **kwargs):
        context = kwargs.get("context", {})
        context["candidates"] = sorted(candidates or [])
        kwargs["context"] = context
        super().__init__(message, **kwargs)

    @property
    def candidates(self) -> List[str]:
        return self.context["candidates"]


class AmbiguousLocation(AmbiguousCommand):
    """A "the"-quantified location description matched more than one object."""


class PhysicallyImpossible(InterpretationException):
    """
    Every object/location pairing violates a physical law.

    Carries the explanation of each rejected pairing, in the order they were
    checked.
    """

    def __init__(self, message: str, explanations: Optional[List[str]] = None, **kwargs):
        context = kwargs.get("context", {})
        context["explanations"] = list(explanations or [])
        kwargs["context"] = context
        super().__init__(message, **kwargs)

    @property
    def explanations(self) -> List[str]:
        return self.context["explanations"]


# ============================================================================
# PLANNING EXCEPTIONS
# ============================================================================


class PlanningException(ShrdliteException):
    """Base exception for failures to find a plan for a goal formula."""


class SearchTimeout(PlanningException):
    """
    The A* search exceeded its wall-clock limit.

    Causes:
    - Very large worlds
    - Goals requiring long plans (many blockers to relocate)
    """

    def __init__(self, message: str, timeout: Optional[float] = None, **kwargs):
        context = kwargs.get("context", {})
        context["timeout"] = timeout
        kwargs["context"] = context
        super().__init__(message, **kwargs)


class NoPlanFound(PlanningException):
    """The search exhausted every reachable state without satisfying the goal."""


class PlanExecutionError(PlanningException):
    """
    Replaying an action sequence hit an illegal step.

    Causes:
    - Moving the arm past the first/last column
    - Picking from an empty column or with a full hand
    - Dropping onto an object that cannot support the held one
    """

    def __init__(
        self,
        message: str,
        step_index: Optional[int] = None,
        action: Optional[str] = None,
        **kwargs,
    ):
        context = kwargs.get("context", {})
        context["step_index"] = step_index
        context["action"] = action
        kwargs["context"] = context
        super().__init__(message, **kwargs)


# ============================================================================
# INVARIANT VIOLATIONS
# ============================================================================


class InvariantViolation(ShrdliteException):
    """Base exception for malformed input and broken internal invariants."""


class UnknownRelation(InvariantViolation):
    """A relation name outside the relation vocabulary was encountered."""

    def __init__(self, message: str, relation: Optional[str] = None, **kwargs):
        context = kwargs.get("context", {})
        context["relation"] = relation
        kwargs["context"] = context
        super().__init__(message, **kwargs)


class InvalidWorldState(InvariantViolation):
    """
    A world snapshot breaks the world invariants.

    Causes:
    - An object appears twice, or both in a stack and in the hand
    - An object in a stack has no definition
    - The arm is outside the columns
    """


class MalformedParse(InvariantViolation):
    """A parse tree is missing required fields or has unknown node types."""


# ============================================================================
# CONFIGURATION EXCEPTIONS
# ============================================================================


class ConfigurationException(ShrdliteException):
    """Base exception for configuration errors."""


class InvalidConfigError(ConfigurationException):
    """
    Invalid configuration value.

    Causes:
    - Unknown heuristic strategy
    - Non-positive timeout or cache size
    - Unreadable YAML file
    """


# ============================================================================
# UTILITY FUNCTIONS
# ============================================================================


def wrap_exception(
    exc: Exception, shrdlite_exception_class: type[ShrdliteException], message: str, **context
) -> ShrdliteException:
    """
    Convert a generic exception into a Shrdlite-specific exception.

    Args:
        exc: Original exception
        shrdlite_exception_class: Target exception class (e.g. InvalidConfigError)
        message: Custom error message
        **context: Additional context information

    Returns:
        Shrdlite exception chained to the original exception

    Example:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise wrap_exception(e, InvalidConfigError, "Unreadable config", path=str(path))
    """
    return shrdlite_exception_class(message=message, context=context, original_exception=exc)


def get_user_friendly_message(exc: Exception, include_details: bool = False) -> str:
    """
    Build a user-facing explanation from an exception.

    Args:
        exc: Exception object
        include_details: Whether to append technical details (debug mode)

    Returns:
        A short English sentence, never a stack trace

    Example:
        try:
            result = process(parses, state)
        except ShrdliteException as e:
            print(get_user_friendly_message(e))
    """
    friendly_messages = {
        NoMatchingObject: "I can't find anything like that in the world.",
        AmbiguousCommand: "That description fits more than one object. Please be more specific.",
        AmbiguousLocation: "That location fits more than one object. Please be more specific.",
        PhysicallyImpossible: "That is physically impossible.",
        SearchTimeout: "I could not find a plan in time.",
        NoPlanFound: "There is no way to do that from here.",
        PlanExecutionError: "The plan could not be carried out.",
        UnknownRelation: "I don't know that spatial relation.",
        InvalidWorldState: "The world is in an inconsistent state.",
        MalformedParse: "I could not make sense of that sentence.",
        InvalidConfigError: "Invalid configuration. Please check the settings.",
    }

    default_message = "Something unexpected went wrong."

    user_message = friendly_messages.get(type(exc), default_message)

    # Specific details where they help the user rephrase
    if isinstance(exc, NoMatchingObject) and exc.context.get("description"):
        user_message = f"I can't find {exc.context['description']}."

    elif isinstance(exc, PhysicallyImpossible) and exc.explanations:
        user_message = "That is physically impossible: " + " ".join(exc.explanations)

    elif isinstance(exc, AmbiguousCommand) and exc.candidates:
        noun = "location" if isinstance(exc, AmbiguousLocation) else "description"
        user_message = (
            f"That {noun} fits {len(exc.candidates)} objects "
            f"({', '.join(exc.candidates)}). Please be more specific."
        )

    elif isinstance(exc, SearchTimeout) and exc.context.get("timeout") is not None:
        user_message = f"I could not find a plan within {exc.context['timeout']} seconds."

    if include_details and isinstance(exc, ShrdliteException):
        user_message += f"\n\nTechnical details: {exc.message}"
        if exc.context:
            user_message += f"\n   Context: {exc.context}"

    return user_message
