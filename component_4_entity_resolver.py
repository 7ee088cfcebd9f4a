"""
Component 4: Entity Resolver

Maps object descriptions from the parse tree onto object ids of a world state.

Features:
- Simple descriptions: size/color/form filters (None is a wildcard,
  "anyform" matches every form, "floor" is the floor sentinel)
- Anaphora: "the red one" takes its form from previously seen objects
- Relative clauses: "the ball inside a box" keeps the inner candidates that
  stand in the relation to a related candidate ("all": to every one)
- Previously seen tracking: the related objects that actually matched are
  returned for later anaphora
- Memoisation of resolutions through the cache manager

Failures:
- NoMatchingObject when nothing matches
- AmbiguousCommand when a "the" related entity matches several objects
"""

from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Set

from common.constants import ANAPHORIC_FORM, ANY_FORM, FLOOR, FLOOR_FORM, QUANTIFIER_ALL, QUANTIFIER_THE
from component_1_world_state import WorldState
from component_13_logging_config import get_logger
from component_2_relations import RelationKind
from component_3_parse_tree import Entity, ObjectDescription, describe_object, innermost_object
from infrastructure.cache_manager import RESOLUTION_CACHE, get_shrdlite_caches
from shrdlite_exceptions import AmbiguousCommand, NoMatchingObject

logger = get_logger(__name__)


@dataclass(frozen=True)
class Resolution:
    """
    Result of resolving a description.

    Attributes:
        objects: Ids of the matching objects (or {"floor"})
        related: Related objects that satisfied a relative clause
    """

    objects: FrozenSet[str]
    related: FrozenSet[str] = frozenset()

    @property
    def seen(self) -> FrozenSet[str]:
        """Everything mentioned by this resolution, for later anaphora."""
        return self.objects | self.related

    def sorted_objects(self) -> List[str]:
        return sorted(self.objects)


class EntityResolver:
    """
    Resolves parse-tree descriptions against a world state.

    Usage:
        resolver = EntityResolver()
        resolution = resolver.resolve_entity(command.entity, state)
        candidates = resolution.sorted_objects()
    """

    def __init__(self, use_cache: bool = True):
        self.use_cache = use_cache
        self.cache_mgr = get_shrdlite_caches() if use_cache else None

    def resolve_entity(
        self,
        entity: Entity,
        state: WorldState,
        previously_seen: Iterable[str] = frozenset(),
    ) -> Resolution:
        """Resolve the description of an entity; the quantifier is left to the caller."""
        return self.resolve_object(entity.object, state, previously_seen)

    def resolve_object(
        self,
        description: ObjectDescription,
        state: WorldState,
        previously_seen: Iterable[str] = frozenset(),
    ) -> Resolution:
        """
        Resolve a (possibly complex) description.

        Args:
            description: The description to resolve
            state: World to resolve against
            previously_seen: Ids that anaphoric "one" may refer to

        Returns:
            Resolution with at least one object

        Raises:
            NoMatchingObject: Nothing matches
            AmbiguousCommand: A "the" related entity matches several objects
        """
        seen = frozenset(previously_seen)
        key = (description, seen, state, state.catalog_key)
        if self.cache_mgr is not None:
            cached = self.cache_mgr.get(RESOLUTION_CACHE, key)
            if cached is not None:
                return cached

        if description.is_complex:
            resolution = self._resolve_complex(description, state, seen)
        else:
            resolution = Resolution(objects=frozenset(self._resolve_simple(description, state, seen)))

        if self.cache_mgr is not None:
            self.cache_mgr.set(RESOLUTION_CACHE, key, resolution)
        return resolution

    # ------------------------------------------------------------------
    # Simple descriptions
    # ------------------------------------------------------------------

    def _resolve_simple(
        self, description: ObjectDescription, state: WorldState, seen: FrozenSet[str]
    ) -> Set[str]:
        if description.form == FLOOR_FORM:
            return {FLOOR}

        if description.form == ANAPHORIC_FORM:
            forms = {state.definition(obj_id).form for obj_id in seen if obj_id != FLOOR}
            if not forms:
                raise NoMatchingObject(
                    "Nothing was mentioned before that 'one' could refer to",
                    description=f"the {describe_object(description)}",
                )
        else:
            forms = None

        matches = set()
        for obj_id in state.object_ids:
            obj = state.definition(obj_id)
            if description.size is not None and obj.size != description.size:
                continue
            if description.color is not None and obj.color != description.color:
                continue
            if forms is not None:
                if obj.form not in forms:
                    continue
            elif description.form not in (None, ANY_FORM) and obj.form != description.form:
                continue
            matches.add(obj_id)

        if not matches:
            text = f"the {describe_object(description)}"
            raise NoMatchingObject(f"Could not find {text}", description=text)
        return matches

    # ------------------------------------------------------------------
    # Relative clauses
    # ------------------------------------------------------------------

    def _resolve_complex(
        self, description: ObjectDescription, state: WorldState, seen: FrozenSet[str]
    ) -> Resolution:
        location = description.location
        relation = RelationKind.from_name(location.relation)

        inner = self.resolve_object(description.object, state, seen)
        related = self.resolve_entity(location.entity, state, inner.objects)
        every = location.entity.quantifier == QUANTIFIER_ALL

        matches: Set[str] = set()
        used_related: Set[str] = set()
        for candidate in inner.objects:
            satisfied = [
                other
                for other in related.objects
                if other != candidate and relation.holds(state, candidate, other)
            ]
            required = [other for other in related.objects if other != candidate]
            if every:
                ok = bool(required) and len(satisfied) == len(required)
            else:
                ok = bool(satisfied)
            if ok:
                matches.add(candidate)
                used_related.update(satisfied)

        if not matches:
            text = (
                f"a {describe_object(innermost_object(description))} that is {relation.value} "
                f"{location.entity.quantifier} {describe_object(innermost_object(location.entity.object))}"
            )
            raise NoMatchingObject(f"Could not find {text}", description=text)

        if location.entity.quantifier == QUANTIFIER_THE and len(used_related) > 1:
            raise AmbiguousCommand(
                f"'the {describe_object(innermost_object(location.entity.object))}' "
                f"matches {len(used_related)} objects",
                candidates=sorted(used_related),
            )

        logger.debug(
            "Relative clause resolved",
            extra={
                "relation": relation.value,
                "matches": sorted(matches),
                "related": sorted(used_related),
            },
        )
        return Resolution(objects=frozenset(matches), related=frozenset(used_related) | related.related)
