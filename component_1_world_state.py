"""
Component 1: World State Model

Immutable snapshot of the blocks world:
- ObjectDefinition: form, size and color of one object
- WorldState: columns of stacked object ids, the held object and the arm column
- Construction from plain data (WorldState.from_dict) with invariant validation
- Position lookups (column, height, blockers) used by relations and heuristics
- Copy-on-write helpers for the arm transitions; untouched columns are shared

Equality and hashing consider stacks, holding and arm only. The object catalog
is shared by reference between all states derived from one snapshot.
"""

from dataclasses import dataclass, field
from functools import cached_property
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterator, List, Mapping, Optional, Tuple

from common.constants import FLOOR, FLOOR_FORM, FLOOR_SIZE
from component_13_logging_config import get_logger
from shrdlite_exceptions import InvalidWorldState

logger = get_logger(__name__)

Stack = Tuple[str, ...]


# ============================================================================
# Object Definitions
# ============================================================================


@dataclass(frozen=True)
class ObjectDefinition:
    """Physical attributes of one object. Color is an open vocabulary."""

    form: str
    size: Optional[str] = None
    color: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ObjectDefinition":
        if "form" not in data:
            raise InvalidWorldState("Object definition without a form", context={"data": dict(data)})
        return cls(form=data["form"], size=data.get("size"), color=data.get("color"))

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {"form": self.form, "size": self.size, "color": self.color}

    @property
    def is_floor(self) -> bool:
        return self.form == FLOOR_FORM


FLOOR_DEFINITION = ObjectDefinition(form=FLOOR_FORM, size=FLOOR_SIZE, color=None)


# ============================================================================
# World State
# ============================================================================


@dataclass(frozen=True)
class WorldState:
    """
    One snapshot of the world.

    Attributes:
        stacks: Columns left to right, each bottom first
        holding: Id of the object in the gripper, or None
        arm: Column index of the arm
        objects: Catalog id -> ObjectDefinition (may define unplaced objects)
    """

    stacks: Tuple[Stack, ...]
    holding: Optional[str]
    arm: int
    objects: Mapping[str, ObjectDefinition] = field(compare=False, hash=False, repr=False)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "WorldState":
        """
        Build a validated state from example data.

        Args:
            data: {"stacks": [[id, ...], ...], "holding": id|None, "arm": int,
                   "objects": {id: {"form", "size", "color"}}}

        Raises:
            InvalidWorldState: Missing keys or broken invariants
        """
        missing = [key for key in ("stacks", "arm", "objects") if key not in data]
        if missing:
            raise InvalidWorldState(
                f"World data is missing {', '.join(missing)}", context={"missing": missing}
            )

        objects = MappingProxyType(
            {obj_id: ObjectDefinition.from_dict(obj) for obj_id, obj in data["objects"].items()}
        )
        state = cls(
            stacks=tuple(tuple(column) for column in data["stacks"]),
            holding=data.get("holding") or None,
            arm=int(data["arm"]),
            objects=objects,
        )
        state.validate()
        logger.debug(
            "World state loaded",
            extra={"columns": state.column_count, "objects": len(state.object_ids)},
        )
        return state

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stacks": [list(column) for column in self.stacks],
            "holding": self.holding,
            "arm": self.arm,
            "objects": {obj_id: obj.to_dict() for obj_id, obj in self.objects.items()},
        }

    def validate(self) -> None:
        """
        Check the world invariants.

        Raises:
            InvalidWorldState: On the first broken invariant
        """
        if not self.stacks:
            raise InvalidWorldState("A world needs at least one column")
        if not 0 <= self.arm < len(self.stacks):
            raise InvalidWorldState(
                f"Arm at column {self.arm} outside 0..{len(self.stacks) - 1}",
                context={"arm": self.arm},
            )
        if FLOOR in self.objects:
            raise InvalidWorldState(f"'{FLOOR}' is reserved and cannot name an object")

        seen = set()
        for obj_id in self.object_ids:
            if obj_id in seen:
                raise InvalidWorldState(
                    f"Object '{obj_id}' appears more than once", context={"object": obj_id}
                )
            seen.add(obj_id)
            if obj_id not in self.objects:
                raise InvalidWorldState(
                    f"Object '{obj_id}' has no definition", context={"object": obj_id}
                )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def column_count(self) -> int:
        return len(self.stacks)

    @property
    def object_ids(self) -> List[str]:
        """Ids of the objects present in the world, stacked first, then the held one."""
        ids = [obj_id for column in self.stacks for obj_id in column]
        if self.holding is not None:
            ids.append(self.holding)
        return ids

    def iter_placed(self) -> Iterator[Tuple[str, int, int]]:
        """Yield (id, column, height) for every stacked object."""
        for col, column in enumerate(self.stacks):
            for height, obj_id in enumerate(column):
                yield obj_id, col, height

    @cached_property
    def catalog_key(self) -> FrozenSet[Tuple[str, ObjectDefinition]]:
        """Hashable view of the object catalog, for caches keyed on more than positions."""
        return frozenset(self.objects.items())

    @cached_property
    def _positions(self) -> Dict[str, Tuple[int, int]]:
        return {obj_id: (col, height) for obj_id, col, height in self.iter_placed()}

    def definition(self, obj_id: str) -> ObjectDefinition:
        """Definition of an object or of the floor."""
        if obj_id == FLOOR:
            return FLOOR_DEFINITION
        try:
            return self.objects[obj_id]
        except KeyError:
            raise InvalidWorldState(
                f"Unknown object '{obj_id}'", context={"object": obj_id}
            ) from None

    def column_of(self, obj_id: str) -> int:
        """Column of a stacked object, -1 if it is held or absent."""
        position = self._positions.get(obj_id)
        return position[0] if position else -1

    def height_of(self, obj_id: str) -> int:
        """Stack position of an object (0 = on the floor), -1 if held or absent."""
        position = self._positions.get(obj_id)
        return position[1] if position else -1

    def is_placed(self, obj_id: str) -> bool:
        return obj_id in self._positions

    def objects_above(self, obj_id: str) -> int:
        """Number of objects stacked on top of obj_id (0 if held or absent)."""
        position = self._positions.get(obj_id)
        if position is None:
            return 0
        col, height = position
        return len(self.stacks[col]) - height - 1

    def is_clear(self, obj_id: str) -> bool:
        return self.objects_above(obj_id) == 0

    def top_of(self, column: int) -> Optional[str]:
        stack = self.stacks[column]
        return stack[-1] if stack else None

    def below(self, obj_id: str) -> Optional[str]:
        """The object directly under obj_id, None when it stands on the floor."""
        position = self._positions.get(obj_id)
        if position is None or position[1] == 0:
            return None
        col, height = position
        return self.stacks[col][height - 1]

    # ------------------------------------------------------------------
    # Copy-on-write transitions (no legality checks)
    # ------------------------------------------------------------------

    def with_arm(self, arm: int) -> "WorldState":
        return WorldState(stacks=self.stacks, holding=self.holding, arm=arm, objects=self.objects)

    def with_top_picked(self) -> "WorldState":
        """Move the top object of the arm column into the gripper."""
        column = self.stacks[self.arm]
        stacks = self.stacks[: self.arm] + (column[:-1],) + self.stacks[self.arm + 1 :]
        return WorldState(stacks=stacks, holding=column[-1], arm=self.arm, objects=self.objects)

    def with_held_dropped(self) -> "WorldState":
        """Put the held object on top of the arm column."""
        column = self.stacks[self.arm] + (self.holding,)
        stacks = self.stacks[: self.arm] + (column,) + self.stacks[self.arm + 1 :]
        return WorldState(stacks=stacks, holding=None, arm=self.arm, objects=self.objects)
