"""Data classes for family tree entities and layout geometry."""

from dataclasses import asdict, dataclass, field, replace
from enum import Enum


class Gender(str, Enum):
    MALE = "M"
    FEMALE = "F"
    UNKNOWN = "U"

    @classmethod
    def from_string(cls, value: str | None) -> "Gender":
        """Map a gender code or word ("M", "female", ...) to a Gender. Anything else is UNKNOWN."""
        if not value or not isinstance(value, str):
            return cls.UNKNOWN
        upper = value.strip().upper()
        if upper in ("M", "MALE"):
            return cls.MALE
        if upper in ("F", "FEMALE"):
            return cls.FEMALE
        return cls.UNKNOWN


@dataclass(frozen=True)
class Person:
    id: str
    name: str
    gender: Gender = Gender.UNKNOWN
    birth_date: str | None = None  # ISO format YYYY-MM-DD or None
    death_date: str | None = None  # ISO format YYYY-MM-DD or None
    father_id: str | None = None
    mother_id: str | None = None
    spouse_ids: tuple[str, ...] = ()
    birth_order: int | None = None
    note: str | None = None

    def parent_ids(self) -> list[str]:
        return [pid for pid in (self.father_id, self.mother_id) if pid]

    def with_spouse(self, spouse_id: str) -> "Person":
        if not spouse_id or spouse_id in self.spouse_ids:
            return self
        return replace(self, spouse_ids=self.spouse_ids + (spouse_id,))

    def without_spouse(self, spouse_id: str) -> "Person":
        if spouse_id not in self.spouse_ids:
            return self
        return replace(self, spouse_ids=tuple(s for s in self.spouse_ids if s != spouse_id))

    def to_dict(self) -> dict:
        data = asdict(self)
        data["gender"] = self.gender.value
        data["spouse_ids"] = list(self.spouse_ids)
        return data


class RelationshipLabel(str, Enum):
    SAME_PERSON = "same-person"
    SPOUSE = "spouse"
    FATHER = "father"
    MOTHER = "mother"
    CHILD = "child"
    SIBLING = "sibling"
    UNRELATED = "unrelated"


@dataclass(frozen=True)
class NodeSize:
    width: float
    height: float


@dataclass
class Position:
    x: float
    y: float  # Top-left corner of the node box


class SegmentKind(str, Enum):
    SPOUSE = "spouse"
    PARENT_CHILD_VERTICAL = "parent-child-vertical"
    PARENT_CHILD_HORIZONTAL = "parent-child-horizontal"
    SIBLING_HORIZONTAL = "sibling-horizontal"


@dataclass(frozen=True)
class Segment:
    kind: SegmentKind
    x1: float
    y1: float
    x2: float
    y2: float
    persons: tuple[str, ...]

    def to_dict(self) -> dict:
        return {
            "type": self.kind.value,
            "x1": self.x1,
            "y1": self.y1,
            "x2": self.x2,
            "y2": self.y2,
            "persons": list(self.persons),
        }


@dataclass(frozen=True)
class LevelConflict:
    person_id: str
    kept_level: int
    proposed_level: int
    source_id: str
    kind: str  # "child" or "spouse"


@dataclass
class LayoutResult:
    levels: dict[str, int]
    positions: dict[str, Position]
    connectors: list[Segment]
    conflicts: list[LevelConflict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "levels": dict(self.levels),
            "positions": {pid: {"x": p.x, "y": p.y} for pid, p in self.positions.items()},
            "connectors": [s.to_dict() for s in self.connectors],
        }
