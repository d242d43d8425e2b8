"""
Typed representation of a parsed room scan.

Parsing is tolerant: any field whose value does not have the expected type is
read as absent instead of failing the whole document. Only a document that is
not a JSON object (or not JSON at all) is rejected.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping, TypeVar

from loguru import logger

from scancheck.exceptions import ConfigurationError, ScanParseError
from scancheck.geometry.contract import DIM_HEIGHT, DIM_LENGTH, DIM_WIDTH
from scancheck.geometry.transform import Transform

E = TypeVar("E", bound=Enum)
V = TypeVar("V")


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Category(str, Enum):
    """Entity kinds. Surfaces first, then furniture objects."""

    WALL = "wall"
    DOOR = "door"
    WINDOW = "window"
    OPENING = "opening"
    FLOOR = "floor"
    BATHTUB = "bathtub"
    BED = "bed"
    CHAIR = "chair"
    DISHWASHER = "dishwasher"
    FIREPLACE = "fireplace"
    OVEN = "oven"
    REFRIGERATOR = "refrigerator"
    SINK = "sink"
    SOFA = "sofa"
    STAIRS = "stairs"
    STORAGE = "storage"
    STOVE = "stove"
    TABLE = "table"
    TELEVISION = "television"
    TOILET = "toilet"
    WASHER_DRYER = "washerDryer"


SURFACE_CATEGORIES = frozenset(
    {Category.WALL, Category.DOOR, Category.WINDOW, Category.OPENING, Category.FLOOR}
)
OBJECT_CATEGORIES = frozenset(c for c in Category if c not in SURFACE_CATEGORIES)


def require_exhaustive(table: Mapping[E, V], members: Iterable[E], *, name: str) -> Mapping[E, V]:
    """Return ``table`` unchanged, or raise if it misses one of ``members``."""
    missing = sorted(m.value for m in members if m not in table)
    if missing:
        raise ConfigurationError(
            f"{name} does not cover every category",
            {"missing": ", ".join(missing)},
        )
    return table


# ---------------------------------------------------------------------------
# Field coercion


def _number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except OverflowError:
        return None
    return number if math.isfinite(number) else None


def _integer(value: Any) -> int | None:
    number = _number(value)
    if number is None or not number.is_integer():
        return None
    return int(number)


def _string(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _corners(value: Any) -> tuple[tuple[float, ...], ...] | None:
    if not isinstance(value, list):
        return None
    corners: list[tuple[float, ...]] = []
    for item in value:
        if not isinstance(item, list) or len(item) < 2:
            continue
        coords = [_number(v) for v in item[:3]]
        if any(c is None for c in coords):
            continue
        corners.append(tuple(coords))  # type: ignore[arg-type]
    return tuple(corners)


def _tag(value: Any) -> str | None:
    """Active key of a ``{"name": {...}}`` union, or None."""
    if not isinstance(value, dict):
        return None
    for key, payload in value.items():
        if payload is not None:
            return key
    return None


def _enum(enum_cls: type[E], raw: str | None) -> E | None:
    if raw is None:
        return None
    try:
        return enum_cls(raw)
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# Entities


@dataclass(frozen=True)
class Dimensions:
    """``[length, height, width]`` in meters; None marks an absent axis."""

    length: float | None = None
    height: float | None = None
    width: float | None = None

    @classmethod
    def parse(cls, value: Any) -> Dimensions:
        if not isinstance(value, list):
            return cls()
        raw = [_number(v) for v in value[:3]]
        raw += [None] * (3 - len(raw))
        return cls(length=raw[DIM_LENGTH], height=raw[DIM_HEIGHT], width=raw[DIM_WIDTH])

    def as_list(self) -> list[float | None]:
        return [self.length, self.height, self.width]

    def is_complete(self) -> bool:
        return all(v is not None for v in self.as_list())

    def is_empty(self) -> bool:
        """True when no axis carries a non-zero value."""
        return all(not v for v in self.as_list())

    @staticmethod
    def known(value: float | None) -> float | None:
        """A measurement usable for derived values: present and positive."""
        if value is None or value <= 0.0:
            return None
        return value


@dataclass(frozen=True)
class ScanEntity:
    identifier: str | None
    parent_identifier: str | None
    story: int
    dimensions: Dimensions
    transform: Transform | None
    polygon_corners: tuple[tuple[float, ...], ...] | None
    category: Category | None
    confidence: Confidence | None
    is_open: bool | None = None
    attributes: Mapping[str, str] = field(default_factory=dict)
    completed_edge_count: int = 0
    has_curve: bool = False

    @property
    def corner_count(self) -> int:
        return len(self.polygon_corners) if self.polygon_corners is not None else 0

    def is_category(self, category: Category) -> bool:
        return self.category is category


@dataclass(frozen=True)
class Section:
    label: str | None
    story: int | None
    center: tuple[float, ...] | None = None


def _parse_entity(data: Any, default_story: int, default_category: Category | None = None) -> ScanEntity | None:
    if not isinstance(data, dict):
        return None
    raw_category = data.get("category")
    category_tag = _tag(raw_category)
    category = _enum(Category, category_tag)
    if category is None and raw_category is None:
        category = default_category
    is_open = None
    if category is Category.DOOR and isinstance(raw_category, dict):
        door_payload = raw_category.get("door")
        if isinstance(door_payload, dict) and isinstance(door_payload.get("isOpen"), bool):
            is_open = door_payload["isOpen"]
    attributes = data.get("attributes")
    story = _integer(data.get("story"))
    return ScanEntity(
        identifier=_string(data.get("identifier")),
        parent_identifier=_string(data.get("parentIdentifier")),
        story=story if story is not None else default_story,
        dimensions=Dimensions.parse(data.get("dimensions")),
        transform=Transform.from_values(data.get("transform")),
        polygon_corners=_corners(data.get("polygonCorners")),
        category=category,
        confidence=_enum(Confidence, _tag(data.get("confidence"))),
        is_open=is_open,
        attributes={k: v for k, v in attributes.items() if isinstance(v, str)} if isinstance(attributes, dict) else {},
        completed_edge_count=len(_list(data.get("completedEdges"))),
        has_curve=data.get("curve") is not None,
    )


def _parse_section(data: Any, default_story: int) -> Section | None:
    if not isinstance(data, dict):
        return None
    center = data.get("center")
    story = _integer(data.get("story"))
    return Section(
        label=_string(data.get("label")),
        story=story if story is not None else default_story,
        center=tuple(c for c in (_number(v) for v in center) if c is not None) if isinstance(center, list) else None,
    )


@dataclass(frozen=True)
class RawScan:
    """One parsed room-scan document. Built once per extraction and never mutated."""

    version: int | None
    story: int
    walls: tuple[ScanEntity, ...] = ()
    doors: tuple[ScanEntity, ...] = ()
    windows: tuple[ScanEntity, ...] = ()
    openings: tuple[ScanEntity, ...] = ()
    floors: tuple[ScanEntity, ...] = ()
    objects: tuple[ScanEntity, ...] = ()
    sections: tuple[Section, ...] = ()
    core_model: str | None = None
    reference_origin_transform: Transform | None = None

    @classmethod
    def from_dict(cls, data: Any) -> RawScan:
        if not isinstance(data, Mapping):
            raise ScanParseError(
                "Invalid raw scan: document must be a JSON object",
                {"type": type(data).__name__},
            )
        story = _integer(data.get("story"))
        scan_story = story if story is not None else 0

        def entities(key: str, default_category: Category | None) -> tuple[ScanEntity, ...]:
            raw_items = data.get(key)
            if raw_items is not None and not isinstance(raw_items, list):
                logger.debug("Ignoring non-list '{}' field in raw scan", key)
            parsed = (_parse_entity(item, scan_story, default_category) for item in _list(raw_items))
            return tuple(e for e in parsed if e is not None)

        return cls(
            version=_integer(data.get("version")),
            story=scan_story,
            walls=entities("walls", Category.WALL),
            doors=entities("doors", Category.DOOR),
            windows=entities("windows", Category.WINDOW),
            openings=entities("openings", Category.OPENING),
            floors=entities("floors", Category.FLOOR),
            objects=entities("objects", None),
            sections=tuple(
                s for s in (_parse_section(item, scan_story) for item in _list(data.get("sections"))) if s is not None
            ),
            core_model=_string(data.get("coreModel")),
            reference_origin_transform=Transform.from_values(data.get("referenceOriginTransform")),
        )

    @classmethod
    def from_json(cls, text: str | bytes) -> RawScan:
        try:
            payload = json.loads(text)
        except (ValueError, RecursionError) as exc:  # JSONDecodeError, UnicodeDecodeError, oversized ints
            raise ScanParseError(f"Invalid raw scan: {exc}") from exc
        return cls.from_dict(payload)

    @property
    def embedded(self) -> tuple[ScanEntity, ...]:
        """Doors, windows and openings, in that order."""
        return self.doors + self.windows + self.openings

    def objects_of(self, category: Category) -> list[ScanEntity]:
        return [o for o in self.objects if o.category is category]

    def stories(self) -> list[int]:
        return sorted({w.story for w in self.walls})


def load_raw_scan(source: str | bytes | Mapping[str, Any] | RawScan) -> RawScan:
    """Accept a RawScan, a decoded JSON mapping, or JSON text."""
    if isinstance(source, RawScan):
        return source
    if isinstance(source, (str, bytes)):
        return RawScan.from_json(source)
    return RawScan.from_dict(source)


__all__ = [
    "Category",
    "Confidence",
    "Dimensions",
    "OBJECT_CATEGORIES",
    "RawScan",
    "SURFACE_CATEGORIES",
    "ScanEntity",
    "Section",
    "load_raw_scan",
    "require_exhaustive",
]
