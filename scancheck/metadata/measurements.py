"""
Measurement extraction.

Each function returns a mapping of metadata field name to value. Entities
missing an input a value depends on are left out of that value only; an
unexpected failure on one entity is logged and that data point is dropped.
"""

from __future__ import annotations

from collections import Counter
from typing import Any, Callable, Iterable, TypeVar

from loguru import logger

from scancheck.checks.openings import floor_outline
from scancheck.checks.vanity import vanity_lengths
from scancheck.geometry.contract import square_meters_to_square_feet
from scancheck.geometry.primitives import polygon_area, polygon_perimeter
from scancheck.models.raw_scan import (
    OBJECT_CATEGORIES,
    Category,
    Confidence,
    Dimensions,
    RawScan,
    ScanEntity,
    require_exhaustive,
)

T = TypeVar("T")

OBJECT_CATEGORY_LABELS = require_exhaustive(
    {
        Category.BATHTUB: "Bathtub",
        Category.BED: "Bed",
        Category.CHAIR: "Chair",
        Category.DISHWASHER: "Dishwasher",
        Category.FIREPLACE: "Fireplace",
        Category.OVEN: "Oven",
        Category.REFRIGERATOR: "Refrigerator",
        Category.SINK: "Sink",
        Category.SOFA: "Sofa",
        Category.STAIRS: "Stairs",
        Category.STORAGE: "Storage",
        Category.STOVE: "Stove",
        Category.TABLE: "Table",
        Category.TELEVISION: "Television",
        Category.TOILET: "Toilet",
        Category.WASHER_DRYER: "Washer/Dryer",
    },
    OBJECT_CATEGORIES,
    name="OBJECT_CATEGORY_LABELS",
)

# Presence flag per furniture kind
OBJECT_PRESENCE_FIELDS = require_exhaustive(
    {
        Category.BATHTUB: None,
        Category.BED: "has_bed",
        Category.CHAIR: "has_chair",
        Category.DISHWASHER: "has_dishwasher",
        Category.FIREPLACE: "has_fireplace",
        Category.OVEN: "has_oven",
        Category.REFRIGERATOR: "has_refrigerator",
        Category.SINK: None,
        Category.SOFA: "has_sofa",
        Category.STAIRS: "has_stairs",
        Category.STORAGE: None,
        Category.STOVE: "has_stove",
        Category.TABLE: "has_table",
        Category.TELEVISION: "has_television",
        Category.TOILET: None,
        Category.WASHER_DRYER: "has_washer_dryer",
    },
    OBJECT_CATEGORIES,
    name="OBJECT_PRESENCE_FIELDS",
)

EMBEDDED_LABELS = {"doors": "Door", "windows": "Window", "openings": "Opening"}

CONFIDENCE_INDEX = require_exhaustive(
    {Confidence.HIGH: 0, Confidence.MEDIUM: 1, Confidence.LOW: 2},
    Confidence,
    name="CONFIDENCE_INDEX",
)


def _measure(entities: Iterable[ScanEntity], fn: Callable[[ScanEntity], T], what: str) -> list[T]:
    """Apply ``fn`` to each entity, dropping (and logging) any that fail."""
    results: list[T] = []
    for entity in entities:
        try:
            results.append(fn(entity))
        except Exception as exc:
            logger.debug("Skipping {} measurement for {}: {}", what, entity.identifier, exc)
    return results


def _pair(width: float, height: float) -> dict[str, float]:
    return {"width": width, "height": height}


def _wall_width_height(wall: ScanEntity) -> tuple[float | None, float | None]:
    height = Dimensions.known(wall.dimensions.height)
    if wall.polygon_corners is not None and len(wall.polygon_corners) >= 3:
        return Dimensions.known(polygon_perimeter(wall.polygon_corners)), height
    return Dimensions.known(wall.dimensions.length), height


def _box_width_height(entity: ScanEntity) -> tuple[float | None, float | None]:
    return Dimensions.known(entity.dimensions.length), Dimensions.known(entity.dimensions.height)


def _floor_length_width(floor: ScanEntity) -> tuple[float | None, float | None]:
    """Plan extent of the floor outline along world X (length) and Z (width)."""
    if floor.polygon_corners is not None and len(floor.polygon_corners) >= 3:
        outline = floor_outline(floor)
        xs = [p[0] for p in outline]
        zs = [p[1] for p in outline]
        return Dimensions.known(max(xs) - min(xs)), Dimensions.known(max(zs) - min(zs))
    return Dimensions.known(floor.dimensions.length), Dimensions.known(floor.dimensions.height)


def _surface_lists(
    prefix: str,
    entities: Iterable[ScanEntity],
    measure: Callable[[ScanEntity], tuple[float | None, float | None]],
    *,
    partial: bool,
) -> dict[str, list[Any]]:
    """
    Widths, heights, areas and pairs for one entity kind.

    With ``partial`` a lone width or height is still recorded (walls);
    otherwise an entity contributes only when both are known.
    """
    widths: list[float] = []
    heights: list[float] = []
    areas: list[float] = []
    pairs: list[dict[str, float]] = []
    for width, height in _measure(entities, measure, prefix):
        if width is not None and height is not None:
            areas.append(width * height)
            pairs.append(_pair(width, height))
        elif not partial:
            continue
        if width is not None:
            widths.append(width)
        if height is not None:
            heights.append(height)
    return {
        f"{prefix}_widths": widths,
        f"{prefix}_heights": heights,
        f"{prefix}_areas": areas,
        f"{prefix}_width_height_pairs": pairs,
    }


def dimension_area_data(scan: RawScan) -> dict[str, Any]:
    data: dict[str, Any] = {}
    data.update(_surface_lists("wall", scan.walls, _wall_width_height, partial=True))
    data.update(_surface_lists("door", scan.doors, _box_width_height, partial=False))
    data.update(_surface_lists("window", scan.windows, _box_width_height, partial=False))
    data.update(_surface_lists("opening", scan.openings, _box_width_height, partial=False))

    floor_lengths: list[float] = []
    floor_widths: list[float] = []
    floor_pairs: list[dict[str, float]] = []
    for length, width in _measure(scan.floors, _floor_length_width, "floor"):
        if length is not None:
            floor_lengths.append(length)
        if width is not None:
            floor_widths.append(width)
            if length is not None:
                floor_pairs.append(_pair(width, length))
    data["floor_lengths"] = floor_lengths
    data["floor_widths"] = floor_widths
    data["floor_width_height_pairs"] = floor_pairs

    tub_lengths = _measure(
        scan.objects_of(Category.BATHTUB), lambda tub: Dimensions.known(tub.dimensions.length), "tub"
    )
    data["tub_lengths"] = [length for length in tub_lengths if length is not None]
    data["vanity_lengths"] = vanity_lengths(scan)
    return data


def floor_area(floor: ScanEntity) -> float:
    """Polygon area when the floor has an outline, else length x height of its dimensions."""
    if floor.polygon_corners is not None and len(floor.polygon_corners) >= 3:
        return polygon_area(floor.polygon_corners)
    length = Dimensions.known(floor.dimensions.length)
    height = Dimensions.known(floor.dimensions.height)
    if length is None or height is None:
        return 0.0
    return length * height


def room_area_data(scan: RawScan) -> dict[str, float]:
    area = sum(_measure(scan.floors, floor_area, "floor area"))
    return {"room_area_sq_m": area, "room_area_sq_ft": square_meters_to_square_feet(area)}


def attribute_data(scan: RawScan) -> dict[str, Any]:
    """Door open/closed/unknown tallies and per-attribute value histograms for objects."""
    door_counts: Counter[str] = Counter()
    for door in scan.doors:
        if door.is_open is True:
            door_counts["Open"] += 1
        elif door.is_open is False:
            door_counts["Closed"] += 1
        else:
            door_counts["Unknown"] += 1

    attribute_counts: dict[str, Counter[str]] = {}
    for obj in scan.objects:
        for name, value in obj.attributes.items():
            attribute_counts.setdefault(name, Counter())[value] += 1

    return {
        "door_is_open_counts": {key: door_counts[key] for key in sorted(door_counts)},
        "object_attribute_counts": {
            name: {value: counts[value] for value in sorted(counts)} for name, counts in sorted(attribute_counts.items())
        },
    }


def wall_embedded_counts(scan: RawScan) -> dict[str, int]:
    """Number of distinct walls hosting at least one door, window or opening."""

    def hosts(items: Iterable[ScanEntity]) -> int:
        return len({i.parent_identifier for i in items if i.parent_identifier is not None})

    return {
        "walls_with_doors": hosts(scan.doors),
        "walls_with_windows": hosts(scan.windows),
        "walls_with_openings": hosts(scan.openings),
        "total_walls": len(scan.walls),
    }


def confidence_counts(scan: RawScan) -> dict[str, list[int]]:
    """``[high, medium, low]`` per category label; untagged entities are not counted."""
    tallies: dict[str, list[int]] = {}

    def bump(label: str, confidence: Confidence | None) -> None:
        if confidence is None:
            return
        tallies.setdefault(label, [0, 0, 0])[CONFIDENCE_INDEX[confidence]] += 1

    for obj in scan.objects:
        if obj.category in OBJECT_CATEGORY_LABELS:
            bump(OBJECT_CATEGORY_LABELS[obj.category], obj.confidence)
    for attr, label in EMBEDDED_LABELS.items():
        for item in getattr(scan, attr):
            bump(label, item.confidence)
    return {label: tallies[label] for label in sorted(tallies)}


def object_presence(scan: RawScan) -> dict[str, Any]:
    present = {o.category for o in scan.objects}
    flags = {field: category in present for category, field in OBJECT_PRESENCE_FIELDS.items() if field is not None}
    return dict(sorted(flags.items()))


def entity_counts(scan: RawScan) -> dict[str, int]:
    return {
        "wall_count": len(scan.walls),
        "door_count": len(scan.doors),
        "window_count": len(scan.windows),
        "opening_count": len(scan.openings),
        "toilet_count": len(scan.objects_of(Category.TOILET)),
        "tub_count": len(scan.objects_of(Category.BATHTUB)),
        "sink_count": len(scan.objects_of(Category.SINK)),
        "storage_count": len(scan.objects_of(Category.STORAGE)),
    }


__all__ = [
    "OBJECT_CATEGORY_LABELS",
    "attribute_data",
    "confidence_counts",
    "dimension_area_data",
    "entity_counts",
    "floor_area",
    "object_presence",
    "room_area_data",
    "wall_embedded_counts",
]
