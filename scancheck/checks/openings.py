"""Embedded-item predicates (doors, windows, openings) and the external opening check."""

from __future__ import annotations

from scancheck.geometry.primitives import Point2D, point_segment_distance
from scancheck.models.raw_scan import RawScan, ScanEntity
from scancheck.settings import CheckSettings

RECTANGULAR_CORNER_COUNT = 4


def has_curved_wall(scan: RawScan) -> bool:
    return any(w.has_curve for w in scan.walls)


def has_non_rectangular_wall(scan: RawScan) -> bool:
    return any(w.corner_count > RECTANGULAR_CORNER_COUNT for w in scan.walls)


def has_curved_embedded(scan: RawScan) -> bool:
    return any(e.parent_identifier is not None and e.has_curve for e in scan.embedded)


def has_non_rectangular_embedded(scan: RawScan) -> bool:
    """A parented item whose outline has corners but not exactly four."""
    return any(
        e.parent_identifier is not None and 0 < e.corner_count != RECTANGULAR_CORNER_COUNT
        for e in scan.embedded
    )


def has_unparented_embedded(scan: RawScan) -> bool:
    return any(e.parent_identifier is None for e in scan.embedded)


def has_non_empty_completed_edges(scan: RawScan) -> bool:
    entities = scan.walls + scan.embedded + scan.floors
    return any(e.completed_edge_count > 0 for e in entities)


def has_floors_with_parent_id(scan: RawScan) -> bool:
    return any(f.parent_identifier is not None for f in scan.floors)


def floor_outline(floor: ScanEntity) -> list[Point2D]:
    """
    Floor polygon in world floor-plan coordinates.

    With a transform the corners are local points placed by it; without one
    they are read as world points already (X and the last coordinate).
    """
    outline: list[Point2D] = []
    for corner in floor.polygon_corners or ():
        if floor.transform is not None:
            world = floor.transform.apply(corner)
            outline.append((float(world[0]), float(world[2])))
        else:
            outline.append((corner[0], corner[-1]))
    return outline


def check_external_opening(scan: RawScan, settings: CheckSettings | None = None) -> bool:
    """
    True when a parented opening on the scan story sits in a wall that lies
    on the floor perimeter, i.e. the opening leads outside the captured room.
    Only the first floor is used.
    """
    if settings is None:
        settings = CheckSettings.default()
    if not scan.floors:
        return False
    outline = floor_outline(scan.floors[0])
    if len(outline) < 3:
        return False

    walls = {w.identifier: w for w in scan.walls if w.identifier is not None}
    edges = list(zip(outline, outline[1:] + outline[:1]))
    for opening in scan.openings:
        if opening.parent_identifier is None or opening.story != scan.story:
            continue
        wall = walls.get(opening.parent_identifier)
        if wall is None or wall.transform is None:
            continue
        tx, _, tz = wall.transform.translation
        if any(point_segment_distance((tx, tz), a, b) < settings.external_opening_perimeter_m for a, b in edges):
            return True
    return False


__all__ = [
    "check_external_opening",
    "floor_outline",
    "has_curved_embedded",
    "has_curved_wall",
    "has_floors_with_parent_id",
    "has_non_empty_completed_edges",
    "has_non_rectangular_embedded",
    "has_non_rectangular_wall",
    "has_unparented_embedded",
]
