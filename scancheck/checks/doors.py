"""Door checks: floor contact and clearance in front of each door."""

from __future__ import annotations

from loguru import logger
from shapely.geometry import Polygon

from scancheck.geometry.primitives import rectangle_footprint
from scancheck.models.raw_scan import RawScan, ScanEntity
from scancheck.settings import CheckSettings


def _half(value: float | None) -> float:
    return (value or 0.0) / 2.0


def door_bottom_y(door: ScanEntity) -> float | None:
    """World Y of the door's lower edge, or None when the door has no valid transform."""
    if door.transform is None:
        return None
    return door.transform.translation[1] - _half(door.dimensions.height)


def floor_level(floor: ScanEntity) -> float:
    """Floor height: transform translation Y, else Y of the first polygon corner, else 0."""
    if floor.transform is not None:
        return floor.transform.translation[1]
    corners = floor.polygon_corners
    if corners and len(corners[0]) >= 2:
        return corners[0][1]
    return 0.0


def story_floor_levels(scan: RawScan) -> dict[int, float]:
    levels: dict[int, float] = {}
    for floor in scan.floors:
        levels.setdefault(floor.story, floor_level(floor))
    return levels


def check_door_floor_contact(scan: RawScan, settings: CheckSettings | None = None) -> bool:
    """True when any door's bottom edge is more than the touching threshold away from its floor."""
    if settings is None:
        settings = CheckSettings.default()

    levels = story_floor_levels(scan)
    for door in scan.doors:
        bottom = door_bottom_y(door)
        if bottom is None:
            continue
        gap = abs(bottom - levels.get(door.story, 0.0))
        if gap > settings.touching_threshold_m:
            logger.debug("Door {} floats {:.3f} m off the floor", door.identifier, gap)
            return True
    return False


def _vertical_span(entity: ScanEntity) -> tuple[float, float]:
    ty = entity.transform.translation[1] if entity.transform is not None else 0.0
    half = _half(entity.dimensions.height)
    return ty - half, ty + half


def check_door_blocking(scan: RawScan, settings: CheckSettings | None = None) -> bool:
    """
    True when an object stands in the clearance zone in front of a door.

    The zone spans the door width (slightly narrowed so grazing objects do not
    count) and extends ``door_clearance_m`` along the door's local +Z.
    Objects attached to the door, objects entirely above it and low-profile
    objects below the step-over height are ignored.
    """
    if settings is None:
        settings = CheckSettings.default()

    footprints = []
    for obj in scan.objects:
        if obj.transform is None:
            continue
        corners = rectangle_footprint(obj.transform, _half(obj.dimensions.length), _half(obj.dimensions.width))
        low, high = _vertical_span(obj)
        footprints.append((obj, Polygon(corners), low, high))

    for door in scan.doors:
        if door.transform is None:
            continue
        half_width = max(0.0, (door.dimensions.length or 0.0) - settings.door_width_shrink_m) / 2.0
        local = [
            (-half_width, 0.0),
            (half_width, 0.0),
            (half_width, settings.door_clearance_m),
            (-half_width, settings.door_clearance_m),
        ]
        clearance = Polygon([door.transform.to_floor_plan(x, z) for x, z in local])
        door_low, door_high = _vertical_span(door)

        for obj, footprint, obj_low, obj_high in footprints:
            if obj.story != door.story:
                continue
            if door.identifier is not None and obj.parent_identifier == door.identifier:
                continue
            if obj_low > door_high or obj_high < door_low + settings.step_over_height_m:
                continue
            if clearance.intersects(footprint):
                logger.debug("Door {} blocked by {}", door.identifier, obj.identifier)
                return True
    return False


__all__ = [
    "check_door_blocking",
    "check_door_floor_contact",
    "door_bottom_y",
    "floor_level",
    "story_floor_levels",
]
