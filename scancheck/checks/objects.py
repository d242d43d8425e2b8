"""
Object Checks

Floor-plan overlap between objects, walls and embedded items, plus the
bathroom fixture gaps (toilet backface, tub to wall). Footprints are the
entity's local ``length x width`` rectangle placed by its transform.
"""

from __future__ import annotations

from dataclasses import dataclass
from itertools import combinations

from shapely.geometry import Polygon

from scancheck.checks.walls import check_wall_wall_intersections, wall_segments
from scancheck.geometry.contract import EPSILON
from scancheck.geometry.primitives import (
    min_corner_to_edge_distance,
    point_segment_distance,
    rectangle_footprint,
)
from scancheck.models.raw_scan import Category, Dimensions, RawScan, ScanEntity
from scancheck.settings import CheckSettings

# Inclusive band edges for the tub gap comparison
TUB_GAP_SLACK = 1e-5


@dataclass(frozen=True)
class IntersectionResult:
    has_object_intersection_errors: bool = False
    has_wall_object_intersection_errors: bool = False
    has_wall_wall_intersection_errors: bool = False
    has_embedded_object_intersection_errors: bool = False


@dataclass(frozen=True)
class _Footprint:
    entity: ScanEntity
    outer: Polygon
    inner: Polygon


def _object_footprints(scan: RawScan, shrink: float) -> list[_Footprint]:
    footprints = []
    for obj in scan.objects:
        if obj.transform is None or obj.dimensions.is_empty():
            continue
        half_x = (obj.dimensions.length or 0.0) / 2.0
        half_z = (obj.dimensions.width or 0.0) / 2.0
        outer = Polygon(rectangle_footprint(obj.transform, half_x, half_z))
        inner = Polygon(
            rectangle_footprint(obj.transform, max(0.0, half_x - shrink), max(0.0, half_z - shrink))
        )
        footprints.append(_Footprint(entity=obj, outer=outer, inner=inner))
    return footprints


def _is_vanity_pair(a: ScanEntity, b: ScanEntity) -> bool:
    return {a.category, b.category} == {Category.SINK, Category.STORAGE}


def _object_object(footprints: list[_Footprint]) -> bool:
    for a, b in combinations(footprints, 2):
        if a.entity.story != b.entity.story or _is_vanity_pair(a.entity, b.entity):
            continue
        # Cheap reject on the full footprints before the shrunk test
        if not a.outer.intersects(b.outer):
            continue
        if a.inner.intersects(b.inner):
            return True
    return False


def _wall_object(scan: RawScan, footprints: list[_Footprint], settings: CheckSettings) -> bool:
    for wall in scan.walls:
        if wall.transform is None:
            continue
        half_length = (wall.dimensions.length or 0.0) / 2.0
        thickness = Dimensions.known(wall.dimensions.width) or settings.default_wall_thickness_m
        wall_poly = Polygon(rectangle_footprint(wall.transform, half_length, thickness / 2.0))
        for fp in footprints:
            if fp.entity.story == wall.story and wall_poly.intersects(fp.inner):
                return True
    return False


def _embedded_embedded(scan: RawScan, settings: CheckSettings) -> bool:
    """Two doors/windows/openings in the same wall whose extents overlap."""
    placed = []
    for item in scan.embedded:
        if item.transform is None or item.parent_identifier is None:
            continue
        half_x = max(0.0, (item.dimensions.length or 0.0) / 2.0 - settings.overlap_tolerance_m)
        if half_x <= 0.0:
            continue
        half_z = (settings.default_wall_thickness_m) / 2.0
        placed.append((item, Polygon(rectangle_footprint(item.transform, half_x, half_z))))

    for (a, poly_a), (b, poly_b) in combinations(placed, 2):
        if a.parent_identifier != b.parent_identifier or a.story != b.story:
            continue
        if poly_a.intersects(poly_b):
            return True
    return False


def check_intersections(scan: RawScan, settings: CheckSettings | None = None) -> IntersectionResult:
    """Run the four overlap detectors and return their flags together."""
    if settings is None:
        settings = CheckSettings.default()

    footprints = _object_footprints(scan, settings.overlap_tolerance_m)
    return IntersectionResult(
        has_object_intersection_errors=_object_object(footprints),
        has_wall_object_intersection_errors=_wall_object(scan, footprints, settings),
        has_wall_wall_intersection_errors=check_wall_wall_intersections(scan),
        has_embedded_object_intersection_errors=_embedded_embedded(scan, settings),
    )


def check_toilet_gaps(scan: RawScan, settings: CheckSettings | None = None) -> bool:
    """
    True when a toilet's back is not against a wall.

    The back is the midpoint of the local -Z face. A toilet with no wall on
    its story counts as an error; toilets without a transform or a depth are
    skipped.
    """
    if settings is None:
        settings = CheckSettings.default()

    segments = wall_segments(scan)
    for toilet in scan.objects_of(Category.TOILET):
        if toilet.transform is None or toilet.dimensions.width is None:
            continue
        back = toilet.transform.to_floor_plan(0.0, -toilet.dimensions.width / 2.0)
        distances = [
            point_segment_distance(back, seg.start, seg.end) for seg in segments if seg.story == toilet.story
        ]
        if not distances or min(distances) > settings.touching_threshold_m:
            return True
    return False


def check_tub_gaps(scan: RawScan, settings: CheckSettings | None = None) -> bool:
    """True when a tub sits a small, unsealed distance (the configured band) from a wall."""
    if settings is None:
        settings = CheckSettings.default()

    segments = wall_segments(scan)
    low = settings.tub_gap_min_m - TUB_GAP_SLACK
    high = settings.tub_gap_max_m + TUB_GAP_SLACK
    for tub in scan.objects_of(Category.BATHTUB):
        if tub.transform is None:
            continue
        outline = rectangle_footprint(
            tub.transform, (tub.dimensions.length or 0.0) / 2.0, (tub.dimensions.width or 0.0) / 2.0
        )
        for seg in segments:
            if seg.story != tub.story or seg.length < EPSILON:
                continue
            gap = min_corner_to_edge_distance(outline, [seg.start, seg.end])
            if low <= gap <= high:
                return True
    return False


__all__ = [
    "IntersectionResult",
    "check_intersections",
    "check_toilet_gaps",
    "check_tub_gaps",
]
