"""
Wall Checks

Pairwise and per-wall detectors over the walls of a scan: crooked joins,
small gaps, doubled (colinear) walls, nib walls, crossings, soffits and low
ceilings. Walls are reduced to their floor-plan centerline: the local X extent
of the polygon corners (or the length dimension when there are none), placed
by the wall transform.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from itertools import combinations

from shapely.geometry import LineString

from scancheck.geometry.contract import (
    BOUNDARY_TOLERANCE,
    EPSILON,
    SOFFIT_MAX_ANGLE_DEG,
    SOFFIT_MIN_ANGLE_DEG,
)
from scancheck.geometry.primitives import (
    Point2D,
    Segment2D,
    angle_between_directions,
    deviation_from_collinear,
    distance_between_segments,
)
from scancheck.models.raw_scan import Dimensions, RawScan, ScanEntity
from scancheck.settings import CheckSettings


@dataclass(frozen=True)
class WallSegment:
    wall: ScanEntity
    start: Point2D
    end: Point2D

    @property
    def story(self) -> int:
        return self.wall.story

    @property
    def segment(self) -> Segment2D:
        return (self.start, self.end)

    @property
    def direction(self) -> Point2D:
        return (self.end[0] - self.start[0], self.end[1] - self.start[1])

    @property
    def length(self) -> float:
        return math.hypot(*self.direction)


def wall_segment(wall: ScanEntity) -> WallSegment | None:
    """Floor-plan centerline of a wall, or None when it cannot be placed."""
    if wall.transform is None:
        return None
    local_min: float | None = None
    local_max: float | None = None
    if wall.polygon_corners:
        xs = [corner[0] for corner in wall.polygon_corners]
        if max(xs) > min(xs):
            local_min, local_max = min(xs), max(xs)
    if local_min is None or local_max is None:
        length = Dimensions.known(wall.dimensions.length)
        if length is None:
            return None
        local_min, local_max = -length / 2.0, length / 2.0
    return WallSegment(
        wall=wall,
        start=wall.transform.to_floor_plan(local_min, 0.0),
        end=wall.transform.to_floor_plan(local_max, 0.0),
    )


def wall_segments(scan: RawScan) -> list[WallSegment]:
    segments = []
    for wall in scan.walls:
        seg = wall_segment(wall)
        if seg is not None:
            segments.append(seg)
    return segments


def _same_story_pairs(segments: list[WallSegment]):
    for a, b in combinations(segments, 2):
        if a.story == b.story:
            yield a, b


def check_crooked_walls(scan: RawScan, settings: CheckSettings | None = None) -> bool:
    """
    True when two walls that look meant to join do so badly.

    A same-story pair is considered for joining when its endpoint distance is
    under the wall-gap proximity. Pairs meeting at a deliberate corner (angle
    deviation from collinear above the junction angle) are skipped; the rest
    are crooked when the gap exceeds the touching threshold or the deviation
    exceeds the crooked angle. Both bounds are inclusive on the passing side.
    """
    if settings is None:
        settings = CheckSettings.default()

    touching = settings.touching_threshold_m + BOUNDARY_TOLERANCE
    proximity = settings.wall_gap_max_m
    max_deviation = settings.crooked_angle_max_deg + BOUNDARY_TOLERANCE
    junction = settings.corner_junction_min_deg

    for a, b in _same_story_pairs(wall_segments(scan)):
        min_dist = distance_between_segments(a.segment, b.segment)
        if min_dist >= proximity:
            continue
        deviation = deviation_from_collinear(angle_between_directions(a.direction, b.direction))
        if deviation > junction:
            continue
        if min_dist > touching or deviation > max_deviation:
            return True
    return False


def check_wall_gaps(scan: RawScan, settings: CheckSettings | None = None) -> bool:
    """True when two walls on a story are apart by more than touching but less than the gap limit."""
    if settings is None:
        settings = CheckSettings.default()

    for a, b in _same_story_pairs(wall_segments(scan)):
        gap = distance_between_segments(a.segment, b.segment)
        if settings.touching_threshold_m < gap < settings.wall_gap_max_m:
            return True
    return False


def check_colinear_walls(scan: RawScan, settings: CheckSettings | None = None) -> bool:
    """True when two parallel walls touch or overlap (double-scanned wall)."""
    if settings is None:
        settings = CheckSettings.default()

    for a, b in _same_story_pairs(wall_segments(scan)):
        if a.length < EPSILON or b.length < EPSILON:
            continue
        ax, ay = a.direction
        bx, by = b.direction
        dot = abs(ax * bx + ay * by) / (a.length * b.length)
        if dot <= settings.colinear_parallel_threshold:
            continue
        if distance_between_segments(a.segment, b.segment) < settings.colinear_gap_max_m:
            return True
    return False


def check_nib_walls(scan: RawScan, settings: CheckSettings | None = None) -> bool:
    """True when a wall on the scan's own story is a stub shorter than the nib length."""
    if settings is None:
        settings = CheckSettings.default()

    for seg in wall_segments(scan):
        if seg.story != scan.story:
            continue
        if 0.0 < seg.length < settings.nib_wall_threshold_m:
            return True
    return False


def check_wall_wall_intersections(scan: RawScan) -> bool:
    """True when two same-story walls cross or run over each other (corner joins excluded)."""
    for a, b in _same_story_pairs(wall_segments(scan)):
        if a.length < EPSILON or b.length < EPSILON:
            continue
        line_a = LineString(a.segment)
        line_b = LineString(b.segment)
        if not line_a.intersects(line_b):
            continue
        shared = line_a.intersection(line_b)
        if shared.length > 1e-5:
            return True
        if line_a.crosses(line_b):
            return True
    return False


def wall_has_soffit(wall: ScanEntity) -> bool:
    """
    True when the wall outline (local X-Y plane) has a re-entrant corner of
    roughly 270 degrees, the notch a soffit cuts into the top of a wall.
    Interior angles are measured with the outline's own winding.
    """
    corners = wall.polygon_corners
    if not corners or len(corners) < 3:
        return False
    count = len(corners)
    signed_area = sum(
        corners[i][0] * corners[(i + 1) % count][1] - corners[(i + 1) % count][0] * corners[i][1]
        for i in range(count)
    )
    if abs(signed_area) < EPSILON:
        return False
    winding = 1.0 if signed_area > 0.0 else -1.0
    for i, current in enumerate(corners):
        prev = corners[(i - 1) % count]
        nxt = corners[(i + 1) % count]
        angle_prev = math.atan2(prev[1] - current[1], prev[0] - current[0])
        angle_next = math.atan2(nxt[1] - current[1], nxt[0] - current[0])
        interior = math.degrees(winding * (angle_prev - angle_next)) % 360.0
        if SOFFIT_MIN_ANGLE_DEG <= interior <= SOFFIT_MAX_ANGLE_DEG:
            return True
    return False


def minimum_ceiling_height(wall: ScanEntity) -> float | None:
    """
    Lowest ceiling height along a wall, in meters.

    With three or more 3D corners the height runs from the lowest corner to
    the lowest corner above it, which catches V-shaped or notched tops.
    Otherwise the height dimension is used.
    """
    corners = wall.polygon_corners
    if corners is not None and len(corners) >= 3:
        ys = [c[1] for c in corners if len(c) >= 3]
        if ys:
            base = min(ys)
            above = [y for y in ys if y > base]
            if above:
                return min(above) - base
    return Dimensions.known(wall.dimensions.height)


def check_low_ceiling(scan: RawScan, settings: CheckSettings | None = None) -> bool:
    if settings is None:
        settings = CheckSettings.default()
    for wall in scan.walls:
        height = minimum_ceiling_height(wall)
        if height is not None and height < settings.low_ceiling_threshold_m:
            return True
    return False


__all__ = [
    "WallSegment",
    "check_colinear_walls",
    "check_crooked_walls",
    "check_low_ceiling",
    "check_nib_walls",
    "check_wall_gaps",
    "check_wall_wall_intersections",
    "minimum_ceiling_height",
    "wall_has_soffit",
    "wall_segment",
    "wall_segments",
]
