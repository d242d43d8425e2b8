"""
Geometry Primitives

Vector helpers, polygon measurements, segment distances and axis-aligned boxes
used by the structural checks. All functions are pure and never raise on
well-shaped numeric input.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np

from scancheck.geometry.contract import EPSILON, TRANSFORM_SIZE
from scancheck.geometry.transform import Transform

Point2D = tuple[float, float]
Segment2D = tuple[Point2D, Point2D]


def _as_point3(point: Sequence[float]) -> np.ndarray:
    coords = np.zeros(3)
    for i, value in enumerate(list(point)[:3]):
        coords[i] = float(value)
    return coords


def _clean_corners(corners: Iterable[Sequence[float]] | None) -> np.ndarray:
    """Stack corners with at least two coordinates into an (n, 3) array."""
    rows = [_as_point3(c) for c in (corners or []) if len(c) >= 2]
    if not rows:
        return np.zeros((0, 3))
    return np.vstack(rows)


def apply_transform(matrix: Transform | Sequence[float], point: Sequence[float]) -> tuple[float, float, float]:
    """
    Apply a flat column-major 4x4 matrix to a 3D point.

    A matrix that is not exactly 16 values leaves the point unchanged, so
    callers should validate (or use ``Transform.from_values``) first.
    """
    transform = matrix if isinstance(matrix, Transform) else Transform.from_values(matrix)
    if transform is None:
        p = _as_point3(point)
        return (float(p[0]), float(p[1]), float(p[2]))
    world = transform.apply(point)
    return (float(world[0]), float(world[1]), float(world[2]))


def project_to_floor_plan(transform: Transform, local_x: float, local_z: float) -> Point2D:
    """Top-down projection of a local (X, Z) point into world (X, Z)."""
    return transform.to_floor_plan(local_x, local_z)


def polygon_perimeter(corners: Iterable[Sequence[float]] | None) -> float:
    """Closed-loop perimeter; fewer than two corners yields 0."""
    pts = _clean_corners(corners)
    if len(pts) < 2:
        return 0.0
    edges = np.roll(pts, -1, axis=0) - pts
    return float(np.linalg.norm(edges, axis=1).sum())


def polygon_area(corners: Iterable[Sequence[float]] | None) -> float:
    """
    Planar area of an ordered polygon.

    Uses Newell's normal, which reduces to the shoelace formula for 2D input
    and measures a 3D polygon in the plane its corners span.
    """
    pts = _clean_corners(corners)
    if len(pts) < 3:
        return 0.0
    normal = np.cross(pts, np.roll(pts, -1, axis=0)).sum(axis=0)
    return float(np.linalg.norm(normal) / 2.0)


def point_segment_distance(p: Sequence[float], a: Sequence[float], b: Sequence[float]) -> float:
    """Distance from point ``p`` to the finite segment ``a``-``b``."""
    pv = np.asarray(p, dtype=float)
    av = np.asarray(a, dtype=float)
    bv = np.asarray(b, dtype=float)
    ab = bv - av
    length_sq = float(ab @ ab)
    if length_sq < EPSILON:
        return float(np.linalg.norm(pv - av))
    t = float((pv - av) @ ab) / length_sq
    t = max(0.0, min(1.0, t))
    return float(np.linalg.norm(pv - (av + t * ab)))


def distance_between_segments(segment_a: Segment2D, segment_b: Segment2D) -> float:
    """
    Minimum of the four endpoint-to-opposite-segment distances.

    Crossing segments report the endpoint distance rather than 0; the checks
    only rely on this for near-touching walls.
    """
    a1, a2 = segment_a
    b1, b2 = segment_b
    return min(
        point_segment_distance(b1, a1, a2),
        point_segment_distance(b2, a1, a2),
        point_segment_distance(a1, b1, b2),
        point_segment_distance(a2, b1, b2),
    )


def min_corner_to_edge_distance(corners_a: Sequence[Point2D], corners_b: Sequence[Point2D]) -> float:
    """Minimum distance from any corner of one closed outline to any edge of the other."""
    best = math.inf
    for points, edges in ((corners_a, corners_b), (corners_b, corners_a)):
        for p in points:
            for i in range(len(edges)):
                d = point_segment_distance(p, edges[i], edges[(i + 1) % len(edges)])
                if d < best:
                    best = d
    return best


def angle_between_directions(dir_a: Sequence[float], dir_b: Sequence[float]) -> float:
    """Unsigned angle in degrees, in [0, 180]. Degenerate vectors give 0."""
    ax, ay = float(dir_a[0]), float(dir_a[1])
    bx, by = float(dir_b[0]), float(dir_b[1])
    if math.hypot(ax, ay) < EPSILON or math.hypot(bx, by) < EPSILON:
        return 0.0
    cross = ax * by - ay * bx
    dot = ax * bx + ay * by
    return abs(math.degrees(math.atan2(cross, dot)))


def deviation_from_collinear(angle_deg: float) -> float:
    """How far an angle in [0, 180] is from either 0 or 180 degrees."""
    return min(angle_deg, abs(180.0 - angle_deg))


@dataclass(frozen=True)
class AxisAlignedBox:
    """World-space box given by its minimum and maximum corners."""

    min_corner: tuple[float, float, float]
    max_corner: tuple[float, float, float]

    @property
    def size(self) -> tuple[float, float, float]:
        return tuple(hi - lo for lo, hi in zip(self.min_corner, self.max_corner))  # type: ignore[return-value]


def bounding_box_from_transform(
    transform: Transform | Sequence[float] | None,
    dimensions: Sequence[float | None] | None,
) -> AxisAlignedBox | None:
    """
    Axis-aligned world box enclosing an entity's oriented box.

    The local box spans +/- half of ``[length, height, width]`` around the
    origin and is placed by the transform. Returns None (not an empty box) for
    an invalid transform or when every dimension is absent or zero.
    """
    if transform is None:
        return None
    if not isinstance(transform, Transform):
        if len(transform) != TRANSFORM_SIZE:
            return None
        transform = Transform.from_values(transform)
        if transform is None:
            return None
    extents = [abs(float(d)) if d is not None else 0.0 for d in list(dimensions or [])[:3]]
    extents += [0.0] * (3 - len(extents))
    if all(e == 0.0 for e in extents):
        return None
    half = np.asarray(extents) / 2.0
    signs = np.array([[sx, sy, sz] for sx in (-1, 1) for sy in (-1, 1) for sz in (-1, 1)], dtype=float)
    world = np.vstack([transform.apply(corner) for corner in signs * half])
    lo = world.min(axis=0)
    hi = world.max(axis=0)
    return AxisAlignedBox(
        min_corner=(float(lo[0]), float(lo[1]), float(lo[2])),
        max_corner=(float(hi[0]), float(hi[1]), float(hi[2])),
    )


def boxes_intersect(a: AxisAlignedBox, b: AxisAlignedBox) -> bool:
    """Inclusive overlap on all three axes; touching faces count."""
    for axis in range(3):
        if a.max_corner[axis] < b.min_corner[axis] or b.max_corner[axis] < a.min_corner[axis]:
            return False
    return True


def rectangle_footprint(transform: Transform, half_x: float, half_z: float) -> list[Point2D]:
    """World floor-plan corners of a local rectangle centered on the entity origin."""
    local = [(-half_x, -half_z), (half_x, -half_z), (half_x, half_z), (-half_x, half_z)]
    return [transform.to_floor_plan(x, z) for x, z in local]


__all__ = [
    "AxisAlignedBox",
    "Point2D",
    "Segment2D",
    "angle_between_directions",
    "apply_transform",
    "bounding_box_from_transform",
    "boxes_intersect",
    "deviation_from_collinear",
    "distance_between_segments",
    "min_corner_to_edge_distance",
    "point_segment_distance",
    "polygon_area",
    "polygon_perimeter",
    "project_to_floor_plan",
    "rectangle_footprint",
]
