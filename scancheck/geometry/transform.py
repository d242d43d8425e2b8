"""4x4 affine placement of a scan entity (local space -> world space)."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Sequence

import numpy as np

from scancheck.geometry.contract import MAT_TX, MAT_TY, MAT_TZ, TRANSFORM_SIZE


@dataclass(frozen=True)
class Transform:
    """
    Column-major 4x4 affine matrix stored as its 16 flat values.

    Columns 0-2 are the local X, Y and Z basis vectors in world space and
    column 3 is the translation. World Y is up; the floor plan is the X-Z
    plane.
    """

    values: tuple[float, ...]

    @classmethod
    def from_values(cls, values: Any) -> Transform | None:
        """Build a transform, or return None when ``values`` is not 16 finite numbers."""
        if isinstance(values, Transform):
            return values
        if not isinstance(values, (list, tuple)) or len(values) != TRANSFORM_SIZE:
            return None
        parsed: list[float] = []
        for item in values:
            if isinstance(item, bool) or not isinstance(item, (int, float)):
                return None
            try:
                number = float(item)
            except OverflowError:
                return None
            if not math.isfinite(number):
                return None
            parsed.append(number)
        return cls(tuple(parsed))

    @classmethod
    def identity(cls) -> Transform:
        return cls(tuple(float(v) for v in np.eye(4).flatten(order="F")))

    @classmethod
    def from_yaw(cls, degrees: float, translation: Sequence[float] = (0.0, 0.0, 0.0)) -> Transform:
        """Rotation about world Y followed by a translation."""
        rad = math.radians(degrees)
        c, s = math.cos(rad), math.sin(rad)
        tx, ty, tz = (float(v) for v in translation)
        return cls((c, 0.0, s, 0.0, 0.0, 1.0, 0.0, 0.0, -s, 0.0, c, 0.0, tx, ty, tz, 1.0))

    @property
    def matrix(self) -> np.ndarray:
        return np.asarray(self.values, dtype=float).reshape((4, 4), order="F")

    @property
    def translation(self) -> tuple[float, float, float]:
        return (self.values[MAT_TX], self.values[MAT_TY], self.values[MAT_TZ])

    def column(self, index: int) -> tuple[float, float, float]:
        start = index * 4
        return (self.values[start], self.values[start + 1], self.values[start + 2])

    def apply(self, point: Sequence[float]) -> np.ndarray:
        """Transform a local 3D point (missing coordinates read as 0)."""
        local = np.zeros(4)
        for i, value in enumerate(list(point)[:3]):
            local[i] = float(value)
        local[3] = 1.0
        return (self.matrix @ local)[:3]

    def to_floor_plan(self, local_x: float, local_z: float) -> tuple[float, float]:
        """Project a local (X, Z) point to world floor-plan coordinates (X, Z)."""
        world = self.apply((local_x, 0.0, local_z))
        return (float(world[0]), float(world[2]))
