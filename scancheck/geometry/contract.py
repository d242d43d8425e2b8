from __future__ import annotations

"""
Geometry Contract

Single source of truth for the constants, default tolerances and unit
conversions shared by the scan checks. Lengths are in meters unless the name
says otherwise.
"""

# Transforms
TRANSFORM_SIZE = 16  # flat column-major 4x4
EPSILON = 1e-10  # floating point noise floor for geometric predicates
BOUNDARY_TOLERANCE = 1e-9  # slack applied to inclusive threshold comparisons

# Matrix indices (column-major)
MAT_TX = 12
MAT_TY = 13
MAT_TZ = 14

# Dimension indices: [length, height, width]
DIM_LENGTH = 0
DIM_HEIGHT = 1
DIM_WIDTH = 2

# Units
METERS_PER_INCH = 0.0254
INCHES_PER_FOOT = 12.0
METERS_PER_FOOT = METERS_PER_INCH * INCHES_PER_FOOT
SQUARE_FEET_PER_SQUARE_METER = 1.0 / (METERS_PER_FOOT * METERS_PER_FOOT)

# Defaults (see CheckSettings for the configurable copies)
TOUCHING_THRESHOLD_INCHES = 1.0
TOUCHING_THRESHOLD_METERS = TOUCHING_THRESHOLD_INCHES * METERS_PER_INCH
WALL_GAP_MAX_INCHES = 12.0
CROOKED_ANGLE_MAX_DEG = 5.0
CORNER_JUNCTION_MIN_DEG = 45.0
COLINEAR_WALL_GAP_MAX_INCHES = 3.0
COLINEAR_WALL_PARALLEL_THRESHOLD = 0.996
NIB_WALL_THRESHOLD_FT = 1.0
LOW_CEILING_THRESHOLD_FT = 7.5
TUB_GAP_MIN_INCHES = 1.0
TUB_GAP_MAX_INCHES = 6.0
DOOR_CLEARANCE_METERS = 0.6
STEP_OVER_HEIGHT_METERS = 0.05
DOOR_WIDTH_SHRINK_METERS = 0.1
OVERLAP_TOLERANCE_METERS = 0.0254
DEFAULT_WALL_THICKNESS_METERS = 0.15
EXTERNAL_OPENING_PERIMETER_METERS = 0.5
EXPECTED_SCAN_VERSION = 2

# Consumer thresholds
MIN_WALL_AREA_SQ_FT = 1.5
NARROW_DOOR_WIDTH_FT = 2.5
NARROW_OPENING_WIDTH_FT = 3.0
SHORT_DOOR_HEIGHT_FT = 6.5

# Soffit detection (re-entrant corner angle band)
SOFFIT_MIN_ANGLE_DEG = 260.0
SOFFIT_MAX_ANGLE_DEG = 280.0


def inches_to_meters(value_in: float) -> float:
    """Convert inches to meters."""
    return float(value_in * METERS_PER_INCH)


def feet_to_meters(value_ft: float) -> float:
    """Convert feet to meters."""
    return float(value_ft * METERS_PER_FOOT)


def meters_to_inches(value_m: float) -> float:
    """Convert meters to inches."""
    return float(value_m / METERS_PER_INCH)


def meters_to_feet(value_m: float) -> float:
    """Convert meters to feet."""
    return float(value_m / METERS_PER_FOOT)


def square_meters_to_square_feet(value_m2: float) -> float:
    """Convert square meters to square feet."""
    return float(value_m2 * SQUARE_FEET_PER_SQUARE_METER)


def square_feet_to_square_meters(value_ft2: float) -> float:
    """Convert square feet to square meters."""
    return float(value_ft2 / SQUARE_FEET_PER_SQUARE_METER)
