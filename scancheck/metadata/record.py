"""Metadata record produced for one scan."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from scancheck.exceptions import MetadataError


class _Record(BaseModel):
    """Frozen model serialized with camelCase keys, accepting either spelling on input."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class WidthHeightPair(_Record):
    """Width and height of one entity in meters."""
    width: float
    height: float


class RawScanMetadata(_Record):
    """
    Flat summary of a scan: counts, presence flags, defect flags and
    measurement lists. Lengths are meters, areas square meters unless the
    field name says otherwise.
    """

    # Version
    scan_version: Optional[int] = Field(..., description="Version declared by the scan document")
    unexpected_version: bool

    # Counts
    wall_count: int
    door_count: int
    window_count: int
    opening_count: int
    toilet_count: int
    tub_count: int
    sink_count: int
    storage_count: int
    total_walls: int
    walls_with_doors: int
    walls_with_windows: int
    walls_with_openings: int

    # Room
    room_area_sq_m: float
    room_area_sq_ft: float
    section_labels: List[str]
    stories: List[int]
    has_multiple_stories: bool

    # Object presence
    has_bed: bool
    has_chair: bool
    has_dishwasher: bool
    has_fireplace: bool
    has_oven: bool
    has_refrigerator: bool
    has_sofa: bool
    has_stairs: bool
    has_stove: bool
    has_table: bool
    has_television: bool
    has_washer_dryer: bool

    # Shape flags
    has_non_rect_wall: bool
    has_curved_wall: bool
    has_curved_embedded: bool
    has_non_rectangular_embedded: bool
    has_unparented_embedded: bool
    has_non_empty_completed_edges: bool
    has_floors_with_parent_id: bool
    has_soffit: bool
    has_low_ceiling: bool
    has_external_opening: bool

    # Defect flags
    has_crooked_wall_errors: bool
    has_wall_gap_errors: bool
    has_colinear_wall_errors: bool
    has_nib_walls: bool
    has_door_floor_contact_error: bool
    has_door_blocking_error: bool
    has_object_intersection_errors: bool
    has_wall_object_intersection_errors: bool
    has_wall_wall_intersection_errors: bool
    has_embedded_object_intersection_errors: bool
    has_toilet_gap_errors: bool
    has_tub_gap_errors: bool

    # Measurements
    wall_heights: List[float]
    wall_widths: List[float]
    wall_areas: List[float]
    wall_width_height_pairs: List[WidthHeightPair]
    door_heights: List[float]
    door_widths: List[float]
    door_areas: List[float]
    door_width_height_pairs: List[WidthHeightPair]
    window_heights: List[float]
    window_widths: List[float]
    window_areas: List[float]
    window_width_height_pairs: List[WidthHeightPair]
    opening_heights: List[float]
    opening_widths: List[float]
    opening_areas: List[float]
    opening_width_height_pairs: List[WidthHeightPair]
    floor_lengths: List[float]
    floor_widths: List[float]
    floor_width_height_pairs: List[WidthHeightPair]
    tub_lengths: List[float]

    # Vanity
    vanity_type: str
    vanity_lengths: List[float]

    # Tallies
    confidence_counts: Dict[str, List[int]] = Field(
        ..., description="Per category label: [high, medium, low]"
    )
    door_is_open_counts: Dict[str, int]
    object_attribute_counts: Dict[str, Dict[str, int]]

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_dict(cls, payload: Any) -> "RawScanMetadata":
        """Restore a record, e.g. from a cache entry. Raises MetadataError if it does not fit."""
        try:
            return cls.model_validate(payload)
        except ValidationError as exc:
            raise MetadataError(
                "Invalid metadata record",
                {"errors": str(exc.error_count())},
            ) from exc


__all__ = ["RawScanMetadata", "WidthHeightPair"]
