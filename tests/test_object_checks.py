"""Tests for overlap detection and bathroom fixture gaps."""

from __future__ import annotations

from scancheck.checks.objects import check_intersections, check_toilet_gaps, check_tub_gaps
from scancheck.models.raw_scan import RawScan
from tests.utils_scan import INCH, make_door, make_object, make_scan, make_wall, make_window, yaw_transform


def _scan(**kwargs) -> RawScan:
    return RawScan.from_dict(make_scan(**kwargs))


def _back_wall() -> dict:
    # Runs along X at z = 0, from x = -2 to x = 2
    return make_wall("wall-1", length=4.0)


def test_overlapping_objects_are_flagged():
    table = make_object("table-1", "table", length=1.0, height=0.75, width=1.0, z=2.0)
    chair = make_object("chair-1", "chair", length=0.5, height=0.9, width=0.5, x=0.4, z=2.0)
    result = check_intersections(_scan(objects=[table, chair]))
    assert result.has_object_intersection_errors is True


def test_objects_touching_within_an_inch_are_not_flagged():
    left = make_object("table-1", "table", length=1.0, height=0.75, width=1.0, z=2.0)
    right = make_object("chair-1", "chair", length=0.5, height=0.9, width=0.5, x=0.75 - 0.5 * INCH, z=2.0)
    result = check_intersections(_scan(objects=[left, right]))
    assert result.has_object_intersection_errors is False


def test_sink_in_storage_is_not_an_intersection():
    storage = make_object("storage-1", "storage", length=1.2, height=0.9, width=0.5, z=2.0)
    sink = make_object("sink-1", "sink", length=0.5, height=0.2, width=0.4, y=0.9, z=2.0)
    result = check_intersections(_scan(objects=[storage, sink]))
    assert result.has_object_intersection_errors is False


def test_object_through_wall_is_flagged():
    table = make_object("table-1", "table", length=1.0, height=0.75, width=1.0)
    result = check_intersections(_scan(walls=[_back_wall()], objects=[table]))
    assert result.has_wall_object_intersection_errors is True
    clear = make_object("table-1", "table", length=1.0, height=0.75, width=1.0, z=0.6)
    result = check_intersections(_scan(walls=[_back_wall()], objects=[clear]))
    assert result.has_wall_object_intersection_errors is False


def test_embedded_items_overlapping_in_same_wall():
    door = make_door("door-1", width=0.9, x=0.0)
    window = make_window("window-1", width=1.0, transform=yaw_transform(0.0, 0.5, 1.5, 0.0))
    elsewhere = make_window("window-1", width=1.0, transform=yaw_transform(0.0, 1.5, 1.5, 0.0))
    other_wall = make_window("window-1", width=1.0, parent="wall-2", transform=yaw_transform(0.0, 0.5, 1.5, 0.0))
    overlap = check_intersections(_scan(doors=[door], windows=[window]))
    assert overlap.has_embedded_object_intersection_errors is True
    assert check_intersections(_scan(doors=[door], windows=[elsewhere])).has_embedded_object_intersection_errors is False
    assert check_intersections(_scan(doors=[door], windows=[other_wall])).has_embedded_object_intersection_errors is False


def test_empty_scan_has_no_intersections():
    result = check_intersections(_scan())
    assert not any(
        [
            result.has_object_intersection_errors,
            result.has_wall_object_intersection_errors,
            result.has_wall_wall_intersection_errors,
            result.has_embedded_object_intersection_errors,
        ]
    )


def _toilet(z: float, **extra) -> dict:
    # 0.7 m deep; back face at z - 0.35
    return make_object("toilet-1", "toilet", length=0.4, height=0.8, width=0.7, z=z, **extra)


def test_toilet_against_wall_is_fine():
    assert check_toilet_gaps(_scan(walls=[_back_wall()], objects=[_toilet(0.35)])) is False


def test_toilet_pulled_away_from_wall_is_flagged():
    assert check_toilet_gaps(_scan(walls=[_back_wall()], objects=[_toilet(0.35 + 2.0 * INCH)])) is True


def test_toilet_without_wall_on_story_is_flagged():
    assert check_toilet_gaps(_scan(walls=[_back_wall()], objects=[_toilet(0.35, story=1)])) is True
    assert check_toilet_gaps(_scan(objects=[_toilet(0.35)])) is True


def test_no_toilet_no_gap_error():
    assert check_toilet_gaps(_scan(walls=[_back_wall()])) is False


def _tub(gap: float) -> dict:
    # 0.8 m wide tub whose long side faces the wall across ``gap``
    return make_object("tub-1", "bathtub", length=1.5, height=0.5, width=0.8, z=0.4 + gap)


def test_tub_gap_band():
    assert check_tub_gaps(_scan(walls=[_back_wall()], objects=[_tub(3.0 * INCH)])) is True
    assert check_tub_gaps(_scan(walls=[_back_wall()], objects=[_tub(1.0 * INCH)])) is True
    assert check_tub_gaps(_scan(walls=[_back_wall()], objects=[_tub(6.0 * INCH)])) is True


def test_tub_flush_or_far_is_fine():
    assert check_tub_gaps(_scan(walls=[_back_wall()], objects=[_tub(0.0)])) is False
    assert check_tub_gaps(_scan(walls=[_back_wall()], objects=[_tub(10.0 * INCH)])) is False
