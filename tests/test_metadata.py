"""Tests for the metadata record built from a full scan."""

from __future__ import annotations

import json

import pytest

from scancheck.exceptions import MetadataError
from scancheck.metadata.extract import compute_raw_scan_metadata, extract_metadata
from scancheck.metadata.record import RawScanMetadata
from scancheck.models.raw_scan import RawScan
from tests.utils_scan import make_door, make_floor, make_object, make_scan, make_wall, make_window, yaw_transform


def bathroom_document(**overrides) -> dict:
    """A 4 m x 3 m bathroom with a vanity, a toilet and a chair."""
    door = make_door("door-1", parent="wall-1", z=-1.5, is_open=True)
    door["confidence"] = {"low": {}}
    window = make_window("window-1", parent="wall-2", transform=yaw_transform(90.0, 2.0, 1.5, 0.0))
    storage = make_object("storage-1", "storage", length=1.2, height=0.9, width=0.5, x=-1.0, confidence="medium")
    storage["attributes"] = {"StorageType": "cabinet"}
    sink = make_object("sink-1", "sink", length=0.5, height=0.2, width=0.4, x=-1.0, y=0.95)
    toilet = make_object("toilet-1", "toilet", length=0.4, height=0.8, width=0.7, x=1.0, yaw=180.0, z=0.5)
    chair = make_object("chair-1", "chair", length=0.4, height=0.5, width=0.4, x=1.0, z=-0.5, confidence=None)
    chair["attributes"] = {"ChairType": "stool"}
    document = make_scan(
        walls=[
            make_wall("wall-1", length=4.0, z=-1.5),
            make_wall("wall-2", length=3.0, x=2.0, yaw=90.0),
            make_wall("wall-3", length=4.0, z=1.5),
            make_wall("wall-4", length=3.0, x=-2.0, yaw=90.0),
        ],
        doors=[door],
        windows=[window],
        floors=[make_floor()],
        objects=[storage, sink, toilet, chair],
        sections=[{"label": "bathroom", "story": 0, "center": [0, 0, 0]}],
    )
    document.update(overrides)
    return document


def _metadata(document: dict | None = None) -> RawScanMetadata:
    return compute_raw_scan_metadata(RawScan.from_dict(document or bathroom_document()))


def test_counts_and_presence():
    m = _metadata()
    assert (m.wall_count, m.door_count, m.window_count, m.opening_count) == (4, 1, 1, 0)
    assert (m.toilet_count, m.tub_count, m.sink_count, m.storage_count) == (1, 0, 1, 1)
    assert m.total_walls == 4
    assert (m.walls_with_doors, m.walls_with_windows, m.walls_with_openings) == (1, 1, 0)
    assert m.has_chair is True
    assert m.has_bed is False
    assert m.stories == [0]
    assert m.has_multiple_stories is False
    assert m.section_labels == ["bathroom"]


def test_room_area_in_both_units():
    m = _metadata()
    assert m.room_area_sq_m == pytest.approx(12.0)
    assert m.room_area_sq_ft == pytest.approx(129.17, abs=0.01)


def test_wall_and_door_measurements():
    m = _metadata()
    assert m.wall_widths == pytest.approx([4.0, 3.0, 4.0, 3.0])
    assert m.wall_heights == pytest.approx([2.4] * 4)
    assert m.wall_areas == pytest.approx([9.6, 7.2, 9.6, 7.2])
    assert m.wall_width_height_pairs[1].width == pytest.approx(3.0)
    assert m.door_widths == [0.9]
    assert m.door_areas == pytest.approx([1.8])
    assert m.window_widths == [1.0]
    assert m.opening_widths == []
    assert m.floor_lengths == pytest.approx([4.0])
    assert m.floor_widths == pytest.approx([3.0])


def test_vanity_tallies_and_attributes():
    m = _metadata()
    assert m.vanity_type == "normal"
    assert m.vanity_lengths == pytest.approx([1.2])
    assert m.confidence_counts == {
        "Door": [0, 0, 1],
        "Sink": [1, 0, 0],
        "Storage": [0, 1, 0],
        "Toilet": [1, 0, 0],
    }
    assert m.door_is_open_counts == {"Open": 1}
    assert m.object_attribute_counts == {"ChairType": {"stool": 1}, "StorageType": {"cabinet": 1}}


def test_clean_room_walls_pass_structural_checks():
    m = _metadata()
    assert m.has_crooked_wall_errors is False
    assert m.has_wall_gap_errors is False
    assert m.has_colinear_wall_errors is False
    assert m.has_wall_wall_intersection_errors is False
    assert m.has_door_floor_contact_error is False
    assert m.has_toilet_gap_errors is True


@pytest.mark.parametrize("version, expected", [(2, False), (3, True), ("2", True), (None, True)])
def test_unexpected_version_flag(version, expected):
    """Any version other than 2 is flagged but extraction still completes."""
    m = _metadata(bathroom_document(version=version))
    assert m.unexpected_version is expected
    assert m.wall_count == 4


def test_malformed_entities_are_left_out_of_their_measurement():
    document = bathroom_document()
    document["walls"][0]["dimensions"] = [0.0, 2.4, 0.0]
    document["doors"][0]["dimensions"] = [0.9]
    document["walls"][1]["transform"] = "identity"
    m = _metadata(document)
    assert m.wall_widths == pytest.approx([3.0, 4.0, 3.0])
    assert m.wall_heights == pytest.approx([2.4] * 4)
    assert len(m.wall_areas) == 3
    assert m.door_widths == []
    assert m.door_count == 1


def test_failing_check_does_not_abort_the_record(monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("detector exploded")

    monkeypatch.setattr("scancheck.metadata.extract.check_crooked_walls", boom)
    m = _metadata()
    assert m.has_crooked_wall_errors is False
    assert m.wall_count == 4


def test_extraction_is_deterministic():
    """Extracting the same document twice yields byte-identical JSON."""
    text = json.dumps(bathroom_document())
    first = extract_metadata(text).to_json()
    second = extract_metadata(text).to_json()
    assert first == second
    assert json.dumps(extract_metadata(text).to_dict(), sort_keys=True) == json.dumps(
        extract_metadata(json.loads(text)).to_dict(), sort_keys=True
    )


def test_record_uses_camel_case_keys_and_round_trips():
    m = _metadata()
    payload = m.to_dict()
    assert payload["hasCrookedWallErrors"] is False
    assert payload["roomAreaSqFt"] == pytest.approx(129.17, abs=0.01)
    assert payload["wallWidthHeightPairs"][0] == {"width": 4.0, "height": 2.4}
    assert RawScanMetadata.from_dict(payload) == m


def test_record_is_frozen():
    m = _metadata()
    with pytest.raises(Exception):
        m.wall_count = 7


def test_incomplete_record_is_rejected():
    payload = _metadata().to_dict()
    del payload["hasSoffit"]
    with pytest.raises(MetadataError):
        RawScanMetadata.from_dict(payload)
