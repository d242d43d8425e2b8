"""
Vanity Classification

A vanity is a sink set into (or onto) a storage cabinet. Each story is
classified independently from the world bounding boxes of its sink and storage
objects; the scan-level type is the most complete vanity found on any story.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from scancheck.geometry.primitives import AxisAlignedBox, bounding_box_from_transform, boxes_intersect
from scancheck.models.raw_scan import Category, Dimensions, RawScan, ScanEntity


class VanityType(str, Enum):
    NORMAL = "normal"
    SINK_ONLY = "sink only"
    STORAGE_ONLY = "storage only"
    NO_VANITY = "no vanity"


# Scan-level precedence, most complete first
VANITY_PRECEDENCE = (VanityType.NORMAL, VanityType.SINK_ONLY, VanityType.STORAGE_ONLY, VanityType.NO_VANITY)


@dataclass(frozen=True)
class VanityCandidate:
    vanity_type: VanityType
    selected_object: ScanEntity | None = None
    story: int | None = None

    @property
    def length(self) -> float | None:
        """Length of the selected object when it is known and positive."""
        if self.selected_object is None:
            return None
        return Dimensions.known(self.selected_object.dimensions.length)


def _box(entity: ScanEntity) -> AxisAlignedBox | None:
    return bounding_box_from_transform(entity.transform, entity.dimensions.as_list())


def _classify(story: int, sinks: list[ScanEntity], storages: list[ScanEntity]) -> VanityCandidate:
    sink_boxes = [b for b in (_box(s) for s in sinks) if b is not None]
    for storage in storages:
        storage_box = _box(storage)
        if storage_box is None:
            continue
        if any(boxes_intersect(storage_box, sink_box) for sink_box in sink_boxes):
            return VanityCandidate(VanityType.NORMAL, storage, story)
    if sinks:
        return VanityCandidate(VanityType.SINK_ONLY, sinks[0], story)
    if storages:
        largest = max(storages, key=lambda s: Dimensions.known(s.dimensions.length) or 0.0)
        return VanityCandidate(VanityType.STORAGE_ONLY, largest, story)
    return VanityCandidate(VanityType.NO_VANITY, None, story)


def classify_vanity_by_story(scan: RawScan) -> list[VanityCandidate]:
    """
    One candidate per story, in story order.

    Stories come from the walls plus any story holding a sink or storage
    object, so a scan without walls still gets its vanity classified.
    """
    sinks = scan.objects_of(Category.SINK)
    storages = scan.objects_of(Category.STORAGE)
    stories = sorted(set(scan.stories()) | {o.story for o in sinks + storages})
    return [
        _classify(
            story,
            [s for s in sinks if s.story == story],
            [s for s in storages if s.story == story],
        )
        for story in stories
    ]


def find_vanity_candidate(scan: RawScan) -> VanityCandidate:
    """Scan-level vanity: the first story holding the most complete vanity type."""
    candidates = classify_vanity_by_story(scan)
    for vanity_type in VANITY_PRECEDENCE:
        for candidate in candidates:
            if candidate.vanity_type is vanity_type:
                return candidate
    return VanityCandidate(VanityType.NO_VANITY)


def vanity_lengths(scan: RawScan) -> list[float]:
    """Positive vanity lengths, one per story that has a vanity."""
    return [c.length for c in classify_vanity_by_story(scan) if c.length is not None]


__all__ = [
    "VanityCandidate",
    "VanityType",
    "classify_vanity_by_story",
    "find_vanity_candidate",
    "vanity_lengths",
]
