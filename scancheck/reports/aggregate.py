"""
Aggregation over many metadata records.

Reporting code builds distributions and artifact lists from
``(artifact_key, RawScanMetadata)`` pairs. Nothing here touches a scan
document; records come from ``extract_metadata`` / ``extract_batch``.
"""

from __future__ import annotations

from collections import Counter
from typing import Any, Callable, Iterable, Iterator, Mapping, Sequence, Tuple, Union

import numpy as np

from scancheck.geometry import contract
from scancheck.metadata.record import RawScanMetadata

Records = Union[Mapping[str, RawScanMetadata], Iterable[Tuple[str, RawScanMetadata]]]
Selector = Union[str, Callable[[RawScanMetadata], Any]]

EMBEDDED_COUNT_FIELDS = ("walls_with_doors", "walls_with_windows", "walls_with_openings", "total_walls")


def iter_records(records: Records) -> Iterator[Tuple[str, RawScanMetadata]]:
    items = records.items() if isinstance(records, Mapping) else records
    for key, metadata in items:
        if metadata is not None:
            yield key, metadata


def _select(metadata: RawScanMetadata, selector: Selector) -> Any:
    if isinstance(selector, str):
        return getattr(metadata, selector)
    return selector(metadata)


def collect(records: Records, selector: Selector) -> list[Any]:
    """Concatenate a list field (or selector result) across all records."""
    out: list[Any] = []
    for _, metadata in iter_records(records):
        out.extend(_select(metadata, selector) or [])
    return out


def _scale(values: Sequence[float], factor: float) -> list[float]:
    if len(values) == 0:
        return []
    return (np.asarray(values, dtype=float) * factor).tolist()


def convert_areas_to_square_feet(values: Sequence[float]) -> list[float]:
    return _scale(values, contract.SQUARE_FEET_PER_SQUARE_METER)


def convert_lengths_to_feet(values: Sequence[float]) -> list[float]:
    return _scale(values, 1.0 / contract.METERS_PER_FOOT)


def convert_lengths_to_inches(values: Sequence[float]) -> list[float]:
    return _scale(values, 1.0 / contract.METERS_PER_INCH)


def count_by_key(records: Records, key_fn: Selector) -> dict[str, int]:
    """Histogram of a per-record key; records whose key is None are skipped."""
    counts: Counter[str] = Counter()
    for _, metadata in iter_records(records):
        key = _select(metadata, key_fn)
        if key is None:
            continue
        counts[str(key)] += 1
    return dict(counts)


def merge_count_maps(records: Records, map_fn: Selector) -> dict[str, int]:
    """Sum a per-record ``{key: count}`` mapping across records."""
    counts: Counter[str] = Counter()
    for _, metadata in iter_records(records):
        counts.update(_select(metadata, map_fn) or {})
    return dict(counts)


def merge_attribute_counts(records: Records) -> dict[str, dict[str, int]]:
    merged: dict[str, Counter[str]] = {}
    for _, metadata in iter_records(records):
        for name, values in metadata.object_attribute_counts.items():
            merged.setdefault(name, Counter()).update(values)
    return {name: dict(counts) for name, counts in merged.items()}


def total_embedded_counts(records: Records) -> dict[str, int]:
    totals = dict.fromkeys(EMBEDDED_COUNT_FIELDS, 0)
    for _, metadata in iter_records(records):
        for field in EMBEDDED_COUNT_FIELDS:
            totals[field] += getattr(metadata, field)
    return totals


def merged_confidence_counts(records: Records) -> dict[str, list[int]]:
    """Element-wise sum of the ``[high, medium, low]`` tallies per category label."""
    merged: dict[str, np.ndarray] = {}
    for _, metadata in iter_records(records):
        for label, counts in metadata.confidence_counts.items():
            merged[label] = merged.get(label, np.zeros(3, dtype=int)) + np.asarray(counts, dtype=int)
    return {label: [int(c) for c in counts] for label, counts in sorted(merged.items())}


def artifacts_where(records: Records, predicate: Callable[[RawScanMetadata], bool]) -> set[str]:
    return {key for key, metadata in iter_records(records) if predicate(metadata)}


def _any_below(values: Iterable[float], threshold: float) -> bool:
    return any(0.0 < v < threshold for v in values)


def artifacts_with_unexpected_version(records: Records) -> set[str]:
    return artifacts_where(records, lambda m: m.unexpected_version)


def artifacts_with_small_walls(records: Records, min_area_sq_ft: float = contract.MIN_WALL_AREA_SQ_FT) -> set[str]:
    return artifacts_where(records, lambda m: _any_below(convert_areas_to_square_feet(m.wall_areas), min_area_sq_ft))


def artifacts_with_narrow_doors(records: Records, min_width_ft: float = contract.NARROW_DOOR_WIDTH_FT) -> set[str]:
    return artifacts_where(records, lambda m: _any_below(convert_lengths_to_feet(m.door_widths), min_width_ft))


def artifacts_with_narrow_openings(
    records: Records, min_width_ft: float = contract.NARROW_OPENING_WIDTH_FT
) -> set[str]:
    return artifacts_where(records, lambda m: _any_below(convert_lengths_to_feet(m.opening_widths), min_width_ft))


def artifacts_with_short_doors(records: Records, min_height_ft: float = contract.SHORT_DOOR_HEIGHT_FT) -> set[str]:
    return artifacts_where(records, lambda m: _any_below(convert_lengths_to_feet(m.door_heights), min_height_ft))


__all__ = [
    "artifacts_where",
    "artifacts_with_narrow_doors",
    "artifacts_with_narrow_openings",
    "artifacts_with_short_doors",
    "artifacts_with_small_walls",
    "artifacts_with_unexpected_version",
    "collect",
    "convert_areas_to_square_feet",
    "convert_lengths_to_feet",
    "convert_lengths_to_inches",
    "count_by_key",
    "iter_records",
    "merge_attribute_counts",
    "merge_count_maps",
    "merged_confidence_counts",
    "total_embedded_counts",
]
