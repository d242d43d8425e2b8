"""
Metadata Extraction

Entry points that turn a scan document into a ``RawScanMetadata`` record:
``compute_raw_scan_metadata`` (pure, no cache), ``extract_metadata`` (with an
optional injected cache) and ``extract_batch`` (many artifacts in parallel).
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Iterable, Mapping, TypeVar

from loguru import logger

from scancheck.checks.doors import check_door_blocking, check_door_floor_contact
from scancheck.checks.objects import IntersectionResult, check_intersections, check_toilet_gaps, check_tub_gaps
from scancheck.checks.openings import (
    check_external_opening,
    has_curved_embedded,
    has_curved_wall,
    has_floors_with_parent_id,
    has_non_empty_completed_edges,
    has_non_rectangular_embedded,
    has_non_rectangular_wall,
    has_unparented_embedded,
)
from scancheck.checks.vanity import VanityType, find_vanity_candidate
from scancheck.checks.walls import (
    check_colinear_walls,
    check_crooked_walls,
    check_low_ceiling,
    check_nib_walls,
    check_wall_gaps,
    wall_has_soffit,
)
from scancheck.exceptions import CacheError, MetadataError, ScanCheckError
from scancheck.metadata import measurements
from scancheck.metadata.record import RawScanMetadata
from scancheck.models.raw_scan import RawScan, load_raw_scan
from scancheck.settings import CheckSettings
from scancheck.storage import MetadataStore

T = TypeVar("T")


def _guarded(name: str, fn: Callable[[], T], default: T) -> T:
    """Run one detector or measurement; a failure yields ``default`` and a warning."""
    try:
        return fn()
    except Exception as exc:
        logger.warning("{} failed, using {!r}: {}", name, default, exc)
        return default


def compute_raw_scan_metadata(scan: RawScan, settings: CheckSettings | None = None) -> RawScanMetadata:
    """Run every check and measurement over one parsed scan. No I/O, no caching."""
    if settings is None:
        settings = CheckSettings.default()

    unexpected_version = scan.version != settings.expected_version
    if unexpected_version:
        logger.warning(
            "Unexpected raw scan version {} (expected {}), extracting anyway",
            scan.version,
            settings.expected_version,
        )

    intersections = _guarded("check_intersections", lambda: check_intersections(scan, settings), IntersectionResult())
    vanity = _guarded("find_vanity_candidate", lambda: find_vanity_candidate(scan), None)
    stories = scan.stories()

    fields: dict[str, Any] = {
        "scan_version": scan.version,
        "unexpected_version": unexpected_version,
        "section_labels": [s.label for s in scan.sections if s.label is not None],
        "stories": stories,
        "has_multiple_stories": len(stories) > 1,
        "vanity_type": vanity.vanity_type.value if vanity is not None else VanityType.NO_VANITY.value,
        "has_object_intersection_errors": intersections.has_object_intersection_errors,
        "has_wall_object_intersection_errors": intersections.has_wall_object_intersection_errors,
        "has_wall_wall_intersection_errors": intersections.has_wall_wall_intersection_errors,
        "has_embedded_object_intersection_errors": intersections.has_embedded_object_intersection_errors,
    }

    checks: dict[str, Callable[[], bool]] = {
        "has_crooked_wall_errors": lambda: check_crooked_walls(scan, settings),
        "has_wall_gap_errors": lambda: check_wall_gaps(scan, settings),
        "has_colinear_wall_errors": lambda: check_colinear_walls(scan, settings),
        "has_nib_walls": lambda: check_nib_walls(scan, settings),
        "has_door_floor_contact_error": lambda: check_door_floor_contact(scan, settings),
        "has_door_blocking_error": lambda: check_door_blocking(scan, settings),
        "has_toilet_gap_errors": lambda: check_toilet_gaps(scan, settings),
        "has_tub_gap_errors": lambda: check_tub_gaps(scan, settings),
        "has_external_opening": lambda: check_external_opening(scan, settings),
        "has_low_ceiling": lambda: check_low_ceiling(scan, settings),
        "has_soffit": lambda: any(wall_has_soffit(w) for w in scan.walls),
        "has_non_rect_wall": lambda: has_non_rectangular_wall(scan),
        "has_curved_wall": lambda: has_curved_wall(scan),
        "has_curved_embedded": lambda: has_curved_embedded(scan),
        "has_non_rectangular_embedded": lambda: has_non_rectangular_embedded(scan),
        "has_unparented_embedded": lambda: has_unparented_embedded(scan),
        "has_non_empty_completed_edges": lambda: has_non_empty_completed_edges(scan),
        "has_floors_with_parent_id": lambda: has_floors_with_parent_id(scan),
    }
    for name, check in checks.items():
        fields[name] = _guarded(name, check, False)

    fields.update(measurements.entity_counts(scan))
    fields.update(measurements.object_presence(scan))
    fields.update(measurements.wall_embedded_counts(scan))
    fields.update(measurements.room_area_data(scan))
    fields.update(measurements.dimension_area_data(scan))
    fields.update(measurements.attribute_data(scan))
    fields["confidence_counts"] = measurements.confidence_counts(scan)

    return RawScanMetadata(**fields)


def extract_metadata(
    source: str | bytes | Mapping[str, Any] | RawScan,
    *,
    store: MetadataStore | None = None,
    key: str | None = None,
    settings: CheckSettings | None = None,
) -> RawScanMetadata:
    """
    Metadata for one artifact, served from ``store`` when a valid entry exists.

    An invalid or unreadable cache entry is recomputed and overwritten. A
    failed cache write is logged and the computed record is still returned.

    Raises:
        ScanParseError: the source document is not valid JSON or not an object
    """
    use_cache = store is not None and key is not None
    if use_cache:
        cached = store.get(key)
        if cached is not None:
            try:
                return RawScanMetadata.from_dict(cached)
            except MetadataError as exc:
                logger.info("Recomputing stale metadata cache for {}: {}", key, exc.message)

    scan = load_raw_scan(source)
    metadata = compute_raw_scan_metadata(scan, settings)

    if use_cache:
        try:
            store.put(key, metadata.to_dict())
        except CacheError as exc:
            logger.warning("{} ({})", exc.message, exc.details.get("error", ""))
    return metadata


def extract_batch(
    documents: Mapping[str, str | bytes | Mapping[str, Any] | RawScan] | Iterable[tuple[str, Any]],
    *,
    store: MetadataStore | None = None,
    settings: CheckSettings | None = None,
    max_workers: int | None = None,
) -> dict[str, RawScanMetadata]:
    """
    Extract many artifacts concurrently, keyed by artifact key.

    Artifacts whose document cannot be parsed, or whose extraction fails, are
    logged and left out; they never stop the rest of the batch. Results keep
    the input order.
    """
    items = list(documents.items()) if isinstance(documents, Mapping) else list(documents)

    def run(item: tuple[str, Any]) -> tuple[str, RawScanMetadata | None]:
        artifact_key, source = item
        try:
            return artifact_key, extract_metadata(source, store=store, key=artifact_key, settings=settings)
        except ScanCheckError as exc:
            logger.warning("Skipping artifact {}: {}", artifact_key, exc.message)
            return artifact_key, None
        except Exception:
            logger.exception("Skipping artifact {}: extraction failed", artifact_key)
            return artifact_key, None

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        results = list(pool.map(run, items))

    logger.info("Extracted metadata for {}/{} artifacts", sum(1 for _, m in results if m is not None), len(items))
    return {artifact_key: metadata for artifact_key, metadata in results if metadata is not None}


__all__ = ["compute_raw_scan_metadata", "extract_batch", "extract_metadata"]
