"""Tests for cached and batch extraction."""

from __future__ import annotations

import json

import pytest

from scancheck.exceptions import CacheError, ScanParseError
from scancheck.metadata import extract as extract_module
from scancheck.metadata.extract import extract_batch, extract_metadata
from scancheck.storage.local import METADATA_FILENAME, LocalMetadataStore
from scancheck.storage.memory import InMemoryMetadataStore
from tests.test_metadata import bathroom_document
from tests.utils_scan import make_scan, make_wall


def test_cache_is_filled_then_served():
    """A valid cache entry is returned without looking at the source again."""
    store = InMemoryMetadataStore()
    first = extract_metadata(bathroom_document(), store=store, key="artifact-1")
    assert "artifact-1" in store

    different_source = make_scan(walls=[make_wall("w", length=1.0)])
    cached = extract_metadata(different_source, store=store, key="artifact-1")
    assert cached == first
    assert cached.wall_count == 4


def test_invalid_cache_entry_is_recomputed_and_overwritten():
    store = InMemoryMetadataStore({"artifact-1": {"wallCount": "many"}})
    metadata = extract_metadata(bathroom_document(), store=store, key="artifact-1")
    assert metadata.wall_count == 4
    assert store.get("artifact-1")["wallCount"] == 4


def test_no_key_means_no_caching():
    store = InMemoryMetadataStore()
    extract_metadata(bathroom_document(), store=store)
    assert len(store) == 0


def test_cache_write_failure_still_returns_record():
    class FailingStore(InMemoryMetadataStore):
        def put(self, key, payload):
            raise CacheError("Failed to write metadata cache", {"error": "disk full"})

    metadata = extract_metadata(bathroom_document(), store=FailingStore(), key="artifact-1")
    assert metadata.wall_count == 4


def test_invalid_document_raises_parse_error():
    with pytest.raises(ScanParseError):
        extract_metadata("not json at all")


def test_local_store_writes_one_file_per_artifact(tmp_path):
    store = LocalMetadataStore(tmp_path)
    metadata = extract_metadata(bathroom_document(), store=store, key="artifact-1")
    path = tmp_path / "artifact-1" / METADATA_FILENAME
    assert path.exists()
    assert json.loads(path.read_text(encoding="utf-8"))["wallCount"] == 4
    assert extract_metadata("ignored because cached", store=store, key="artifact-1") == metadata


def test_local_store_ignores_corrupt_file(tmp_path):
    store = LocalMetadataStore(tmp_path)
    path = store.path_for("artifact-1")
    path.parent.mkdir(parents=True)
    path.write_text("{broken", encoding="utf-8")
    assert store.get("artifact-1") is None

    metadata = extract_metadata(bathroom_document(), store=store, key="artifact-1")
    assert json.loads(path.read_text(encoding="utf-8"))["wallCount"] == metadata.wall_count


def test_local_store_write_failure_raises_cache_error(tmp_path):
    store = LocalMetadataStore(tmp_path)
    # A plain file where the artifact directory should be
    (tmp_path / "artifact-1").write_text("", encoding="utf-8")
    with pytest.raises(CacheError):
        store.put("artifact-1", {"wallCount": 1})


def test_batch_skips_unparsable_artifacts():
    documents = {
        "good": bathroom_document(),
        "broken": "{not json",
        "list": "[1, 2]",
        "also-good": json.dumps(bathroom_document(version=3)),
    }
    results = extract_batch(documents, max_workers=2)
    assert list(results) == ["good", "also-good"]
    assert results["also-good"].unexpected_version is True


def test_batch_accepts_pairs_and_store():
    store = InMemoryMetadataStore()
    results = extract_batch([("a", bathroom_document()), ("b", bathroom_document())], store=store)
    assert set(results) == {"a", "b"}
    assert len(store) == 2


def test_batch_isolates_failing_artifacts(monkeypatch):
    """One artifact that blows up during extraction does not cost the others."""
    documents = {
        "deep": "[" * 100000,
        "huge-story": '{"version": 2, "story": 1' + "0" * 400 + "}",
        "good": bathroom_document(),
        "crashes": bathroom_document(version=7),
    }

    real_compute = extract_module.compute_raw_scan_metadata

    def flaky_compute(scan, settings=None):
        if scan.version == 7:
            raise RuntimeError("boom")
        return real_compute(scan, settings)

    monkeypatch.setattr(extract_module, "compute_raw_scan_metadata", flaky_compute)
    results = extract_batch(documents, max_workers=2)
    assert list(results) == ["huge-story", "good"]
    assert results["good"].wall_count == 4


def test_local_store_rejects_keys_outside_root(tmp_path):
    store = LocalMetadataStore(tmp_path / "cache")
    for key in ("..", "../escape", "a/b", ""):
        with pytest.raises(CacheError):
            store.path_for(key)
