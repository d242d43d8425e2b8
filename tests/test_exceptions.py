"""Tests for custom exception hierarchy."""

import pytest

from scancheck.exceptions import (
    CacheError,
    ConfigurationError,
    MetadataError,
    ScanCheckError,
    ScanParseError,
)


def test_scancheck_error_base():
    """Test base ScanCheckError."""
    error = ScanCheckError("Test error", {"key": "value"})
    assert str(error) == "Test error"
    assert error.message == "Test error"
    assert error.details == {"key": "value"}


def test_details_default_to_empty_dict():
    assert ScanCheckError("Test error").details == {}


def test_configuration_error():
    """Test ConfigurationError."""
    error = ConfigurationError("Config missing", {"path": "config.yaml"})
    assert isinstance(error, ScanCheckError)
    assert error.message == "Config missing"


def test_scan_parse_error():
    error = ScanParseError("Invalid raw scan", {"type": "list"})
    assert isinstance(error, ScanCheckError)
    assert error.details["type"] == "list"


def test_cache_error_is_metadata_error():
    """Callers that handle MetadataError also handle cache failures."""
    error = CacheError("Failed to write metadata cache", {"path": "/tmp/x"})
    assert isinstance(error, MetadataError)
    assert isinstance(error, ScanCheckError)


def test_exception_raising():
    with pytest.raises(ScanCheckError) as exc_info:
        raise MetadataError("Invalid metadata record")
    assert exc_info.value.message == "Invalid metadata record"
