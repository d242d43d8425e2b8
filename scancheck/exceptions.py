"""Custom exception hierarchy for scancheck."""

from __future__ import annotations


class ScanCheckError(Exception):
    """Base exception for all scancheck-specific errors."""
    
    def __init__(self, message: str, details: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(ScanCheckError):
    """Raised when configuration is invalid or missing."""
    pass


class ScanParseError(ScanCheckError):
    """Raised when a scan document cannot be parsed into a RawScan."""
    pass


class MetadataError(ScanCheckError):
    """Raised when a metadata record cannot be built or restored."""
    pass


class CacheError(MetadataError):
    """Raised when a metadata cache entry cannot be read or written."""
    pass
