"""Metadata cache abstraction (in-memory or local filesystem)."""

from __future__ import annotations

from typing import Any, Mapping, Protocol


class MetadataStore(Protocol):
    def get(self, key: str) -> Mapping[str, Any] | None:  # None when absent or unreadable
        ...

    def put(self, key: str, payload: Mapping[str, Any]) -> None:  # overwrites
        ...
