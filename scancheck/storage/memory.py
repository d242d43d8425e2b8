from __future__ import annotations

import copy
import threading
from typing import Any, Mapping


class InMemoryMetadataStore:
    """Dict-backed store; entries are deep-copied on the way in and out."""

    def __init__(self, entries: Mapping[str, Mapping[str, Any]] | None = None) -> None:
        self._entries: dict[str, dict[str, Any]] = {k: copy.deepcopy(dict(v)) for k, v in (entries or {}).items()}
        self._lock = threading.Lock()

    def get(self, key: str) -> Mapping[str, Any] | None:
        with self._lock:
            entry = self._entries.get(key)
            return copy.deepcopy(entry) if entry is not None else None

    def put(self, key: str, payload: Mapping[str, Any]) -> None:
        with self._lock:
            self._entries[key] = copy.deepcopy(dict(payload))

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


__all__ = ["InMemoryMetadataStore"]
