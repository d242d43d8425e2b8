from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

from loguru import logger

from scancheck.exceptions import CacheError

METADATA_FILENAME = "rawScanMetadata.json"


class LocalMetadataStore:
    """One ``<root>/<key>/rawScanMetadata.json`` file per artifact."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        # one directory level under root per artifact
        if not key or key in {".", ".."} or "/" in key or "\\" in key:
            raise CacheError(f"Invalid metadata cache key: {key!r}", {"key": key})
        return self.root / key / METADATA_FILENAME

    def get(self, key: str) -> Mapping[str, Any] | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable metadata cache {}: {}", path, exc)
            return None
        if not isinstance(payload, dict):
            logger.warning("Ignoring metadata cache {}: not a JSON object", path)
            return None
        return payload

    def put(self, key: str, payload: Mapping[str, Any]) -> None:
        path = self.path_for(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as exc:
            raise CacheError(
                f"Failed to write metadata cache for {key}",
                {"path": str(path), "error": str(exc)},
            ) from exc


__all__ = ["LocalMetadataStore", "METADATA_FILENAME"]
