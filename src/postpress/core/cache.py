"""File-based cache of serialized posts with mtime invalidation.

Cache structure:
    .cache/
    ├── .gitignore
    └── serialized/
        └── hello-world.json     # {"source_mtime": ..., "options_hash": ..., "source": {...}}
"""

import json
import logging
import shutil
from pathlib import Path

from postpress.core.serializer import SerializedSource

logger = logging.getLogger(__name__)


class FileCache:
    """File-based cache for serialized sources.

    Uses source file mtime for invalidation. Cache entries are considered valid
    when the cached mtime matches the current source file mtime and the entry
    was serialized with the same options (see ``options_fingerprint``).
    """

    _GITIGNORE_CONTENT = "# Ignore everything in this directory\n*\n"

    def __init__(self, cache_dir: Path) -> None:
        """Initialize cache with directory path.

        Args:
            cache_dir: Root directory for cache files (e.g., .cache/)
        """
        self._cache_dir = cache_dir
        self._serialized_dir = cache_dir / "serialized"

    @property
    def cache_dir(self) -> Path:
        """Root cache directory."""
        return self._cache_dir

    def _ensure_cache_dir(self) -> None:
        """Create cache directory with .gitignore if it doesn't exist."""
        if not self._cache_dir.exists():
            self._cache_dir.mkdir(parents=True, exist_ok=True)
            gitignore_path = self._cache_dir / ".gitignore"
            gitignore_path.write_text(self._GITIGNORE_CONTENT, encoding="utf-8")

    def _entry_path(self, slug: str) -> Path:
        return self._serialized_dir / f"{slug}.json"

    def get(self, slug: str, source_mtime: float, options_hash: str = "") -> SerializedSource | None:
        """Retrieve a cached serialized source if valid.

        Args:
            slug: Post slug
            source_mtime: Current mtime of source file
            options_hash: Fingerprint of the serialization options

        Returns:
            SerializedSource on a valid hit, None otherwise
        """
        entry_path = self._entry_path(slug)
        if not entry_path.exists():
            return None

        try:
            data = json.loads(entry_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return None

        if not isinstance(data, dict):
            return None
        if data.get("source_mtime") != source_mtime:
            return None
        if data.get("options_hash", "") != options_hash:
            return None

        source = data.get("source")
        if not isinstance(source, dict):
            return None
        try:
            return SerializedSource.from_dict(source)
        except ValueError:
            return None

    def set(
        self,
        slug: str,
        source: SerializedSource,
        source_mtime: float,
        options_hash: str = "",
    ) -> None:
        """Store a serialized source.

        Args:
            slug: Post slug
            source: Serialized source
            source_mtime: Source file mtime for invalidation
            options_hash: Fingerprint of the serialization options
        """
        self._ensure_cache_dir()
        entry_path = self._entry_path(slug)
        entry_path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "source_mtime": source_mtime,
            "options_hash": options_hash,
            "source": source.to_dict(),
        }
        entry_path.write_text(json.dumps(payload), encoding="utf-8")
        logger.debug(f"Cached serialized source for {slug}")

    def invalidate(self, slug: str) -> None:
        """Remove a cached entry.

        Args:
            slug: Post slug to invalidate
        """
        entry_path = self._entry_path(slug)
        if entry_path.exists():
            entry_path.unlink()

    def clear(self) -> None:
        """Remove all cached entries."""
        if self._serialized_dir.exists():
            shutil.rmtree(self._serialized_dir)
