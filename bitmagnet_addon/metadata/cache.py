"""Simple in-memory cache for TMDB lookups to reduce API calls."""
import logging
import threading
from typing import Optional, Dict, Any

logger = logging.getLogger(__name__)


class MetadataCache:
    """In-memory cache for title lookups keyed by IMDb id and item type."""

    def __init__(self):
        """Initialize the cache."""
        self._cache: Dict[str, Optional[Dict[str, Any]]] = {}
        self._lock = threading.Lock()

    def _make_key(self, imdb_id: str, item_type: str) -> str:
        return f"{item_type}:{imdb_id.lower().strip()}"

    def contains(self, imdb_id: str, item_type: str) -> bool:
        """Check whether a lookup (including a miss) has been cached."""
        with self._lock:
            return self._make_key(imdb_id, item_type) in self._cache

    def get(self, imdb_id: str, item_type: str) -> Optional[Dict[str, Any]]:
        """
        Get metadata from cache.

        Args:
            imdb_id: IMDb id
            item_type: 'movie' or 'series'

        Returns:
            Cached metadata dict or None if not found
        """
        with self._lock:
            return self._cache.get(self._make_key(imdb_id, item_type))

    def set(self, imdb_id: str, item_type: str, metadata: Optional[Dict[str, Any]]) -> None:
        """
        Store metadata in cache. None records a lookup that found nothing.

        Args:
            imdb_id: IMDb id
            item_type: 'movie' or 'series'
            metadata: Metadata dict to cache
        """
        with self._lock:
            self._cache[self._make_key(imdb_id, item_type)] = metadata
        logger.debug(f"Cached metadata for: {imdb_id} ({item_type})")

    def clear(self) -> None:
        """Clear all cached metadata."""
        with self._lock:
            self._cache.clear()
        logger.info("Metadata cache cleared")

    def size(self) -> int:
        """Get the number of cached items."""
        with self._lock:
            return len(self._cache)
