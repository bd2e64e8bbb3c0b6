"""Bitmagnet GraphQL client."""
import logging
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError

from bitmagnet_addon.bitmagnet.models import BitmagnetTorrent
from bitmagnet_addon.config.settings import PLACEHOLDER_ENDPOINT

logger = logging.getLogger(__name__)

SEARCH_QUERY = """
query TorrentContentSearch($input: TorrentContentSearchQueryInput!) {
  torrentContent {
    search(input: $input) {
      items {
        infoHash
        title
        seeders
        leechers
        videoResolution
        videoSource
        videoCodec
        content {
          releaseYear
        }
        torrent {
          name
          size
          filesCount
          files {
            index
            path
            size
          }
        }
      }
    }
  }
}
"""

CONTENT_TYPES = {
    "movie": "movie",
    "series": "tv_show",
}


class BitmagnetError(Exception):
    """Base error for Bitmagnet access."""


class BitmagnetNotConfiguredError(BitmagnetError):
    """The GraphQL endpoint is missing or still a placeholder."""


class BitmagnetQueryError(BitmagnetError):
    """A query failed: network error, bad status, invalid JSON or GraphQL errors."""


class BitmagnetClient:
    """Client for searching torrents through Bitmagnet's GraphQL API."""

    def __init__(
        self,
        endpoint: str,
        api_key: Optional[str] = None,
        timeout: float = 20.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize client with a session.

        Args:
            endpoint: GraphQL endpoint URL
            api_key: Optional bearer token
            timeout: Request timeout in seconds
            session: Optional requests session (a new one is created if omitted)
        """
        self.endpoint = (endpoint or "").strip()
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json",
        })
        if api_key:
            self.session.headers["Authorization"] = f"Bearer {api_key}"

    @property
    def configured(self) -> bool:
        return bool(self.endpoint) and self.endpoint != PLACEHOLDER_ENDPOINT

    def search(
        self,
        query: str,
        year: Optional[int] = None,
        limit: int = 50,
        content_type: Optional[str] = None,
    ) -> List[BitmagnetTorrent]:
        """
        Search Bitmagnet for torrents.

        Args:
            query: Search string
            year: Optional release year facet
            limit: Maximum number of results
            content_type: 'movie' or 'series'

        Returns:
            List of torrents in the order Bitmagnet returned them

        Raises:
            BitmagnetNotConfiguredError: If no endpoint is configured
            BitmagnetQueryError: If the request or the GraphQL query fails
        """
        if not self.configured:
            raise BitmagnetNotConfiguredError("Bitmagnet GraphQL endpoint is not configured")

        search_input: Dict[str, Any] = {"queryString": query, "limit": limit}
        facets: Dict[str, Any] = {}
        if content_type in CONTENT_TYPES:
            facets["contentType"] = {"filter": [CONTENT_TYPES[content_type]]}
        if year is not None:
            facets["releaseYear"] = {"filter": [year]}
        if facets:
            search_input["facets"] = facets

        logger.debug(f"Sending GraphQL query to {self.endpoint}: query={query!r}, year={year}, "
                     f"type={content_type}, limit={limit}")

        try:
            response = self.session.post(
                self.endpoint,
                json={"query": SEARCH_QUERY, "variables": {"input": search_input}},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise BitmagnetQueryError(f"Bitmagnet request failed: {e}") from e

        if not response.ok:
            logger.error(f"Bitmagnet API error: {response.status_code} {response.reason}. "
                         f"Body: {response.text[:1000]}")
            raise BitmagnetQueryError(f"Bitmagnet API request failed: {response.status_code} {response.reason}")

        try:
            payload = response.json()
        except ValueError as e:
            raise BitmagnetQueryError(f"Bitmagnet returned invalid JSON: {e}") from e

        errors = payload.get("errors") if isinstance(payload, dict) else None
        if errors:
            messages = "; ".join(str(error.get("message", "Unknown GraphQL error")) for error in errors)
            raise BitmagnetQueryError(f"GraphQL query failed: {messages}")

        torrents = []
        for item in self._extract_items(payload):
            torrent = self._to_torrent(item)
            if torrent:
                torrents.append(torrent)
        return torrents

    def _extract_items(self, payload: Any) -> List[Dict[str, Any]]:
        """Find the result list in the response, trying known response shapes."""
        if not isinstance(payload, dict):
            return []
        data = payload.get("data") or {}

        search = (data.get("torrentContent") or {}).get("search") or {}
        for container in (search, data.get("searchContent"), data.get("searchTorrents"), payload):
            if isinstance(container, dict) and isinstance(container.get("items"), list):
                return container["items"]
        return []

    def _to_torrent(self, item: Dict[str, Any]) -> Optional[BitmagnetTorrent]:
        """Flatten a search item into a BitmagnetTorrent, or None if it is unusable."""
        if not isinstance(item, dict):
            return None

        torrent = item.get("torrent") or {}
        content = item.get("content") or {}
        info_hash = item.get("infoHash")
        title = torrent.get("name") or item.get("name") or item.get("title")
        if not info_hash or not title:
            logger.debug(f"Skipping search item without infoHash or title: {item}")
            return None

        release_year = content.get("releaseYear") or item.get("releaseYear") or item.get("releaseDate")
        files = (torrent.get("files") or item.get("files") or [])
        if isinstance(files, dict):
            files = files.get("items") or []

        try:
            return BitmagnetTorrent(
                info_hash=info_hash,
                title=title,
                seeders=item.get("seeders"),
                leechers=item.get("leechers"),
                size=torrent.get("size") or item.get("size"),
                source=item.get("videoSource") or item.get("source"),
                video_resolution=item.get("videoResolution"),
                video_codec=item.get("videoCodec"),
                audio_codec=_join_audio(item.get("audioCodec")),
                release_date=str(release_year) if release_year else None,
                files_count=torrent.get("filesCount") or item.get("filesCount"),
                files=[
                    {"path": f.get("path", ""), "size": f.get("size"), "file_index": f.get("index", f.get("fileIndex"))}
                    for f in files if isinstance(f, dict)
                ],
            )
        except ValidationError as e:
            logger.warning(f"Skipping malformed search item {info_hash}: {e}")
            return None


def _join_audio(value: Any) -> Optional[str]:
    if isinstance(value, list):
        return " ".join(str(v) for v in value) or None
    return value or None
