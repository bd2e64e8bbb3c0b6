"""Turn a Stremio stream request into a ranked list of streams."""
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Tuple

from bitmagnet_addon.bitmagnet.client import BitmagnetClient, BitmagnetQueryError
from bitmagnet_addon.bitmagnet.models import BitmagnetTorrent
from bitmagnet_addon.metadata.cache import MetadataCache
from bitmagnet_addon.metadata.standardization import standardize_title, standardize_year
from bitmagnet_addon.metadata.title_parser import parse_torrent_title
from bitmagnet_addon.streams.episode_matcher import matches_episode
from bitmagnet_addon.streams.formatter import format_stream_for_result
from bitmagnet_addon.streams.models import Candidate, RankingConfig, StreamRequest
from bitmagnet_addon.streams.ranker import dedupe_torrents, rank_candidates
from bitmagnet_addon.trackers.cache import TrackerCache

logger = logging.getLogger(__name__)

CACHE_MAX_AGE = 3600
STALE_REVALIDATE = 1800
STALE_ERROR = 86400


def stream_response(streams: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Wrap streams with Stremio's cache hints."""
    return {
        "streams": streams,
        "cacheMaxAge": CACHE_MAX_AGE,
        "staleRevalidate": STALE_REVALIDATE,
        "staleError": STALE_ERROR,
    }


class StreamService:
    """Searches Bitmagnet for a title, then parses, filters, ranks and formats the results."""

    def __init__(
        self,
        client: BitmagnetClient,
        ranking_config: RankingConfig,
        tracker_cache: TrackerCache,
        tmdb_client: Optional[Any] = None,
        result_limit: int = 50,
        metadata_cache: Optional[MetadataCache] = None,
    ):
        """
        Args:
            client: Bitmagnet GraphQL client
            ranking_config: Filtering and sort options
            tracker_cache: Source of tracker URLs for the streams
            tmdb_client: Optional TMDBClient used to resolve IMDb ids to titles
            result_limit: Max results per Bitmagnet query
            metadata_cache: Cache for TMDB lookups
        """
        self.client = client
        self.ranking_config = ranking_config
        self.tracker_cache = tracker_cache
        self.tmdb_client = tmdb_client
        self.result_limit = result_limit
        self.metadata_cache = metadata_cache or MetadataCache()

    def process_stream_request(self, request: StreamRequest) -> Dict[str, Any]:
        """
        Handle one stream request.

        Args:
            request: Parsed Stremio request

        Returns:
            Stremio stream response dict
        """
        search_title, year = self._resolve_title(request)
        title = standardize_title(search_title)
        year = standardize_year(year)

        if not title:
            logger.warning(f"Title for {request.imdb_id} is missing or empty after standardization, skipping search")
            return stream_response([])

        logger.info(f"Processing request: title='{title}', year={year}, type={request.item_type}, "
                    f"id={request.imdb_id}, season={request.season}, episode={request.episode}")

        queries: List[Tuple[str, Optional[int]]] = []
        if year:
            queries.append((title, year))
        queries.append((title, None))
        if title != request.imdb_id:
            queries.append((request.imdb_id, None))

        torrents = dedupe_torrents(self._run_queries(queries, request.item_type))
        logger.info(f"Found {len(torrents)} unique torrents for '{title}'")

        candidates = []
        for torrent in torrents:
            candidate = self._build_candidate(torrent, title, year)
            if request.item_type == "series" and request.season is not None and request.episode is not None:
                if not matches_episode(candidate.parsed, request.season, request.episode):
                    continue
            candidates.append(candidate)
        logger.info(f"Parsed {len(candidates)} candidates after episode matching for '{title}'")

        ranked = rank_candidates(candidates, self.ranking_config)
        trackers = self.tracker_cache.get()
        streams = [
            format_stream_for_result(candidate, trackers, request.item_type, request.season, request.episode).to_dict()
            for candidate in ranked
        ]

        logger.info(f"Returning {len(streams)} streams for '{title}'")
        return stream_response(streams)

    def _resolve_title(self, request: StreamRequest) -> Tuple[str, Optional[int]]:
        """Pick the search title: request name, then TMDB, then the IMDb id itself."""
        if request.name:
            return request.name, request.year

        metadata = self._lookup_metadata(request.imdb_id, request.item_type)
        if metadata and metadata.get("title"):
            logger.info(f"Resolved {request.imdb_id} to '{metadata['title']}' ({metadata.get('year')}) via TMDB")
            return metadata["title"], request.year or metadata.get("year")

        logger.warning(f"No title for {request.imdb_id}, searching Bitmagnet by IMDb id")
        return request.imdb_id, request.year

    def _lookup_metadata(self, imdb_id: str, item_type: str) -> Optional[Dict[str, Any]]:
        if not self.tmdb_client or not getattr(self.tmdb_client, "enabled", False):
            return None
        if self.metadata_cache.contains(imdb_id, item_type):
            return self.metadata_cache.get(imdb_id, item_type)

        metadata = self.tmdb_client.find_by_imdb_id(imdb_id, item_type)
        self.metadata_cache.set(imdb_id, item_type, metadata)
        return metadata

    def _run_queries(self, queries: List[Tuple[str, Optional[int]]], item_type: str) -> List[BitmagnetTorrent]:
        """Run all queries concurrently and concatenate the results in query order."""
        with ThreadPoolExecutor(max_workers=len(queries), thread_name_prefix="BitmagnetQuery") as executor:
            futures = [executor.submit(self._search, query, year, item_type) for query, year in queries]
            results = [future.result() for future in futures]
        return [torrent for result in results for torrent in result]

    def _search(self, query: str, year: Optional[int], item_type: str) -> List[BitmagnetTorrent]:
        try:
            results = self.client.search(query, year=year, limit=self.result_limit, content_type=item_type)
        except BitmagnetQueryError as e:
            logger.warning(f"Failed to fetch from Bitmagnet for query '{query}' (year: {year}, type: {item_type}): {e}")
            return []
        except Exception as e:
            logger.warning(f"Unexpected error querying Bitmagnet for '{query}' (year: {year}, type: {item_type}): {e}",
                           exc_info=True)
            return []
        logger.info(f"Bitmagnet returned {len(results)} results for query='{query}', year={year}, type={item_type}")
        return results

    def _build_candidate(self, torrent: BitmagnetTorrent, search_title: str, year: Optional[int]) -> Candidate:
        """Parse a torrent's title and let the index's own fields win over parsed ones."""
        context_year = standardize_year(torrent.release_date) or year
        parsed = parse_torrent_title(torrent.title, search_title, context_year)

        parsed.override("resolution", torrent.video_resolution)
        parsed.override("video_codec", torrent.video_codec)
        parsed.override("quality_source", torrent.source)

        seeders = torrent.seeders or parsed.seeders or 0
        size = torrent.size or parsed.calculated_size
        parsed.override("seeders", seeders)
        parsed.override("calculated_size", size)

        return Candidate(raw=torrent, parsed=parsed, seeders=seeders, size=size)
