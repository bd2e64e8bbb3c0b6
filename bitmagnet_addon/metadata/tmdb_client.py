"""TMDB API client for resolving IMDb ids to titles and years."""
import logging
from typing import Optional, Dict, Any, List

from tmdbv3api import TMDb, Find

from bitmagnet_addon.config.settings import settings

logger = logging.getLogger(__name__)


class TMDBClient:
    """Client for looking up movie and TV show titles on The Movie Database (TMDB)."""

    def __init__(self, api_key: Optional[str] = None, language: str = 'en'):
        """
        Initialize TMDB client.

        Args:
            api_key: TMDB API key (v3). If None, uses settings.tmdb_api_key
            language: Language for returned titles
        """
        self.api_key = api_key or settings.tmdb_api_key
        if not self.api_key:
            logger.warning("TMDB API key not configured. Title lookup by IMDb id will be disabled.")
            self.enabled = False
            return

        self.enabled = True
        self.tmdb = TMDb()
        self.tmdb.api_key = self.api_key
        self.tmdb.language = language

        self.find = Find()

        logger.info("TMDB client initialized")

    def find_by_imdb_id(self, imdb_id: str, item_type: str = 'movie') -> Optional[Dict[str, Any]]:
        """
        Look up a movie or TV show by its IMDb id.

        Args:
            imdb_id: IMDb id, e.g. tt0133093
            item_type: 'movie' or 'series'; decides which result list is preferred

        Returns:
            Dict with title, year, media_type and tmdb_id, or None if not found
        """
        if not self.enabled or not imdb_id:
            return None

        try:
            response = self._to_dict(self.find.find_by_imdb_id(imdb_id))
        except Exception as e:
            logger.error(f"Error looking up IMDb id '{imdb_id}' on TMDB: {e}", exc_info=True)
            return None

        movie_results = self._to_list(response.get('movie_results'))
        tv_results = self._to_list(response.get('tv_results'))

        if item_type == 'series':
            ordered = [(tv_results, 'tv'), (movie_results, 'movie')]
        else:
            ordered = [(movie_results, 'movie'), (tv_results, 'tv')]

        for results, media_type in ordered:
            if results:
                return self._format_result(self._to_dict(results[0]), media_type)

        logger.debug(f"No TMDB results for IMDb id: {imdb_id}")
        return None

    def _format_result(self, data: Dict[str, Any], media_type: str) -> Dict[str, Any]:
        """
        Format a TMDB find result into our standard format.

        Args:
            data: Raw movie or TV result
            media_type: 'movie' or 'tv'

        Returns:
            Formatted metadata dict
        """
        if media_type == 'tv':
            title = data.get('name') or data.get('original_name') or ''
            date_str = data.get('first_air_date') or ''
        else:
            title = data.get('title') or data.get('original_title') or ''
            date_str = data.get('release_date') or ''

        year = None
        if date_str:
            try:
                year = int(str(date_str).split('-')[0])
            except (ValueError, IndexError):
                pass

        return {
            'title': title,
            'year': year,
            'media_type': media_type,
            'tmdb_id': data.get('id'),
        }

    def _to_list(self, obj: Any) -> List[Any]:
        if not obj or isinstance(obj, (str, dict)):
            return []
        if isinstance(obj, list):
            return obj
        try:
            return list(obj)
        except TypeError:
            return []

    def _to_dict(self, obj: Any) -> Dict[str, Any]:
        """
        Convert a TMDB object to a dictionary.

        Args:
            obj: TMDB response (dict, AsObj wrapper or plain object)

        Returns:
            Dictionary representation
        """
        if obj is None or isinstance(obj, str):
            return {}

        if isinstance(obj, dict):
            return {str(k): v for k, v in obj.items()}

        # tmdbv3api's AsObj wraps the JSON payload in _json
        raw_json = getattr(obj, '_json', None)
        if isinstance(raw_json, dict):
            return {str(k): v for k, v in raw_json.items()}

        if hasattr(obj, '__dict__'):
            return {str(k): v for k, v in obj.__dict__.items() if not k.startswith('_')}

        return {}
