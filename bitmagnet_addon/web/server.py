"""Flask web server exposing the Stremio addon endpoints."""
import html
import logging
import os
import re
from typing import Optional, Tuple

from flask import Flask, jsonify, make_response

from bitmagnet_addon.bitmagnet.client import BitmagnetClient
from bitmagnet_addon.config.settings import settings
from bitmagnet_addon.metadata.cache import MetadataCache
from bitmagnet_addon.metadata.tmdb_client import TMDBClient
from bitmagnet_addon.streams.models import StreamRequest
from bitmagnet_addon.streams.service import StreamService, stream_response
from bitmagnet_addon.trackers.cache import TrackerCache, fetch_best_trackers

logger = logging.getLogger(__name__)

# Application version - update this when making changes
APP_VERSION = "1.2.0"
ADDON_ID = "org.bitmagnet.stremio"
ADDON_NAME = "Bitmagnet"

app = Flask(__name__)

# Lazy initialization
_metadata_cache = None
_tmdb_client = None
_tracker_cache = None
_stream_service = None

_IMDB_ID = re.compile(r"^tt\d+$")


def get_metadata_cache() -> MetadataCache:
    """Get or create the metadata cache instance."""
    global _metadata_cache
    if _metadata_cache is None:
        _metadata_cache = MetadataCache()
    return _metadata_cache


def get_tmdb_client() -> Optional[TMDBClient]:
    """Get or create the TMDB client instance."""
    global _tmdb_client
    if _tmdb_client is None:
        try:
            if settings.tmdb_api_key:
                _tmdb_client = TMDBClient(api_key=settings.tmdb_api_key)
            else:
                logger.debug("TMDB API key not configured, title lookup disabled")
                return None
        except Exception as e:
            logger.warning(f"Failed to initialize TMDB client: {e}")
            return None
    return _tmdb_client


def get_tracker_cache() -> TrackerCache:
    """Get or create the process-wide tracker cache."""
    global _tracker_cache
    if _tracker_cache is None:
        url = settings.trackers_url
        timeout = settings.tracker_fetch_timeout
        _tracker_cache = TrackerCache(
            fetch=lambda: fetch_best_trackers(url, timeout),
            ttl=settings.tracker_cache_ttl_hours * 60 * 60,
        )
    return _tracker_cache


def get_stream_service() -> StreamService:
    """Get or create the stream service instance."""
    global _stream_service
    if _stream_service is None:
        client = BitmagnetClient(
            endpoint=settings.bitmagnet_graphql_endpoint,
            api_key=settings.bitmagnet_api_key or None,
            timeout=settings.bitmagnet_timeout,
        )
        _stream_service = StreamService(
            client=client,
            ranking_config=settings.get_ranking_config(),
            tracker_cache=get_tracker_cache(),
            tmdb_client=get_tmdb_client(),
            result_limit=settings.bitmagnet_result_limit,
            metadata_cache=get_metadata_cache(),
        )
    return _stream_service


def parse_stream_id(item_type: str, stream_id: str) -> Tuple[Optional[StreamRequest], Optional[str]]:
    """
    Parse the id part of a stream URL.

    Args:
        item_type: 'movie' or 'series'
        stream_id: 'tt123' for movies, 'tt123:season:episode' for series

    Returns:
        (request, None) on success, (None, error message) otherwise
    """
    if item_type not in ("movie", "series"):
        return None, f"Unsupported type: {item_type}"

    parts = stream_id.split(":")
    imdb_id = parts[0]
    if not _IMDB_ID.match(imdb_id):
        return None, f"Invalid IMDb id: {imdb_id}"

    if item_type == "movie":
        return StreamRequest(item_type=item_type, imdb_id=imdb_id), None

    if len(parts) != 3:
        return None, "Series requests need season and episode"
    try:
        season, episode = int(parts[1]), int(parts[2])
    except ValueError:
        return None, "Season and episode must be integers"
    if season < 0 or episode < 1:
        return None, "Season and episode out of range"
    return StreamRequest(item_type=item_type, imdb_id=imdb_id, season=season, episode=episode), None


@app.after_request
def add_cors_headers(response):
    """Stremio clients call the addon cross-origin."""
    response.headers['Access-Control-Allow-Origin'] = '*'
    response.headers['Access-Control-Allow-Headers'] = '*'
    response.headers['Access-Control-Allow-Methods'] = 'GET, OPTIONS'
    return response


@app.route('/')
def index():
    """Plain status text."""
    response = make_response(f"{ADDON_NAME} Stremio addon v{APP_VERSION} is running. "
                             f"Install it from /manifest.json")
    response.mimetype = 'text/plain'
    return response


@app.route('/health')
def health():
    """Health check endpoint."""
    return jsonify({
        'status': 'ok',
        'version': APP_VERSION,
        'bitmagnetConfigured': settings.is_bitmagnet_configured(),
    })


@app.route('/manifest.json')
def manifest():
    """Stremio addon manifest."""
    return jsonify({
        'id': ADDON_ID,
        'version': APP_VERSION,
        'name': ADDON_NAME,
        'description': 'Streams torrents indexed by your Bitmagnet instance',
        'resources': ['stream'],
        'types': ['movie', 'series'],
        'idPrefixes': ['tt'],
        'catalogs': [],
        'behaviorHints': {
            'configurable': True,
            'configurationRequired': not settings.is_bitmagnet_configured(),
        },
    })


@app.route('/configure')
def configure():
    """Read-only HTML summary of the effective configuration."""
    ranking = settings.get_ranking_config()
    rows = [
        ('Bitmagnet endpoint', settings.bitmagnet_graphql_endpoint or 'not configured'),
        ('Preferred language', ranking.preferred_language),
        ('Sort preference', ', '.join(p.value for p in ranking.sort_preference)),
        ('Quality sort order', ', '.join(ranking.quality_sort_order)),
        ('Filter low quality', 'yes' if ranking.filter_low_quality else 'no'),
        ('Minimum seeders', str(ranking.min_seeders)),
        ('TMDB lookup', 'enabled' if settings.tmdb_api_key else 'disabled'),
    ]
    table = "\n".join(
        f"<tr><th>{html.escape(label)}</th><td>{html.escape(value)}</td></tr>" for label, value in rows
    )
    body = (
        f"<!DOCTYPE html><html><head><title>{ADDON_NAME} addon</title></head><body>"
        f"<h1>{ADDON_NAME} Stremio addon v{APP_VERSION}</h1>"
        f"<p>Settings are read from environment variables or the .env file.</p>"
        f"<table>\n{table}\n</table></body></html>"
    )
    response = make_response(body)
    response.headers['Cache-Control'] = 'no-cache, no-store, must-revalidate'
    return response


@app.route('/stream/<item_type>/<stream_id>.json')
def stream(item_type: str, stream_id: str):
    """Stremio stream handler."""
    stream_request, error = parse_stream_id(item_type, stream_id)
    if error:
        logger.warning(f"Rejected stream request {item_type}/{stream_id}: {error}")
        return jsonify({'streams': [], 'error': error}), 400

    if not settings.is_bitmagnet_configured():
        logger.error("Bitmagnet GraphQL endpoint is not configured")
        return jsonify({'streams': [], 'error': 'Bitmagnet endpoint is not configured'}), 500

    try:
        return jsonify(get_stream_service().process_stream_request(stream_request))
    except Exception as e:
        logger.error(f"Error processing stream request {item_type}/{stream_id}: {e}", exc_info=True)
        response = stream_response([])
        response['error'] = 'Internal server error'
        return jsonify(response), 500


def create_app():
    """Create and configure Flask app."""
    return app


def run_server(host: str = "0.0.0.0", port: int = 7000, debug: bool = False):
    """Run the Flask server."""
    # Ensure debug mode is disabled in production
    is_production = os.getenv('FLASK_ENV', 'production').lower() != 'development'
    debug_mode = debug and not is_production

    if is_production:
        logger.info(f"Starting Flask web server in PRODUCTION mode on {host}:{port}")
        app.config['DEBUG'] = False
        app.config['TESTING'] = False
    else:
        logger.info(f"Starting Flask web server in DEVELOPMENT mode on {host}:{port}")
        app.config['DEBUG'] = True

    try:
        app.run(host=host, port=port, debug=debug_mode, use_reloader=False, threaded=True)
    except OSError as e:
        if "Address already in use" in str(e) or "Only one usage of each socket address" in str(e):
            logger.error(f"Port {port} is already in use. Please choose a different port or stop the service using it.")
        elif "Permission denied" in str(e):
            logger.error(f"Permission denied to bind to port {port}. Try running as administrator or use a port > 1024.")
        else:
            logger.error(f"Failed to start Flask server: {e}")
        raise
