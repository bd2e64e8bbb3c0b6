"""Entry point and server initialization."""
import logging
import sys

from bitmagnet_addon.config.settings import settings
from bitmagnet_addon.web.server import get_tracker_cache, run_server


# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    handlers=[
        logging.FileHandler("bitmagnet_addon.log"),
        logging.StreamHandler(sys.stdout)
    ]
)
logger = logging.getLogger(__name__)


def main():
    """Main entry point."""
    try:
        logger.info("Starting Bitmagnet Stremio addon...")

        # Validate configuration
        if not settings.is_bitmagnet_configured():
            logger.error("BITMAGNET_GRAPHQL_ENDPOINT not set or still has placeholder value!")
            logger.error("Please set BITMAGNET_GRAPHQL_ENDPOINT in your .env file")
            logger.error("Stream requests will fail until it is configured")
        else:
            logger.info(f"Using Bitmagnet endpoint: {settings.bitmagnet_graphql_endpoint}")

        if not settings.tmdb_api_key:
            logger.info("TMDB_API_KEY not set, requests without a title will search by IMDb id")

        # Warm the tracker cache without delaying startup
        get_tracker_cache().refresh_in_background()

        logger.info(f"Addon manifest: http://{settings.web_server_host}:{settings.web_server_port}/manifest.json")
        run_server(settings.web_server_host, settings.web_server_port, False)

    except KeyboardInterrupt:
        logger.info("Addon stopped by user")
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        logger.error("Check the error above and verify your .env file is configured correctly")
        sys.exit(1)


if __name__ == "__main__":
    main()
