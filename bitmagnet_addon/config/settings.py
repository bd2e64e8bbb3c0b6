"""Configuration management using Pydantic settings."""
import logging
from pathlib import Path
from typing import List
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from bitmagnet_addon.streams.models import RankingConfig, SortPreference

logger = logging.getLogger(__name__)

PLACEHOLDER_ENDPOINT = "https://api.example.com/graphql"
BEST_TRACKERS_URL = "https://raw.githubusercontent.com/ngosang/trackerslist/master/trackers_best.txt"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Bitmagnet GraphQL API
    bitmagnet_graphql_endpoint: str = Field(default="", description="Public GraphQL endpoint of the Bitmagnet instance")
    bitmagnet_api_key: str = Field(default="", description="Optional bearer token for the endpoint")
    bitmagnet_result_limit: int = Field(default=50, ge=1, description="Max results per query")
    bitmagnet_timeout: float = Field(default=20.0, gt=0, description="Request timeout in seconds")

    # Ranking
    preferred_language: str = Field(default="ENG")
    quality_sort_order: str = Field(
        default="2160P,1080P,720P,480P,SD,SCR,CAM,UNKNOWN",
        description="Comma-separated resolutions, best first; tie-break for equal quality ranks"
    )
    filter_low_quality: bool = Field(default=True, description="Drop CAM/TS/etc. when better releases exist")
    min_seeders: int = Field(default=0, ge=0)
    sort_preferences: str = Field(
        default="seeders,preferredLanguage,quality",
        description="Comma-separated subset of seeders, preferredLanguage, quality, size"
    )

    # TMDB (The Movie Database) - Optional, resolves IMDb ids to titles
    tmdb_api_key: str = Field(default="", description="TMDB API Key (v3)")

    # Trackers
    trackers_url: str = Field(default=BEST_TRACKERS_URL)
    tracker_cache_ttl_hours: float = Field(default=6.0, gt=0)
    tracker_fetch_timeout: float = Field(default=15.0, gt=0)

    # Web server
    web_server_host: str = Field(default="0.0.0.0", description="Host for Flask web server")
    web_server_port: int = Field(default=7000, description="Port for Flask web server")

    log_level: str = Field(default="INFO")

    def is_bitmagnet_configured(self) -> bool:
        endpoint = self.bitmagnet_graphql_endpoint.strip()
        return bool(endpoint) and endpoint != PLACEHOLDER_ENDPOINT

    def get_quality_sort_order(self) -> List[str]:
        """Parse quality_sort_order into a list of upper-case resolution tokens."""
        return [q.strip().upper() for q in self.quality_sort_order.split(",") if q.strip()]

    def get_sort_preferences(self) -> List[SortPreference]:
        """Parse sort_preferences, skipping unknown keys."""
        preferences: List[SortPreference] = []
        for key in self.sort_preferences.split(","):
            key = key.strip()
            if not key:
                continue
            try:
                preference = SortPreference(key)
            except ValueError:
                logger.warning(f"Unknown sort preference in SORT_PREFERENCES: {key}")
                continue
            if preference not in preferences:
                preferences.append(preference)
        return preferences

    def get_ranking_config(self) -> RankingConfig:
        return RankingConfig(
            preferred_language=self.preferred_language,
            sort_preference=self.get_sort_preferences(),
            quality_sort_order=self.get_quality_sort_order(),
            filter_low_quality=self.filter_low_quality,
            min_seeders=self.min_seeders,
        )

    model_config = SettingsConfigDict(
        env_file=Path(__file__).parent.parent.parent / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Global settings instance with error handling
try:
    env_file_path = Path(__file__).parent.parent.parent / ".env"
    if env_file_path.exists():
        logger.info(f"Loading .env file from: {env_file_path}")
    else:
        logger.debug(f".env file not found at {env_file_path}, using environment variables only")

    settings = Settings()

    if not settings.is_bitmagnet_configured():
        logger.warning("BITMAGNET_GRAPHQL_ENDPOINT is not set. Stream requests will fail until it is configured.")

except Exception as e:
    logger.error(f"Failed to load settings: {e}")
    logger.error(f"Check your environment variables and the .env file at: {Path(__file__).parent.parent.parent / '.env'}")
    raise
