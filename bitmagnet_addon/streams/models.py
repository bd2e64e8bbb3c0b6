"""Data models for stream requests, ranking candidates and Stremio output."""
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from bitmagnet_addon.bitmagnet.models import BitmagnetTorrent
from bitmagnet_addon.metadata.models import ParsedMetadata


class SortPreference(str, Enum):
    SEEDERS = "seeders"
    PREFERRED_LANGUAGE = "preferredLanguage"
    QUALITY = "quality"  # quality rank, then quality_sort_order
    SIZE = "size"


class RankingConfig(BaseModel):
    """Per-request ranking options."""
    model_config = ConfigDict(frozen=True)

    preferred_language: str = Field("ENG", description="Language code, e.g. ENG")
    sort_preference: List[SortPreference] = Field(
        default_factory=lambda: [SortPreference.SEEDERS, SortPreference.PREFERRED_LANGUAGE, SortPreference.QUALITY]
    )
    quality_sort_order: List[str] = Field(
        default_factory=list, description="Upper-case resolutions, best first"
    )
    filter_low_quality: bool = True
    min_seeders: int = Field(0, ge=0)


class Candidate(BaseModel):
    """A torrent paired with its parsed metadata, ready for ranking."""
    raw: BitmagnetTorrent
    parsed: ParsedMetadata
    seeders: int = 0
    size: Optional[int] = Field(None, description="Size in bytes")

    @property
    def info_hash(self) -> str:
        return self.raw.info_hash


class StreamRequest(BaseModel):
    """A Stremio stream request."""
    item_type: str = Field(..., description="'movie' or 'series'")
    imdb_id: str
    name: Optional[str] = None
    year: Optional[int] = None
    season: Optional[int] = None
    episode: Optional[int] = None


class StremioStream(BaseModel):
    """Stremio protocol stream object."""
    model_config = ConfigDict(populate_by_name=True)

    info_hash: str = Field(..., alias="infoHash")
    name: str
    title: str
    file_idx: Optional[int] = Field(None, alias="fileIdx")
    sources: List[str] = Field(default_factory=list)
    behavior_hints: Dict[str, Any] = Field(default_factory=dict, alias="behaviorHints")
    seeders: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
