"""Torrent records returned by the Bitmagnet index."""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional


class TorrentFile(BaseModel):
    """A single file inside a torrent."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    path: str
    size: Optional[int] = None
    file_index: Optional[int] = Field(None, alias="fileIndex", description="0-based index in the torrent")


class BitmagnetTorrent(BaseModel):
    """
    Represents a single torrent returned by Bitmagnet.

    Values other than ``title`` come straight from the index and, when present,
    take precedence over anything parsed from the title.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    info_hash: str = Field(..., alias="infoHash", description="Unique torrent identifier")
    title: str = Field(..., description="Release title/name")
    seeders: Optional[int] = Field(None, description="Number of seeders")
    leechers: Optional[int] = Field(None, description="Number of leechers")
    size: Optional[int] = Field(None, description="Total size in bytes")
    source: Optional[str] = Field(None, description="e.g. BluRay, WEBDL")
    video_resolution: Optional[str] = Field(None, alias="videoResolution", description="e.g. 1080p")
    video_codec: Optional[str] = Field(None, alias="videoCodec", description="e.g. x264")
    audio_codec: Optional[str] = Field(None, alias="audioCodec")
    release_date: Optional[str] = Field(None, alias="releaseDate", description="Release year or date")
    files_count: Optional[int] = Field(None, alias="filesCount")
    files: List[TorrentFile] = Field(default_factory=list)

    @field_validator("video_resolution")
    @classmethod
    def _strip_resolution_prefix(cls, value: Optional[str]) -> Optional[str]:
        # Bitmagnet's VideoResolution enum values look like "V1080p"
        if value and value[:1] in ("V", "v") and value[1:2].isdigit():
            return value[1:]
        return value

    @field_validator("source")
    @classmethod
    def _normalize_source(cls, value: Optional[str]) -> Optional[str]:
        # Bitmagnet's VideoSource enum names broadcast releases "TV"
        if value and value.strip().upper() == "TV":
            return "HDTV"
        return value
