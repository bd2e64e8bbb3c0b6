"""Structured metadata parsed from a release title."""
from typing import Any, List, Optional

from pydantic import BaseModel, Field


def _is_unset(value: Any) -> bool:
    return value is None or value is False or value == "" or value == []


class ParsedMetadata(BaseModel):
    """
    Metadata extracted from a single torrent title.

    Fields are filled progressively by the title parser. Each field is assigned
    at most once through ``set_once``; values supplied directly by the index go
    through ``override`` and always win over text-derived guesses.
    """
    original_title: str = Field(..., description="Raw torrent title, never modified")
    cleaned_title: Optional[str] = Field(None, description="Title with metadata tokens removed")
    year: Optional[int] = None
    resolution: Optional[str] = Field(None, description="e.g. 1080P, 720P, 4K, SD")
    quality_source: Optional[str] = Field(None, description="e.g. BLURAY, WEB-DL, CAM")
    video_codec: Optional[str] = Field(None, description="e.g. X264, HEVC")
    audio_codec: Optional[str] = Field(None, description="All audio tokens joined by spaces")
    languages: List[str] = Field(default_factory=list, description="Ordered, first seen first")
    is_hdr: bool = False
    is_3d: bool = False
    release_group: Optional[str] = None
    episode_info: Optional[str] = Field(None, description="e.g. S01E01, S01, E05")
    raw_size: Optional[str] = Field(None, description="Size text as found in the title")
    calculated_size: Optional[int] = Field(None, description="Size in bytes")
    seeders: Optional[int] = None

    def set_once(self, field: str, value: Any) -> bool:
        """
        Assign ``value`` to ``field`` only if the field is still unset.

        Returns:
            True if the value was stored
        """
        if _is_unset(value) or not _is_unset(getattr(self, field)):
            return False
        setattr(self, field, value)
        return True

    def override(self, field: str, value: Any) -> None:
        """Store an authoritative value, replacing any parsed guess."""
        if _is_unset(value):
            return
        setattr(self, field, value)

    def add_language(self, language: str) -> None:
        if language and language not in self.languages:
            self.languages.append(language)
