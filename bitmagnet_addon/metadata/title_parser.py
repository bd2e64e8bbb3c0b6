"""Parse torrent titles into structured release metadata."""
import re
import logging
from typing import Optional, List, Pattern

from bitmagnet_addon.metadata import patterns
from bitmagnet_addon.metadata.models import ParsedMetadata
from bitmagnet_addon.metadata.title_cleaner import clean_title

logger = logging.getLogger(__name__)


def parse_size(size_str: str) -> Optional[int]:
    """
    Convert a size string like '1.5 GiB' or '700MB' to bytes.

    Decimal and binary unit names are treated alike (1024-based).

    Args:
        size_str: Text containing a number followed by a unit

    Returns:
        Size in bytes, or None if no size is found
    """
    if not size_str:
        return None
    match = patterns.SIZE.search(size_str)
    if not match:
        return None

    value = float(match.group(1))
    unit = match.group(2).upper().replace("I", "")
    return int(value * patterns.SIZE_MULTIPLIERS[unit])


def parse_torrent_title(
    title: str,
    search_title: Optional[str] = None,
    context_year: Optional[int] = None,
) -> ParsedMetadata:
    """
    Parse a torrent title into metadata and a cleaned display title.

    Handles common release naming patterns:
    - Movies: "Movie.Name.1999.1080p.BluRay.x264-GRP" -> "Movie Name", 1999, 1080P, BLURAY
    - TV Shows: "Show.Name.S01E01.720p.WEB-DL" -> "Show Name", S01E01

    Args:
        title: Original torrent title
        search_title: Standardized title used to query the index, if any
        context_year: Year supplied by the index or the request

    Returns:
        Parsed metadata with ``cleaned_title`` filled in
    """
    metadata = extract_metadata(title, context_year)
    metadata.cleaned_title = clean_title(title, metadata, search_title)

    if metadata.year is None and search_title:
        year_match = patterns.YEAR.search(search_title)
        if year_match:
            metadata.year = int(year_match.group(1))

    return metadata


def extract_metadata(title: str, context_year: Optional[int] = None) -> ParsedMetadata:
    """
    Apply the title patterns in a fixed order, keeping the first match of each.

    Order: year, season/episode, resolution, source, video codec, audio codecs,
    HDR/3D flags, languages, release group, size. A field set by an earlier
    step is never replaced by a later one.

    Args:
        title: Original torrent title
        context_year: Authoritative year; skips year extraction when given

    Returns:
        Possibly sparse metadata; never raises for any input
    """
    metadata = ParsedMetadata(original_title=title or "")
    if not title:
        return metadata

    if context_year:
        metadata.set_once("year", context_year)
    else:
        year_match = patterns.YEAR.search(title)
        if year_match:
            metadata.set_once("year", int(year_match.group(1)))

    episode_match = patterns.SEASON_EPISODE.search(title)
    if episode_match:
        metadata.set_once("episode_info", episode_match.group(0).upper())

    metadata.set_once("resolution", _first_match(patterns.RESOLUTION, title))
    metadata.set_once("quality_source", _first_match(patterns.QUALITY_SOURCE, title))
    metadata.set_once("video_codec", _first_match(patterns.VIDEO_CODEC, title))

    audio = _unique(match.group(1).upper() for match in patterns.AUDIO_CODEC.finditer(title))
    if audio:
        metadata.set_once("audio_codec", " ".join(audio))

    metadata.set_once("is_hdr", patterns.HDR.search(title) is not None)
    metadata.set_once("is_3d", patterns.THREE_D.search(title) is not None)

    for language in _extract_languages(title):
        metadata.add_language(language)

    metadata.set_once("release_group", _extract_release_group(title, metadata))

    # Size is matched on the untouched title so overlapping tokens are not lost
    size_match = patterns.SIZE.search(title)
    if size_match:
        metadata.set_once("raw_size", size_match.group(0))
        metadata.set_once("calculated_size", parse_size(size_match.group(0)))

    return metadata


def _first_match(pattern: Pattern[str], text: str) -> Optional[str]:
    match = pattern.search(text)
    return match.group(1).upper() if match else None


def _unique(values) -> List[str]:
    seen: List[str] = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return seen


def _extract_languages(title: str) -> List[str]:
    """
    Collect language names from every language token in the title.

    Combined tokens such as "ENG+TAM" are split and each part is mapped on its
    own. Unknown parts of 2-7 characters are kept as-is.
    """
    found: List[str] = []
    for match in patterns.LANGUAGES.finditer(title):
        key = match.group(1).upper()
        key = re.sub(r"[\s.]AUDIO", "", key)
        key = re.sub(r"SUB$", "", key).strip()

        if key in patterns.LANGUAGE_MAP:
            found.append(patterns.LANGUAGE_MAP[key])
            continue

        for part in patterns.LANGUAGE_SEPARATORS.split(key):
            part = part.strip()
            if not part or part in patterns.GENERIC_LANGUAGE_WORDS:
                continue
            if part in patterns.LANGUAGE_MAP:
                found.append(patterns.LANGUAGE_MAP[part])
            elif 2 <= len(part) <= 7:
                found.append(part)

    return [language for language in _unique(found) if len(language) > 1 and "AUDIO" not in language]


def _extract_release_group(title: str, metadata: ParsedMetadata) -> Optional[str]:
    """
    Take the release group from the end of the title.

    A bare title without any release tags has no group, and a trailing token
    that was already recognised as another attribute is not a group either.
    """
    if not (metadata.resolution or metadata.quality_source or metadata.video_codec):
        return None

    match = patterns.RELEASE_GROUP.search(title)
    if not match:
        return None

    group = match.group(1).lstrip("-")
    captured = {
        value.upper()
        for value in (
            metadata.resolution,
            metadata.quality_source,
            metadata.video_codec,
            metadata.episode_info,
            str(metadata.year) if metadata.year else None,
        )
        if value
    }
    if metadata.audio_codec:
        captured.update(metadata.audio_codec.split())

    if not group or group.upper() in captured:
        return None

    head, _, tail = group.partition("-")
    if tail and head.upper() in captured:
        group = tail

    return group or None
