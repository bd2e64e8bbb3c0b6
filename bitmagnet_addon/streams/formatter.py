"""Format ranked candidates as Stremio stream objects."""
import re
from typing import List, Optional

from bitmagnet_addon.bitmagnet.models import TorrentFile
from bitmagnet_addon.streams.models import Candidate, StremioStream
from bitmagnet_addon.trackers.cache import TrackerSources

ADDON_LABEL = "Bitmagnet"

EMOJIS = {
    "magnet": "🧲",
    "title": "🎬",
    "episode": "🎞️",
    "quality": "🌟",
    "language": "🗣️",
    "audio": "🔊",
    "seeders": "🌱",
    "size": "💾",
}

_SIZE_UNITS = ["Bytes", "KB", "MB", "GB", "TB"]
_VIDEO_EXTENSIONS = (".mkv", ".mp4", ".avi", ".m4v", ".mov", ".wmv", ".ts", ".webm")


def format_size(size: Optional[int]) -> Optional[str]:
    """Human-readable size with 1024 multiples, e.g. 1610612736 -> '1.5 GB'."""
    if not size or size <= 0:
        return None
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{round(value, 2):g} {_SIZE_UNITS[unit]}"


def find_episode_file_index(files: List[TorrentFile], season: int, episode: int) -> Optional[int]:
    """
    Find the torrent file index of an episode inside a pack.

    Args:
        files: File listing of the torrent
        season: Season number
        episode: Episode number

    Returns:
        Index of the first video file named after the episode, or None
    """
    pattern = re.compile(
        rf"(?:s0*{season}e0*{episode}|(?<!\d)0*{season}x0*{episode})(?!\d)",
        re.IGNORECASE,
    )
    for position, torrent_file in enumerate(files):
        if not torrent_file.path.lower().endswith(_VIDEO_EXTENSIONS):
            continue
        if pattern.search(torrent_file.path.replace("\\", "/").rsplit("/", 1)[-1]):
            return torrent_file.file_index if torrent_file.file_index is not None else position
    return None


def _display_title(candidate: Candidate) -> str:
    parsed = candidate.parsed
    if parsed.cleaned_title:
        return parsed.cleaned_title
    head = re.split(r"\d{4}|S\d{2}E\d{2}", parsed.original_title, maxsplit=1)[0]
    return re.sub(r"[._]", " ", head).strip() or "Unknown Title"


def format_stream_for_result(
    candidate: Candidate,
    trackers: TrackerSources,
    item_type: str,
    season: Optional[int] = None,
    episode: Optional[int] = None,
) -> StremioStream:
    """
    Build the Stremio stream object for one candidate.

    Args:
        candidate: Ranked candidate
        trackers: Current tracker list
        item_type: 'movie' or 'series'
        season: Requested season (series only)
        episode: Requested episode (series only)

    Returns:
        StremioStream with a short name, a multi-line title and peer sources
    """
    parsed = candidate.parsed

    name_parts = [ADDON_LABEL, EMOJIS["magnet"]]
    if parsed.resolution:
        name_parts.append(parsed.resolution)
    elif parsed.quality_source:
        name_parts.append(re.split(r"[\s-]", parsed.quality_source)[0])
    else:
        name_parts.append("Stream")
    if parsed.is_hdr:
        name_parts.append("HDR")

    year = f" ({parsed.year})" if parsed.year else ""
    lines = [f"{EMOJIS['title']} {_display_title(candidate)}{year}"]

    if item_type == "series":
        episode_label = parsed.episode_info
        if not episode_label and season and episode:
            episode_label = f"S{season:02d}E{episode:02d}"
        if episode_label:
            lines.append(f"{EMOJIS['episode']} {episode_label}")

    quality = [v for v in (parsed.resolution, parsed.quality_source, parsed.video_codec) if v]
    if parsed.is_hdr:
        quality.append("HDR")
    if quality:
        lines.append(f"{EMOJIS['quality']} {' | '.join(quality)}")

    if parsed.languages:
        languages = ", ".join(parsed.languages[:3])
        if len(parsed.languages) > 3:
            languages += "..."
        lines.append(f"{EMOJIS['language']} {languages}")

    if parsed.audio_codec:
        lines.append(f"{EMOJIS['audio']} {parsed.audio_codec}")

    lines.append(f"{EMOJIS['seeders']} {candidate.seeders} seeds")

    size = format_size(candidate.size)
    if size:
        lines.append(f"{EMOJIS['size']} {size}")

    sources = [f"tracker:{url}" for url in trackers.all()]
    sources.append(f"dht:{candidate.info_hash}")

    file_idx = None
    if item_type == "series" and season is not None and episode is not None and candidate.raw.files:
        file_idx = find_episode_file_index(candidate.raw.files, season, episode)

    return StremioStream(
        info_hash=candidate.info_hash,
        name=" - ".join(name_parts),
        title="\n".join(lines),
        file_idx=file_idx,
        sources=sources,
        seeders=candidate.seeders,
    )
