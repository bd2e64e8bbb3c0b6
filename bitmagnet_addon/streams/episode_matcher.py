"""Decide whether a release can contain a requested series episode."""
import re

from bitmagnet_addon.metadata.models import ParsedMetadata


def matches_episode(parsed: ParsedMetadata, season: int, episode: int) -> bool:
    """
    Check a release's episode marker against the requested season and episode.

    Releases without any episode marker are accepted: without a file listing
    they may still be a complete season or series pack.

    Args:
        parsed: Parsed metadata of the release
        season: Requested season number
        episode: Requested episode number

    Returns:
        True for an exact SxxEyy match, a matching season pack, or no marker at all
    """
    if not parsed.episode_info:
        return True

    season_alt = f"{season:02d}|{season}"
    episode_alt = f"{episode:02d}|{episode}"

    exact = re.compile(rf"S(?:{season_alt})E(?:{episode_alt})(?!\d)", re.IGNORECASE)
    season_pack = re.compile(rf"S(?:{season_alt})(?!\d|E)", re.IGNORECASE)

    return bool(exact.search(parsed.episode_info) or season_pack.search(parsed.episode_info))
