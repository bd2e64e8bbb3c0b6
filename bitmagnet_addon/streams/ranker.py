"""Filter and sort stream candidates."""
import logging
from functools import cmp_to_key
from typing import Callable, Dict, Iterable, List

from bitmagnet_addon.bitmagnet.models import BitmagnetTorrent
from bitmagnet_addon.metadata import patterns
from bitmagnet_addon.metadata.quality import QualityRank, get_quality_rank
from bitmagnet_addon.streams.models import Candidate, RankingConfig, SortPreference

logger = logging.getLogger(__name__)

Comparator = Callable[[Candidate, Candidate, RankingConfig], int]


def dedupe_torrents(torrents: Iterable[BitmagnetTorrent]) -> List[BitmagnetTorrent]:
    """Keep the first torrent seen for each info hash."""
    unique: Dict[str, BitmagnetTorrent] = {}
    for torrent in torrents:
        unique.setdefault(torrent.info_hash, torrent)
    return list(unique.values())


def filter_min_seeders(candidates: List[Candidate], min_seeders: int) -> List[Candidate]:
    if min_seeders <= 0:
        return list(candidates)
    return [candidate for candidate in candidates if candidate.seeders >= min_seeders]


def filter_low_quality(candidates: List[Candidate]) -> List[Candidate]:
    """
    Drop low-quality releases, but only when a decent alternative exists.

    Active only if some candidate ranks HDTV_720P or better. Removes LOW_QUALITY
    and UNKNOWN ranks and low resolutions ranked below DVD.
    """
    if not any(get_quality_rank(c.parsed) >= QualityRank.HDTV_720P for c in candidates):
        return list(candidates)

    kept = []
    for candidate in candidates:
        rank = get_quality_rank(candidate.parsed)
        if rank in (QualityRank.LOW_QUALITY, QualityRank.UNKNOWN):
            continue
        resolution = (candidate.parsed.resolution or "").upper()
        if resolution in patterns.LOW_QUALITY_RESOLUTIONS and rank < QualityRank.DVD:
            continue
        kept.append(candidate)
    return kept


def compare_seeders(a: Candidate, b: Candidate, config: RankingConfig) -> int:
    return b.seeders - a.seeders


def compare_preferred_language(a: Candidate, b: Candidate, config: RankingConfig) -> int:
    """Exact language match first; substring match on the joined languages as a fallback."""
    preferred = config.preferred_language.upper()
    if not preferred:
        return 0

    a_exact = preferred in (language.upper() for language in a.parsed.languages)
    b_exact = preferred in (language.upper() for language in b.parsed.languages)
    if a_exact != b_exact:
        return -1 if a_exact else 1

    a_partial = preferred in " ".join(a.parsed.languages).upper()
    b_partial = preferred in " ".join(b.parsed.languages).upper()
    if a_partial != b_partial:
        return -1 if a_partial else 1
    return 0


def compare_quality(a: Candidate, b: Candidate, config: RankingConfig) -> int:
    """Higher rank first; equal ranks fall back to the position in quality_sort_order."""
    comparison = get_quality_rank(b.parsed) - get_quality_rank(a.parsed)
    if comparison:
        return comparison

    order = config.quality_sort_order
    a_res = (a.parsed.resolution or "UNKNOWN").upper()
    b_res = (b.parsed.resolution or "UNKNOWN").upper()
    a_index = order.index(a_res) if a_res in order else -1
    b_index = order.index(b_res) if b_res in order else -1

    if a_index != -1 and b_index != -1:
        return a_index - b_index
    if a_index != -1:
        return -1
    if b_index != -1:
        return 1
    return 0


def compare_size(a: Candidate, b: Candidate, config: RankingConfig) -> int:
    return (b.size or 0) - (a.size or 0)


COMPARATORS: Dict[SortPreference, Comparator] = {
    SortPreference.SEEDERS: compare_seeders,
    SortPreference.PREFERRED_LANGUAGE: compare_preferred_language,
    SortPreference.QUALITY: compare_quality,
    SortPreference.SIZE: compare_size,
}


def sort_candidates(candidates: List[Candidate], config: RankingConfig) -> List[Candidate]:
    """Stable sort by the configured preferences, first non-zero comparison wins."""
    comparators = [COMPARATORS[preference] for preference in config.sort_preference]

    def compare(a: Candidate, b: Candidate) -> int:
        for comparator in comparators:
            result = comparator(a, b, config)
            if result:
                return result
        return 0

    return sorted(candidates, key=cmp_to_key(compare))


def rank_candidates(candidates: List[Candidate], config: RankingConfig) -> List[Candidate]:
    """
    Filter and order candidates for display.

    Args:
        candidates: Parsed candidates, already de-duplicated
        config: Ranking options

    Returns:
        New list, best candidate first
    """
    ranked = filter_min_seeders(candidates, config.min_seeders)
    if config.min_seeders > 0:
        logger.info(f"{len(ranked)} candidates after minSeeders ({config.min_seeders}) filter")

    if config.filter_low_quality and ranked:
        before = len(ranked)
        ranked = filter_low_quality(ranked)
        if len(ranked) != before:
            logger.info(f"Filtered low quality releases, {len(ranked)} of {before} candidates remaining")

    return sort_candidates(ranked, config)
