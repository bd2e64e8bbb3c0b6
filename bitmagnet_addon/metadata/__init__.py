"""Metadata module for parsing, cleaning and ranking torrent release titles."""

from bitmagnet_addon.metadata.models import ParsedMetadata
from bitmagnet_addon.metadata.title_parser import parse_torrent_title, extract_metadata, parse_size
from bitmagnet_addon.metadata.title_cleaner import clean_title
from bitmagnet_addon.metadata.quality import QualityRank, get_quality_rank

__all__ = [
    'ParsedMetadata',
    'parse_torrent_title',
    'extract_metadata',
    'parse_size',
    'clean_title',
    'QualityRank',
    'get_quality_rank',
]
