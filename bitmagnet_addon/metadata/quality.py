"""Rank releases on an ordinal quality scale from resolution and source."""
import re
import logging
from enum import Enum, IntEnum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from bitmagnet_addon.metadata import patterns
from bitmagnet_addon.metadata.models import ParsedMetadata

logger = logging.getLogger(__name__)


class QualityRank(IntEnum):
    """Quality hierarchy used for sorting. Higher is better."""
    UNKNOWN = -1
    LOW_QUALITY = 0    # CAM, TS, TC, SCR
    SD = 1             # 480p/576p from a non-DVD source
    HDTV_720P = 2
    DVD = 3            # DVD and SD BDRip/BRRip
    HDTV_1080P = 4
    WEBDL_720P = 5
    BLURAY_720P = 6
    WEBDL_1080P = 7
    WEBDL_2160P = 8
    BLURAY_1080P = 9
    UHD_BLURAY = 10


class Resolution(str, Enum):
    UHD_2160P = "2160P"
    FHD_1080P = "1080P"
    HD_720P = "720P"
    SD_576P = "576P"
    SD_480P = "480P"
    SD_360P = "360P"
    SD = "SD"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["Resolution"]:
        if not value:
            return None
        key = value.strip().upper()
        if key == "4K":
            return cls.UHD_2160P
        try:
            return cls(key)
        except ValueError:
            return None


class Source(str, Enum):
    """Normalized release sources (upper-case, no hyphens)."""
    BLURAY = "BLURAY"
    REMUX = "REMUX"
    WEBDL = "WEBDL"
    WEB = "WEB"
    WEBRIP = "WEBRIP"
    BDRIP = "BDRIP"
    BRRIP = "BRRIP"
    HDTV = "HDTV"
    DVD = "DVD"
    DVDRIP = "DVDRIP"
    DVDR = "DVDR"
    DVDSCR = "DVDSCR"
    SCREENER = "SCREENER"
    SCR = "SCR"
    TS = "TS"
    TELESYNC = "TELESYNC"
    TC = "TC"
    TELECINE = "TELECINE"
    CAM = "CAM"
    CAMRIP = "CAMRIP"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["Source"]:
        if not value:
            return None
        try:
            return cls(value.strip().upper().replace("-", ""))
        except ValueError:
            return None


RankKey = Tuple[Optional[Resolution], Optional[Source]]

R = Resolution
S = Source
Q = QualityRank

_RANK_TABLE = {
    # 2160p / 4K
    (R.UHD_2160P, S.BLURAY): Q.UHD_BLURAY,
    (R.UHD_2160P, S.REMUX): Q.UHD_BLURAY,
    (R.UHD_2160P, S.WEBDL): Q.WEBDL_2160P,
    (R.UHD_2160P, S.WEB): Q.WEBDL_2160P,
    (R.UHD_2160P, S.WEBRIP): Q.WEBDL_2160P,
    # 1080p
    (R.FHD_1080P, S.BLURAY): Q.BLURAY_1080P,
    (R.FHD_1080P, S.REMUX): Q.BLURAY_1080P,
    (R.FHD_1080P, S.BDRIP): Q.BLURAY_1080P,
    (R.FHD_1080P, S.BRRIP): Q.BLURAY_1080P,
    (R.FHD_1080P, S.WEBDL): Q.WEBDL_1080P,
    (R.FHD_1080P, S.WEB): Q.WEBDL_1080P,
    (R.FHD_1080P, S.WEBRIP): Q.WEBDL_1080P,
    (R.FHD_1080P, S.HDTV): Q.HDTV_1080P,
    # 720p
    (R.HD_720P, S.BLURAY): Q.BLURAY_720P,
    (R.HD_720P, S.REMUX): Q.BLURAY_720P,
    (R.HD_720P, S.BDRIP): Q.BLURAY_720P,
    (R.HD_720P, S.BRRIP): Q.BLURAY_720P,
    (R.HD_720P, S.WEBDL): Q.WEBDL_720P,
    (R.HD_720P, S.WEB): Q.WEBDL_720P,
    (R.HD_720P, S.WEBRIP): Q.WEBDL_720P,
    (R.HD_720P, S.HDTV): Q.HDTV_720P,
    # DVD / SD
    (R.SD_480P, S.DVD): Q.DVD,
    (R.SD_576P, S.DVD): Q.DVD,
    (R.SD_480P, S.BDRIP): Q.DVD,
    (R.SD_576P, S.BDRIP): Q.DVD,
    (None, S.DVDRIP): Q.DVD,
    (None, S.DVDR): Q.DVD,
    (R.SD_480P, None): Q.SD,
    (R.SD_576P, None): Q.SD,
    (R.SD, None): Q.SD,
    # Low quality
    (None, S.DVDSCR): Q.LOW_QUALITY,
    (None, S.SCREENER): Q.LOW_QUALITY,
    (None, S.SCR): Q.LOW_QUALITY,
    (None, S.TS): Q.LOW_QUALITY,
    (None, S.TELESYNC): Q.LOW_QUALITY,
    (None, S.TC): Q.LOW_QUALITY,
    (None, S.TELECINE): Q.LOW_QUALITY,
    (None, S.CAM): Q.LOW_QUALITY,
    (None, S.CAMRIP): Q.LOW_QUALITY,
    # Bare sources assume the most common resolution
    (None, S.BLURAY): Q.BLURAY_1080P,
    (None, S.WEBDL): Q.WEBDL_1080P,
    (None, S.WEB): Q.WEBDL_1080P,
    (None, S.WEBRIP): Q.WEBDL_1080P,
    (None, S.BDRIP): Q.BLURAY_720P,
    (None, S.BRRIP): Q.BLURAY_720P,
    (None, S.HDTV): Q.HDTV_720P,
}

RANK_TABLE: Mapping[RankKey, QualityRank] = MappingProxyType(_RANK_TABLE)

del R, S, Q


def get_quality_rank(parsed: Optional[ParsedMetadata]) -> QualityRank:
    """
    Classify parsed release metadata into a quality rank.

    Decision order:
    1. Any low-quality marker in the source (CAM, TS, SCR...) wins outright.
    2. Low resolutions (480p/360p/SD) rank as DVD for DVD-class sources, SD otherwise.
    3. Resolution + source lookup, retried with the first word of compound sources.
    4. Source alone, then resolution alone.

    Args:
        parsed: Parsed metadata, may be None

    Returns:
        The rank; UNKNOWN when nothing matches
    """
    if parsed is None:
        return QualityRank.UNKNOWN

    resolution_text = (parsed.resolution or "").strip().upper()
    source_text = (parsed.quality_source or "").strip().upper()

    if source_text and any(term in source_text for term in patterns.LOW_QUALITY_TERMS):
        return QualityRank.LOW_QUALITY

    if resolution_text in patterns.LOW_QUALITY_RESOLUTIONS:
        if any(term in source_text for term in patterns.DVD_CLASS_TERMS):
            return QualityRank.DVD
        return QualityRank.SD

    resolution = Resolution.parse(resolution_text)
    source = Source.parse(source_text)

    if resolution and source_text:
        if source and (resolution, source) in RANK_TABLE:
            return RANK_TABLE[(resolution, source)]
        # Compound sources like "BLURAY REMUX" or "WEB-DL"
        first_word = Source.parse(re.split(r"[\s-]", source_text)[0])
        if first_word and (resolution, first_word) in RANK_TABLE:
            return RANK_TABLE[(resolution, first_word)]

    if source and (None, source) in RANK_TABLE:
        return RANK_TABLE[(None, source)]

    if resolution and (resolution, None) in RANK_TABLE:
        return RANK_TABLE[(resolution, None)]

    return QualityRank.UNKNOWN
