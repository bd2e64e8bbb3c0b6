"""Regex patterns and lookup tables used to parse release titles."""
import re
from typing import Dict, List, Pattern


def _token(alternatives: str) -> Pattern[str]:
    """Compile alternatives that must be bounded by non-alphanumerics or string edges."""
    return re.compile(rf"(?<![A-Za-z0-9])({alternatives})(?![A-Za-z0-9])", re.IGNORECASE)


YEAR = _token(r"(?:19\d|20[0-3])\d")

# S01E01, S01E01-E02, S01, E01 / EP01, Part.01 (never 1080p or 4K)
SEASON_EPISODE = re.compile(
    r"(?<![A-Za-z0-9])S(\d{1,3})E(\d{1,4})(?:-E?(\d{1,4}))?"
    r"|(?<![A-Za-z0-9])S(\d{1,3})(?!\d|p|K)"
    r"|(?<![A-Za-z0-9])EP?(\d{1,4})(?!\d|p|K)"
    r"|PART\.?(\d{1,2})",
    re.IGNORECASE,
)

RESOLUTION = _token(r"4K|2160p|1080p|720p|576p|480p|360p|SD")

QUALITY_SOURCE = _token(
    r"BluRay|Blu-Ray|BDRip|BRRip|WEB-DL|WEBDL|WEB-Rip|WEBRip|WEB|HDRip|DVDRip|DVDScr|DVD-R|DVD"
    r"|SCREENER|SCR|TS|TELESYNC|TC|TELECINE|CAMRip|CAM|HDTV|PDTV|SATRip|DSR|REMUX"
)

VIDEO_CODEC = _token(r"x26[45]|H\.?26[45]|HEVC|AV1|AVC|XviD|DivX|VP9")

AUDIO_CODEC = _token(
    r"Atmos|TrueHD|DTS-HD(?:[\s.]?MA)?|DTS(?:-ES|-EX|-X)?|Dolby[\s.]Digital[\s.]Plus|DD\+|EAC3|AC3"
    r"|AAC(?:-LC|-HE)?|MP3|Opus|FLAC|PCM|Vorbis|DD\+?P?5\.1|DD\+?P?7\.1|5\.1|7\.1|2\.0|LiNE|AUD|STEREO"
)

HDR = _token(r"HDR10(?:Plus|\+)?|HDR|Dolby[\s.]Vision|DV|HLG")

THREE_D = _token(r"3D")

_LANGUAGE_TOKENS = (
    r"English|ENG|Spanish|SPA|ESP|French|FRE|FRA|FR|German|GER|DEU|DE|Italian|ITA|IT"
    r"|Russian|RUS|RU|Japanese|JPN|JP|Korean|KOR|KO|Chinese|CHI|ZH|Mandarin|Cantonese"
    r"|Hindi|HIN|HI|Tamil|TAM|TA|Telugu|TEL|TE|Malayalam|MAL|ML"
    r"|Dual[\s.]Audio|Multi[\s.]Audio|VOSTFR|SUBFRENCH|ENGSUB|SUBBED"
)
# A known language token, optionally chained with more tokens: ENG+TAM, ENG,HIN
LANGUAGES = _token(rf"(?:{_LANGUAGE_TOKENS})(?:[+,][A-Za-z]{{2,12}})*")

LANGUAGE_SEPARATORS = re.compile(r"[+,]")

# Trailing TOKEN or TOKEN-TOKEN following a separator
RELEASE_GROUP = re.compile(r"(?:^|[\s._\[-])(-?[A-Za-z0-9]+(?:-[A-Za-z0-9]+)?)\]?\s*$")

SIZE = re.compile(r"(\d+(?:\.\d+)?)\s*(TB|GB|MB|KB|TiB|GiB|MiB|KiB)", re.IGNORECASE)

SIZE_MULTIPLIERS: Dict[str, int] = {
    "KB": 1024,
    "MB": 1024 ** 2,
    "GB": 1024 ** 3,
    "TB": 1024 ** 4,
}

# Keys are upper-case
LANGUAGE_MAP: Dict[str, str] = {
    "ENG": "English", "ENGLISH": "English", "EN": "English",
    "SPA": "Spanish", "SPANISH": "Spanish", "ESPANOL": "Spanish", "ESP": "Spanish", "ES": "Spanish",
    "FRE": "French", "FRENCH": "French", "FRA": "French", "FR": "French",
    "GER": "German", "GERMAN": "German", "DEU": "German", "DE": "German",
    "ITA": "Italian", "ITALIAN": "Italian", "IT": "Italian",
    "RUS": "Russian", "RUSSIAN": "Russian", "RU": "Russian",
    "JPN": "Japanese", "JAPANESE": "Japanese", "JP": "Japanese",
    "KOR": "Korean", "KOREAN": "Korean", "KO": "Korean",
    "CHI": "Chinese", "CHINESE": "Chinese", "ZH": "Chinese",
    "MANDARIN": "Mandarin", "CANTONESE": "Cantonese",
    "HIN": "Hindi", "HINDI": "Hindi", "HI": "Hindi",
    "TAM": "Tamil", "TAMIL": "Tamil", "TA": "Tamil",
    "TEL": "Telugu", "TELUGU": "Telugu", "TE": "Telugu",
    "MAL": "Malayalam", "MALAYALAM": "Malayalam", "ML": "Malayalam",
    "DUALAUDIO": "Dual Audio", "MULTIAUDIO": "Multi Audio", "DUAL": "Dual Audio", "MULTI": "Multi Audio",
    "VOSTFR": "French (VOSTFR)", "SUBFRENCH": "French (Subbed)", "ENGSUB": "English Subtitles",
    "SUBBED": "Subbed",
}

# Words that can trail a language token but carry no language themselves
GENERIC_LANGUAGE_WORDS = {"AUDIO", "SUB", "SUBS", "DUB", "DUBBED", "LANG"}

LOW_QUALITY_TERMS: List[str] = [
    "CAM", "CAMRIP", "TS", "TELESYNC", "TC", "TELECINE", "SCR", "SCREENER", "DVDSCR", "PDVD", "WORKPRINT",
]

# Low quality unless the source is DVD-class
LOW_QUALITY_RESOLUTIONS: List[str] = ["480P", "360P", "SD"]

DVD_CLASS_TERMS: List[str] = ["DVD", "BDRIP", "BRRIP"]

# Release-tag noise stripped from display titles
TRASH_TERMS: List[Pattern[str]] = [
    re.compile(rf"\b{term}\b", re.IGNORECASE)
    for term in [
        "REQ", "REQUEST", "RARBG", "PROPER", "REPACK", "REAL", "FINAL",
        "UNRATED", "DIRECTORS CUT", "EXTENDED", "LIMITED", "CRITERION", "COLLECTION",
        "INTERNAL", "COMPLETE", "SUBBED", "SUBS", "SUBTITLE", "SUBTITLES",
    ]
] + [re.compile(r"\[[A-Za-z0-9\s\-]+\]")]
