"""Normalize request titles and years before querying the index."""
import re
from datetime import date
from typing import Optional, Union

_EDITION_TAGS = [
    "EXTENDED", "UNCUT", "DIRECTORS CUT", "REMASTERED", "SPECIAL EDITION",
    "THEATRICAL", "UNRATED", "PROPER", "REPACK", "LIMITED", "COMPLETE", "ULTIMATE",
    "FINAL CUT", "ANNIVERSARY EDITION", "COLLECTORS EDITION",
]


def standardize_title(title: Optional[str]) -> str:
    """
    Normalize a title for searching.

    Replaces "&" with "and", turns dots/underscores/brackets/hyphens into spaces,
    and drops a trailing year, episode marker, "Season N" or edition tag.

    Args:
        title: Raw title

    Returns:
        Standardized title, or '' for empty input
    """
    if not title:
        return ''

    standardized = re.sub(r"\s+&\s+", " and ", title)
    standardized = re.sub(r"\s+and\s+", " and ", standardized, flags=re.IGNORECASE)
    standardized = re.sub(r"[._()\[\]-]", " ", standardized)
    standardized = re.sub(r"\s+", " ", standardized).strip()

    standardized = re.sub(r"\s+(?:19[7-9]\d|20[0-3]\d)$", "", standardized)
    standardized = re.sub(r"\s+[Ss]\d{1,2}[Ee]\d{1,3}(?:-[Ee]?\d{1,3})?$", "", standardized)
    standardized = re.sub(r"\s+Season\s+\d{1,2}$", "", standardized, flags=re.IGNORECASE)

    for tag in _EDITION_TAGS:
        standardized = re.sub(rf"\s+\b{tag}\b", "", standardized, flags=re.IGNORECASE)

    return standardized.strip()


def standardize_year(year_input: Union[str, int, None]) -> Optional[int]:
    """
    Pull a plausible year out of a year, date or datetime string.

    Accepts 1880 through five years from now.
    """
    if year_input is None:
        return None

    match = re.search(r"(?<!\d)(?:1[89]\d{2}|20\d{2})(?!\d)", str(year_input).strip())
    if not match:
        return None

    year = int(match.group(0))
    if 1880 <= year <= date.today().year + 5:
        return year
    return None
