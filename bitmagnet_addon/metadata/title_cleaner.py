"""Build a clean display title by stripping parsed release tokens."""
import re
import logging
from typing import List, Optional

from bitmagnet_addon.metadata import patterns
from bitmagnet_addon.metadata.models import ParsedMetadata

logger = logging.getLogger(__name__)

_SEPARATORS = re.compile(r"[._-]+")
_WHITESPACE = re.compile(r"\s+")
_BARE_YEAR = re.compile(r"\d{4}")


def clean_title(title: str, parsed: ParsedMetadata, search_title: Optional[str] = None) -> str:
    """
    Remove parsed metadata and release noise from a torrent title.

    Every value captured in ``parsed`` is removed as a whole token, then common
    release tags are stripped and separators collapse to single spaces. If
    that leaves something implausible (a very short string or a bare year),
    the search title or the original title is used with only the year and
    release group removed.

    Args:
        title: Original torrent title
        parsed: Metadata already extracted from ``title``
        search_title: Standardized title used to query the index

    Returns:
        Display title; never empty when ``title`` is not empty
    """
    if not title:
        return title

    cleaned = title
    for term in _terms_to_remove(title, parsed):
        cleaned = _remove_token(cleaned, term)

    for trash in patterns.TRASH_TERMS:
        cleaned = trash.sub(" ", cleaned)

    cleaned = _collapse(cleaned)

    if not cleaned or (len(cleaned) < 5 and len(title) > 10) or _BARE_YEAR.fullmatch(cleaned):
        logger.debug(f"Cleaned title '{cleaned}' is implausible for '{title}', using fallback")
        return _fallback_title(title, parsed, search_title)

    return cleaned


def _terms_to_remove(title: str, parsed: ParsedMetadata) -> List[str]:
    terms = [
        str(parsed.year) if parsed.year else None,
        parsed.resolution,
        parsed.quality_source,
        parsed.video_codec,
        parsed.episode_info,
        parsed.release_group,
    ]

    if parsed.audio_codec:
        # Bare channel layouts like 5.1 are left alone
        terms.extend(token for token in parsed.audio_codec.split() if re.search(r"[A-Z]", token))

    if parsed.is_hdr:
        hdr_match = patterns.HDR.search(title)
        terms.append(hdr_match.group(1) if hdr_match else "HDR")
    if parsed.is_3d:
        terms.append("3D")

    terms.extend(
        language for language in parsed.languages
        if len(language) <= 3 or language.upper() in patterns.LANGUAGE_MAP
    )
    # Raw tags like ENG or ENG+TAM; title-cased words such as "It" stay
    for match in patterns.LANGUAGES.finditer(title):
        raw = match.group(1)
        if patterns.LANGUAGE_SEPARATORS.search(raw) or (len(raw) >= 3 and raw.isupper()):
            terms.append(raw)
    return [term for term in terms if term]


def _remove_token(text: str, term: str) -> str:
    """Replace ``term`` with a space wherever it stands between separators or string edges."""
    token = re.compile(rf"(?:^|[.\s_\-\[]){re.escape(term)}(?:[.\s_\-\]]|$)", re.IGNORECASE)
    return token.sub(" ", text)


def _collapse(text: str) -> str:
    return _WHITESPACE.sub(" ", _SEPARATORS.sub(" ", text)).strip()


def _strip_loosely(text: str, term: str) -> str:
    return re.sub(rf"[.\s_-]?{re.escape(term)}[.\s_-]?", " ", text, flags=re.IGNORECASE)


def _fallback_title(title: str, parsed: ParsedMetadata, search_title: Optional[str]) -> str:
    fallback = search_title or title
    if parsed.year:
        fallback = _strip_loosely(fallback, str(parsed.year))
    if parsed.release_group:
        fallback = _strip_loosely(fallback, parsed.release_group)
    fallback = _collapse(fallback)
    if fallback:
        return fallback

    if parsed.release_group:
        without_group = _strip_loosely(title, parsed.release_group).strip()
        if without_group:
            return without_group

    return title.strip() or title
