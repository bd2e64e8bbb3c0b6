import pytest

from bitmagnet_addon.metadata.models import ParsedMetadata
from bitmagnet_addon.metadata.title_cleaner import clean_title
from bitmagnet_addon.metadata.title_parser import extract_metadata, parse_torrent_title


def test_removes_trash_terms():
    parsed = parse_torrent_title("Movie.Title.2020.PROPER.1080p.WEB-DL.x264-GRP")

    assert parsed.cleaned_title == "Movie Title"


def test_removes_hdr_marker():
    parsed = parse_torrent_title("Movie.2021.2160p.BluRay.HDR.x265-GRP")

    assert parsed.cleaned_title == "Movie"


def test_short_result_falls_back_to_search_title():
    parsed = parse_torrent_title("Up.2009.1080p.BluRay.x264-GRP", search_title="Up")

    assert parsed.cleaned_title == "Up"


def test_keeps_words_that_only_contain_tokens():
    # "Cameraman" contains CAM and "Webster" contains WEB; only whole tokens go
    parsed = parse_torrent_title("The.Cameraman.Webster.1928.720p.BluRay.x264-GRP")

    assert parsed.cleaned_title == "The Cameraman Webster"


def test_empty_title():
    assert clean_title("", ParsedMetadata(original_title="")) == ""


def test_never_empty_for_non_empty_title():
    title = "1080p.BluRay.x264"
    parsed = parse_torrent_title(title)

    assert parsed.cleaned_title


@pytest.mark.parametrize(
    "title, expected",
    [
        ("Movie.Title.2022.1080p.WEB-DL.ENG+TAM.x264-GRP", "Movie Title"),
        ("Movie.Title.2022.1080p.WEB-DL.FRENCH.x264-GRP", "Movie Title"),
        ("The.Spa.Weekend.2019.720p.WEB-DL.x264-GRP", "The Spa Weekend"),
    ],
)
def test_language_tags(title, expected):
    assert parse_torrent_title(title).cleaned_title == expected


@pytest.mark.parametrize(
    "title, search_title, expected",
    [
        # Search title holds nothing but the year: original title minus the group
        ("Ab.2020.1080p.BluRay.x264-GRP", "2020", "Ab.2020.1080p.BluRay.x264"),
        # Nothing survives any step: original title verbatim
        ("2023", None, "2023"),
        ("2023", "2023", "2023"),
    ],
)
def test_fallback_chain(title, search_title, expected):
    assert clean_title(title, extract_metadata(title), search_title) == expected
