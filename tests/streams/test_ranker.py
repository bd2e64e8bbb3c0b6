from bitmagnet_addon.bitmagnet.models import BitmagnetTorrent
from bitmagnet_addon.metadata.title_parser import parse_torrent_title
from bitmagnet_addon.streams.models import Candidate, RankingConfig, SortPreference
from bitmagnet_addon.streams.ranker import (
    compare_preferred_language,
    compare_quality,
    compare_seeders,
    compare_size,
    dedupe_torrents,
    filter_low_quality,
    filter_min_seeders,
    rank_candidates,
    sort_candidates,
)


def _hashes(candidates):
    return [c.info_hash for c in candidates]


def _from_title(info_hash, title, seeders=0):
    raw = BitmagnetTorrent(info_hash=info_hash, title=title, seeders=seeders)
    return Candidate(raw=raw, parsed=parse_torrent_title(title), seeders=seeders)


def test_dedupe_keeps_first_seen():
    first = BitmagnetTorrent(info_hash="aaa", title="First", seeders=1)
    duplicate = BitmagnetTorrent(info_hash="aaa", title="Second", seeders=99)
    other = BitmagnetTorrent(info_hash="bbb", title="Other")

    unique = dedupe_torrents([first, other, duplicate])

    assert [t.title for t in unique] == ["First", "Other"]


def test_filter_min_seeders(make_candidate):
    candidates = [make_candidate("a", seeders=1), make_candidate("b", seeders=5)]

    assert _hashes(filter_min_seeders(candidates, 5)) == ["b"]
    assert _hashes(filter_min_seeders(candidates, 0)) == ["a", "b"]


def test_cam_removed_when_bluray_exists():
    cam = _from_title("cam", "Movie.2023.CAM.XViD", seeders=500)
    bluray = _from_title("bluray", "Movie.2023.1080p.BluRay", seeders=10)

    ranked = rank_candidates([cam, bluray], RankingConfig(filter_low_quality=True))

    assert _hashes(ranked) == ["bluray"]


def test_low_quality_kept_without_alternative(make_candidate):
    candidates = [make_candidate("cam", source="CAM"), make_candidate("ts", source="TS")]

    assert _hashes(filter_low_quality(candidates)) == ["cam", "ts"]


def test_low_resolution_filter_keeps_dvd(make_candidate):
    candidates = [
        make_candidate("hd", resolution="1080P", source="WEB-DL"),
        make_candidate("dvd", resolution="480P", source="DVD"),
        make_candidate("sd", resolution="480P", source="WEBRIP"),
        make_candidate("unknown"),
    ]

    assert _hashes(filter_low_quality(candidates)) == ["hd", "dvd"]


def test_filter_can_be_disabled():
    cam = _from_title("cam", "Movie.2023.CAM.XViD", seeders=500)
    bluray = _from_title("bluray", "Movie.2023.1080p.BluRay", seeders=10)

    ranked = rank_candidates([cam, bluray], RankingConfig(filter_low_quality=False))

    assert _hashes(ranked) == ["cam", "bluray"]


def test_sort_by_seeders(make_candidate):
    candidates = [make_candidate("a", seeders=1), make_candidate("b", seeders=50), make_candidate("c", seeders=10)]
    config = RankingConfig(sort_preference=[SortPreference.SEEDERS])

    assert _hashes(sort_candidates(candidates, config)) == ["b", "c", "a"]


def test_sort_is_stable(make_candidate):
    candidates = [make_candidate(h, resolution="1080P", source="BLURAY", seeders=7) for h in "abcde"]
    config = RankingConfig(sort_preference=list(SortPreference))

    assert _hashes(sort_candidates(candidates, config)) == list("abcde")


def test_later_keys_break_ties(make_candidate):
    candidates = [
        make_candidate("720", resolution="720P", source="BLURAY", seeders=10),
        make_candidate("1080", resolution="1080P", source="BLURAY", seeders=10),
    ]
    config = RankingConfig(sort_preference=[SortPreference.SEEDERS, SortPreference.QUALITY])

    assert _hashes(sort_candidates(candidates, config)) == ["1080", "720"]


def test_preferred_language_first(make_candidate):
    french = make_candidate("fr", seeders=100, languages=["French"])
    english = make_candidate("en", seeders=1, languages=["English"])
    config = RankingConfig(
        preferred_language="ENG",
        sort_preference=[SortPreference.PREFERRED_LANGUAGE, SortPreference.SEEDERS],
    )

    assert _hashes(sort_candidates([french, english], config)) == ["en", "fr"]


def test_exact_language_beats_partial(make_candidate):
    partial = make_candidate("partial", languages=["English Subtitles"])
    exact = make_candidate("exact", languages=["English"])
    config = RankingConfig(preferred_language="English")

    assert compare_preferred_language(exact, partial, config) < 0
    assert compare_preferred_language(partial, exact, config) > 0


def test_compare_quality_uses_sort_order_for_equal_ranks(make_candidate):
    uhd = make_candidate("uhd", resolution="2160P")
    fhd = make_candidate("fhd", resolution="1080P")
    odd = make_candidate("odd", resolution="999P")
    config = RankingConfig(quality_sort_order=["2160P", "1080P"])

    assert compare_quality(uhd, fhd, config) < 0
    assert compare_quality(fhd, uhd, config) > 0
    assert compare_quality(odd, fhd, config) > 0
    assert compare_quality(odd, odd, config) == 0


def test_compare_seeders_and_size(make_candidate):
    config = RankingConfig()
    small = make_candidate("small", seeders=5, size=100)
    big = make_candidate("big", seeders=1, size=1000)

    assert compare_seeders(small, big, config) < 0
    assert compare_size(big, small, config) < 0
    assert compare_size(make_candidate("none"), small, config) > 0


def test_rank_candidates_applies_min_seeders(make_candidate):
    candidates = [
        make_candidate("few", resolution="1080P", source="BLURAY", seeders=1),
        make_candidate("many", resolution="1080P", source="BLURAY", seeders=20),
    ]

    assert _hashes(rank_candidates(candidates, RankingConfig(min_seeders=2))) == ["many"]
