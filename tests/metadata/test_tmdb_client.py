from unittest.mock import Mock, patch

from bitmagnet_addon.metadata import tmdb_client
from bitmagnet_addon.metadata.tmdb_client import TMDBClient

FIND_RESPONSE = {
    "movie_results": [{"id": 603, "title": "The Matrix", "release_date": "1999-03-30"}],
    "tv_results": [{"id": 1399, "name": "Game of Thrones", "first_air_date": "2011-04-17"}],
}


def _client(response=None, side_effect=None):
    with patch.object(tmdb_client, "TMDb"), patch.object(tmdb_client, "Find") as find_cls:
        find = Mock()
        find.find_by_imdb_id.return_value = response
        find.find_by_imdb_id.side_effect = side_effect
        find_cls.return_value = find
        return TMDBClient(api_key="key")


def test_movie_lookup():
    client = _client(FIND_RESPONSE)

    assert client.find_by_imdb_id("tt0133093", "movie") == {
        "title": "The Matrix",
        "year": 1999,
        "media_type": "movie",
        "tmdb_id": 603,
    }


def test_series_prefers_tv_results():
    client = _client(FIND_RESPONSE)

    result = client.find_by_imdb_id("tt0944947", "series")

    assert result["title"] == "Game of Thrones"
    assert result["year"] == 2011
    assert result["media_type"] == "tv"


def test_falls_back_to_other_result_list():
    client = _client({"movie_results": [], "tv_results": FIND_RESPONSE["tv_results"]})

    assert client.find_by_imdb_id("tt0944947", "movie")["media_type"] == "tv"


def test_no_results():
    client = _client({"movie_results": [], "tv_results": []})

    assert client.find_by_imdb_id("tt0000000") is None


def test_api_error_returns_none():
    client = _client(side_effect=RuntimeError("boom"))

    assert client.find_by_imdb_id("tt0133093") is None


def test_disabled_without_key(monkeypatch):
    monkeypatch.setattr(tmdb_client.settings, "tmdb_api_key", "")

    client = TMDBClient(api_key="")

    assert client.enabled is False
    assert client.find_by_imdb_id("tt0133093") is None
