from bitmagnet_addon.config.settings import PLACEHOLDER_ENDPOINT, Settings
from bitmagnet_addon.streams.models import SortPreference


def _settings(**kwargs):
    return Settings(_env_file=None, **kwargs)


def test_defaults(monkeypatch):
    monkeypatch.delenv("MIN_SEEDERS", raising=False)
    monkeypatch.delenv("BITMAGNET_GRAPHQL_ENDPOINT", raising=False)
    settings = _settings()

    assert settings.min_seeders == 0
    assert settings.filter_low_quality is True
    assert settings.is_bitmagnet_configured() is False
    assert settings.get_sort_preferences() == [
        SortPreference.SEEDERS,
        SortPreference.PREFERRED_LANGUAGE,
        SortPreference.QUALITY,
    ]


def test_environment_variables(monkeypatch):
    monkeypatch.setenv("MIN_SEEDERS", "5")
    monkeypatch.setenv("bitmagnet_graphql_endpoint", "http://bitmagnet.local/graphql")

    settings = _settings()

    assert settings.min_seeders == 5
    assert settings.is_bitmagnet_configured() is True


def test_placeholder_endpoint_is_not_configured():
    assert _settings(bitmagnet_graphql_endpoint=PLACEHOLDER_ENDPOINT).is_bitmagnet_configured() is False


def test_sort_preferences_skip_unknown_and_duplicates():
    settings = _settings(sort_preferences="quality, bogus ,seeders,quality,size")

    assert settings.get_sort_preferences() == [SortPreference.QUALITY, SortPreference.SEEDERS, SortPreference.SIZE]


def test_quality_sort_order():
    assert _settings(quality_sort_order=" 2160p, 1080p ,,").get_quality_sort_order() == ["2160P", "1080P"]


def test_ranking_config():
    config = _settings(preferred_language="FRE", min_seeders=3, filter_low_quality=False).get_ranking_config()

    assert config.preferred_language == "FRE"
    assert config.min_seeders == 3
    assert config.filter_low_quality is False
    assert config.quality_sort_order[0] == "2160P"
