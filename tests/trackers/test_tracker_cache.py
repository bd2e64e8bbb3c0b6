import threading
from unittest.mock import Mock, patch

import requests

from bitmagnet_addon.trackers.cache import (
    FALLBACK_TRACKERS,
    RefreshResult,
    TrackerCache,
    categorize_trackers,
    fetch_best_trackers,
)

TRACKERS = [
    "udp://tracker.opentrackr.org:1337/announce",
    "http://tracker.example.org/announce",
    "wss://tracker.webtorrent.dev",
]


def test_refresh_and_ttl(clock):
    fetch = Mock(return_value=TRACKERS)
    cache = TrackerCache(fetch=fetch, ttl=60, clock=clock, spawn=Mock())

    assert cache.refresh() == RefreshResult.REFRESHED
    assert cache.get().udp == ["udp://tracker.opentrackr.org:1337/announce"]
    assert cache.get().http == ["http://tracker.example.org/announce"]
    assert cache.get().ws == ["wss://tracker.webtorrent.dev"]

    clock.advance(30)
    assert cache.refresh() == RefreshResult.SKIPPED_FRESH

    clock.advance(31)
    assert cache.refresh() == RefreshResult.REFRESHED
    assert fetch.call_count == 2


def test_force_refresh(clock):
    fetch = Mock(return_value=TRACKERS)
    cache = TrackerCache(fetch=fetch, clock=clock, spawn=Mock())
    cache.refresh()

    assert cache.refresh(force=True) == RefreshResult.REFRESHED
    assert fetch.call_count == 2


def test_fetch_error_uses_fallback(clock):
    cache = TrackerCache(fetch=Mock(side_effect=requests.ConnectionError("down")), clock=clock, spawn=Mock())

    assert cache.refresh() == RefreshResult.FALLBACK
    assert cache.get() == categorize_trackers(FALLBACK_TRACKERS)
    assert len(cache.get().udp) == 8
    assert len(cache.get().ws) == 2


def test_empty_fetch_uses_fallback(clock):
    cache = TrackerCache(fetch=Mock(return_value=["", "not a tracker"]), clock=clock, fallback=["udp://fallback:1"])

    assert cache.refresh() == RefreshResult.FALLBACK
    assert cache.get().all() == ["udp://fallback:1"]


def test_fallback_is_not_retried_immediately(clock):
    fetch = Mock(side_effect=RuntimeError("down"))
    cache = TrackerCache(fetch=fetch, ttl=60, clock=clock, spawn=Mock())

    cache.refresh()
    assert cache.refresh() == RefreshResult.SKIPPED_FRESH
    assert fetch.call_count == 1


def test_concurrent_refresh_reports_in_progress(clock):
    started = threading.Event()
    release = threading.Event()
    calls = []

    def slow_fetch():
        calls.append(1)
        started.set()
        release.wait(5)
        return TRACKERS

    spawn = Mock()
    cache = TrackerCache(fetch=slow_fetch, clock=clock, spawn=spawn)
    worker = threading.Thread(target=cache.refresh)
    worker.start()
    assert started.wait(5)

    assert cache.refresh() == RefreshResult.IN_PROGRESS
    # get() does not wait for the running refresh and does not start another
    assert cache.get().all() == []
    spawn.assert_not_called()

    release.set()
    worker.join(5)

    assert len(calls) == 1
    assert len(cache.get().all()) == 3


def test_get_on_empty_cache_starts_background_refresh(clock):
    spawn = Mock()
    cache = TrackerCache(fetch=Mock(return_value=TRACKERS), clock=clock, spawn=spawn)

    assert cache.get().all() == []
    spawn.assert_called_once_with(cache.refresh)


def test_empty_cache_retry_delay(clock):
    spawn = Mock()
    cache = TrackerCache(fetch=Mock(side_effect=RuntimeError("down")), clock=clock, fallback=[], spawn=spawn)
    cache.refresh()

    cache.get()
    spawn.assert_not_called()

    clock.advance(31)
    cache.get()
    spawn.assert_called_once()


def test_get_on_expired_cache_starts_background_refresh(clock):
    spawn = Mock()
    cache = TrackerCache(fetch=Mock(return_value=TRACKERS), ttl=60, clock=clock, spawn=spawn)
    cache.refresh()

    assert len(cache.get().all()) == 3
    spawn.assert_not_called()

    clock.advance(61)
    # Stale trackers are still served while the refresh runs
    assert len(cache.get().all()) == 3
    spawn.assert_called_once_with(cache.refresh)


def test_get_never_raises(clock):
    cache = TrackerCache(fetch=Mock(return_value=TRACKERS), clock=clock, spawn=Mock(side_effect=RuntimeError("no threads")))

    assert cache.get().all() == []


def test_refresh_in_background(clock):
    spawn = Mock()
    cache = TrackerCache(fetch=Mock(return_value=TRACKERS), clock=clock, spawn=spawn)

    assert cache.refresh_in_background() is True
    spawn.assert_called_once_with(cache.refresh)

    cache.refresh()
    assert cache.refresh_in_background() is False


def test_categorize_trackers():
    sources = categorize_trackers([
        "http://a.example/announce",
        "https://b.example/announce",
        " udp://c.example:80 ",
        "ws://d.example",
        "",
        "magnet:?xt=urn:btih:abc",
        "not a url",
    ])

    assert sources.http == ["http://a.example/announce", "https://b.example/announce"]
    assert sources.udp == ["udp://c.example:80"]
    assert sources.ws == ["ws://d.example"]
    assert sources.all() == sources.http + sources.udp + sources.ws


def test_fetch_best_trackers():
    response = Mock(text="udp://a.example:1337/announce\n\nhttp://b.example/announce\n")
    with patch("bitmagnet_addon.trackers.cache.requests.get", return_value=response) as get:
        trackers = fetch_best_trackers("https://lists.example/best.txt", timeout=3)

    assert trackers == ["udp://a.example:1337/announce", "http://b.example/announce"]
    get.assert_called_once_with("https://lists.example/best.txt", timeout=3)
    response.raise_for_status.assert_called_once()
