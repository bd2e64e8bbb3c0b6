"""Tracker list cache with a TTL, a single in-flight refresh and a fallback list."""
import logging
import threading
import time
from enum import Enum
from typing import Any, Callable, Iterable, List, Optional
from urllib.parse import urlparse

import requests
from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

FALLBACK_TRACKERS = [
    "udp://tracker.opentrackr.org:1337/announce",
    "udp://open.tracker.cl:1337/announce",
    "udp://tracker.internetwarriors.net:1337/announce",
    "udp://tracker.leechers-paradise.org:6969/announce",
    "udp://tracker.coppersurfer.tk:6969/announce",
    "udp://exodus.desync.com:6969/announce",
    "wss://tracker.openwebtorrent.com",
    "wss://tracker.btorrent.xyz",
    "udp://tracker.dler.org:6969/announce",
    "udp://public.popcorn-tracker.org:6969/announce",
]


class TrackerSources(BaseModel):
    """Tracker URLs grouped by protocol."""
    model_config = ConfigDict(frozen=True)

    http: List[str] = Field(default_factory=list)
    udp: List[str] = Field(default_factory=list)
    ws: List[str] = Field(default_factory=list)

    def all(self) -> List[str]:
        return [*self.http, *self.udp, *self.ws]

    def is_empty(self) -> bool:
        return not (self.http or self.udp or self.ws)


class RefreshResult(str, Enum):
    SKIPPED_FRESH = "skipped_fresh"
    IN_PROGRESS = "in_progress"
    REFRESHED = "refreshed"
    FALLBACK = "fallback"


def categorize_trackers(urls: Iterable[str]) -> TrackerSources:
    """Group tracker URLs by scheme, skipping blanks and anything unparseable."""
    http: List[str] = []
    udp: List[str] = []
    ws: List[str] = []
    for url in urls:
        url = url.strip()
        if not url:
            continue
        scheme = urlparse(url).scheme.lower()
        if scheme in ("http", "https"):
            http.append(url)
        elif scheme == "udp":
            udp.append(url)
        elif scheme in ("ws", "wss"):
            ws.append(url)
    return TrackerSources(http=http, udp=udp, ws=ws)


def fetch_best_trackers(url: str, timeout: float = 15.0) -> List[str]:
    """
    Download a plain-text tracker list (one URL per line).

    Raises:
        requests.RequestException: On network errors or a non-2xx response
    """
    response = requests.get(url, timeout=timeout)
    response.raise_for_status()
    return [line.strip() for line in response.text.splitlines() if line.strip()]


class TrackerCache:
    """
    Process-wide cache of tracker URLs.

    ``get`` never blocks and never raises. ``refresh`` runs the fetch function
    at most once at a time; concurrent callers get IN_PROGRESS immediately.
    """

    def __init__(
        self,
        fetch: Callable[[], Iterable[str]],
        ttl: float = 6 * 60 * 60,
        clock: Callable[[], float] = time.monotonic,
        fallback: Optional[Iterable[str]] = None,
        retry_delay: float = 30.0,
        spawn: Optional[Callable[[Callable[[], Any]], Any]] = None,
    ):
        """
        Args:
            fetch: Returns tracker URLs; may raise on failure
            ttl: Seconds a fetched list stays fresh
            clock: Monotonic time source in seconds
            fallback: URLs used when fetching fails
            retry_delay: Seconds an empty cache waits before get() triggers a refresh
            spawn: Runs a callable in the background; defaults to a daemon thread
        """
        self._fetch = fetch
        self._ttl = ttl
        self._clock = clock
        self._fallback = categorize_trackers(fallback if fallback is not None else FALLBACK_TRACKERS)
        self._sources = TrackerSources()
        self._fetched_at: Optional[float] = None
        self._refreshing = threading.Lock()
        self._retry_delay = retry_delay
        self._spawn = spawn or _spawn_daemon

    def get(self) -> TrackerSources:
        """Return the cached trackers; an empty or expired cache also starts a background refresh."""
        sources = self._sources
        if not self.is_fresh() and not self._refreshing.locked() and self._retry_due():
            logger.info("Tracker cache is empty or expired, starting background refresh")
            try:
                self._spawn(self.refresh)
            except Exception as e:
                logger.error(f"Could not start background tracker refresh: {e}")
        return sources

    def is_fresh(self) -> bool:
        if self._fetched_at is None or self._sources.is_empty():
            return False
        return self._clock() - self._fetched_at < self._ttl

    def refresh(self, force: bool = False) -> RefreshResult:
        """
        Fetch a new tracker list unless the cached one is still fresh.

        Args:
            force: Refetch even if the cache is fresh

        Returns:
            What happened; a failed or empty fetch stores the fallback list
        """
        if not self._refreshing.acquire(blocking=False):
            logger.debug("Tracker refresh already in progress")
            return RefreshResult.IN_PROGRESS

        try:
            if not force and self.is_fresh():
                return RefreshResult.SKIPPED_FRESH

            logger.info("Tracker cache expired or empty, fetching fresh trackers...")
            try:
                sources = categorize_trackers(self._fetch())
                if sources.is_empty():
                    raise ValueError("fetched tracker list is empty or has no valid trackers")
            except Exception as e:
                logger.warning(f"Error fetching trackers ({e}), using fallback list")
                self._store(self._fallback)
                return RefreshResult.FALLBACK

            self._store(sources)
            logger.info(f"Fetched trackers: {len(sources.http)} HTTP, {len(sources.udp)} UDP, {len(sources.ws)} WS")
            return RefreshResult.REFRESHED
        finally:
            self._refreshing.release()

    def refresh_in_background(self) -> bool:
        """Start a refresh in the background unless the cache is fresh."""
        if self.is_fresh():
            return False
        self._spawn(self.refresh)
        return True

    def _retry_due(self) -> bool:
        return self._fetched_at is None or self._clock() - self._fetched_at > self._retry_delay

    def _store(self, sources: TrackerSources) -> None:
        # Marks the fallback as fetched too, so failures are not retried immediately
        self._sources = sources
        self._fetched_at = self._clock()


def _spawn_daemon(target: Callable[[], Any]) -> threading.Thread:
    thread = threading.Thread(target=target, daemon=True, name="TrackerRefresh")
    thread.start()
    return thread
