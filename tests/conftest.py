import sys
from pathlib import Path
from typing import List, Optional

import pytest

# Ensure root path is available for imports
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from bitmagnet_addon.bitmagnet.models import BitmagnetTorrent  # noqa: E402
from bitmagnet_addon.metadata.models import ParsedMetadata  # noqa: E402
from bitmagnet_addon.streams.models import Candidate  # noqa: E402


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def build_candidate(
    info_hash: str,
    resolution: Optional[str] = None,
    source: Optional[str] = None,
    seeders: int = 0,
    size: Optional[int] = None,
    languages: Optional[List[str]] = None,
    title: Optional[str] = None,
) -> Candidate:
    title = title or f"Release.{info_hash}"
    parsed = ParsedMetadata(
        original_title=title,
        cleaned_title=title.replace(".", " "),
        resolution=resolution,
        quality_source=source,
        languages=languages or [],
    )
    raw = BitmagnetTorrent(info_hash=info_hash, title=title, seeders=seeders, size=size)
    return Candidate(raw=raw, parsed=parsed, seeders=seeders, size=size)


@pytest.fixture
def make_candidate():
    return build_candidate
