"""Video search and subtitle client interfaces.

Video candidates arrive already scored: the provider computes ``priority``
and returns the list sorted by it. Subtitle extraction returns a list of
tracks; an empty list means the video has no usable subtitles.

Only mock implementations ship with the package. Real providers implement
``BaseVideoSearchClient`` and ``BaseSubtitleClient`` and are injected into
the orchestrator.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from ..schemas.models import CandidateVideo, SubtitleTrack


class BaseVideoSearchClient:
    """Abstract base class for prioritised video search."""

    async def search_prioritized_videos(self, keyword: str, count: int) -> List[CandidateVideo]:
        raise NotImplementedError


class BaseSubtitleClient:
    """Abstract base class for subtitle extraction."""

    async def extract_subtitles(self, video_id: str) -> List[SubtitleTrack]:
        raise NotImplementedError


class MockVideoSearchClient(BaseVideoSearchClient):
    """Returns ``available`` synthetic videos with descending priority."""

    def __init__(self, available: int = 20):
        self.available = available

    async def search_prioritized_videos(self, keyword: str, count: int) -> List[CandidateVideo]:
        total = min(count, self.available)
        return [
            CandidateVideo(
                video_id=f"mock{i + 1:04d}",
                title=f"{keyword} explained part {i + 1}",
                channel_name=f"Channel {i % 5 + 1}",
                view_count=10_000 - i * 250,
                duration=300 + i * 30,
                subscriber_count=50_000 - i * 1_000,
                published_at="2024-01-01T00:00:00Z",
                priority=float(total - i),
            )
            for i in range(total)
        ]


class MockSubtitleClient(BaseSubtitleClient):
    """Serves transcripts from a dict; unknown videos get a generated one."""

    def __init__(self, transcripts: Optional[Dict[str, str]] = None, default_length: int = 400):
        self.transcripts = transcripts
        self.default_length = default_length

    async def extract_subtitles(self, video_id: str) -> List[SubtitleTrack]:
        if self.transcripts is not None:
            text = self.transcripts.get(video_id)
            return [SubtitleTrack(text=text)] if text else []
        sentence = f"This is the spoken content of video {video_id}. "
        repeats = self.default_length // len(sentence) + 1
        return [SubtitleTrack(text=(sentence * repeats)[: self.default_length])]


def get_video_search_client(provider: str, **options) -> BaseVideoSearchClient:
    """Return a video search client. Only ``"mock"`` is bundled."""
    provider = (provider or "mock").lower()
    if provider != "mock":
        raise ValueError(f"Unsupported video search provider: {provider}")
    return MockVideoSearchClient(available=int(options.get("available", 20)))


def get_subtitle_client(provider: str, **options) -> BaseSubtitleClient:
    """Return a subtitle client. Only ``"mock"`` is bundled."""
    provider = (provider or "mock").lower()
    if provider != "mock":
        raise ValueError(f"Unsupported subtitle provider: {provider}")
    return MockSubtitleClient(default_length=int(options.get("default_length", 400)))
