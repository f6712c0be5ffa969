from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence

import pytest

from blog_scout.schemas.models import (
    CandidateBlog,
    CandidateVideo,
    CollectionRequest,
    CrawledDocument,
    CrawlProgress,
    SubtitleTrack,
)
from blog_scout.utils.crawler import BaseBlogCrawler
from blog_scout.utils.llm_client import BaseTextGenerator, ChatMessage, TextResponse
from blog_scout.utils.search_client import BaseBlogSearchClient
from blog_scout.utils.video_client import BaseSubtitleClient, BaseVideoSearchClient


def make_blogs(count: int, prefix: str = "Blog") -> List[CandidateBlog]:
    return [
        CandidateBlog(rank=i + 1, title=f"{prefix} {i + 1}", url=f"https://blog.naver.com/{prefix.lower()}/{i + 1}")
        for i in range(count)
    ]


def make_videos(priorities: Sequence[float]) -> List[CandidateVideo]:
    return [
        CandidateVideo(video_id=f"vid{i + 1}", title=f"Video {i + 1}", priority=priority)
        for i, priority in enumerate(priorities)
    ]


class FakeBlogSearch(BaseBlogSearchClient):
    """Returns ``available[query]`` posts per query and records every call."""

    def __init__(self, available: Optional[Dict[str, int]] = None, failing: Iterable[str] = ()):
        self.available = available or {}
        self.failing = set(failing)
        self.calls: List[tuple] = []

    async def search_blogs(self, query, count, start_rank=1, content_type=None):
        self.calls.append((query, count, start_rank, content_type))
        if query in self.failing:
            raise RuntimeError(f"search backend down for {query}")
        total = min(count, self.available.get(query, 0))
        slug = query.replace(" ", "_")
        # provider ranks are deliberately wrong; the acquirer must re-rank
        return [
            CandidateBlog(rank=1, title=f"{query} post {i + 1}", url=f"https://blog.naver.com/{slug}/{i + 1}")
            for i in range(total)
        ]


class FakeVideoSearch(BaseVideoSearchClient):
    def __init__(self, videos: Optional[List[CandidateVideo]] = None, error: Optional[Exception] = None):
        self.videos = videos or []
        self.error = error
        self.calls: List[tuple] = []

    async def search_prioritized_videos(self, keyword, count):
        self.calls.append((keyword, count))
        if self.error is not None:
            raise self.error
        return list(self.videos[:count])


class FakeSubtitles(BaseSubtitleClient):
    """Serves transcripts by video id; ids in ``failing`` raise."""

    def __init__(self, transcripts: Optional[Dict[str, str]] = None, failing: Iterable[str] = ()):
        self.transcripts = transcripts or {}
        self.failing = set(failing)
        self.calls: List[str] = []

    async def extract_subtitles(self, video_id):
        self.calls.append(video_id)
        if video_id in self.failing:
            raise RuntimeError("subtitle service timeout")
        text = self.transcripts.get(video_id)
        return [SubtitleTrack(text=text, language="ko")] if text else []


class FakeCrawler(BaseBlogCrawler):
    """Succeeds for every url unless listed in ``failing_urls``."""

    def __init__(self, failing_urls: Iterable[str] = (), error: Optional[Exception] = None):
        self.failing_urls = set(failing_urls)
        self.error = error
        self.calls: List[tuple] = []

    async def crawl_selected(self, items, limit, on_progress=None):
        self.calls.append(([item.url for item in items], limit))
        if self.error is not None:
            raise self.error
        docs: List[CrawledDocument] = []
        succeeded = 0
        for index, item in enumerate(items):
            if succeeded >= limit:
                break
            ok = item.url not in self.failing_urls
            if on_progress:
                on_progress(CrawlProgress(
                    current=index + 1, total=limit, url=item.url, status="success" if ok else "failed"
                ))
            if ok:
                succeeded += 1
                docs.append(CrawledDocument(
                    title=item.title, url=item.url, text_content=f"Body of {item.title}",
                    success=True, content_length=len(f"Body of {item.title}"),
                ))
            else:
                docs.append(CrawledDocument(title=item.title, url=item.url, error="HTTP 404"))
        return docs


class ScriptedLLM(BaseTextGenerator):
    """Answers with ``replies`` in order; an Exception entry is raised instead."""

    def __init__(self, replies: Sequence[object]):
        self.replies = list(replies)
        self.prompts: List[str] = []

    async def generate_text(self, messages: List[ChatMessage]) -> TextResponse:
        self.prompts.append(messages[-1].content)
        reply = self.replies[min(len(self.prompts), len(self.replies)) - 1]
        if isinstance(reply, Exception):
            raise reply
        return TextResponse(content=str(reply), model="scripted")


@pytest.fixture
def request_model() -> CollectionRequest:
    return CollectionRequest(
        search_keyword="robot vacuum",
        main_keyword="robot vacuum",
        selected_title="Robot vacuum buying guide",
        content_type="info",
    )
