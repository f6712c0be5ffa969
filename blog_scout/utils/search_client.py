"""Blog search client abstraction.

The blog acquisition stage relies on a search client to list blog posts for a
keyword. To support both real and offline environments this module defines a
common interface with concrete implementations.

* ``BaseBlogSearchClient`` defines the async ``search_blogs`` method.
* ``MockBlogSearchClient`` fabricates deterministic results without any
  network calls. It is useful for development and for dry runs of the
  pipeline.
* ``NaverBlogSearchClient`` uses the Naver Open API blog search endpoint and
  respects a configurable rate limit.
"""

from __future__ import annotations

import asyncio
import html
import re
from typing import Any, Dict, List, Optional

import requests

from ..schemas.content_options import COMMERCIAL_CONTENT_TYPES
from ..schemas.models import CandidateBlog


SUPPORTED_BLOG_HOSTS = ("blog.naver.com", ".tistory.com")

# Promotional wording; posts containing it are dropped for informational content.
PROMOTIONAL_KEYWORDS = (
    "할인", "세일", "특가", "이벤트", "무료배송",
    "최저가", "가격비교", "구매", "주문", "배송",
    "추천템", "리뷰이벤트", "체험단", "협찬", "제공",
)

_TAG_PATTERN = re.compile(r"<[^>]*>")


def clean_html_tags(text: str) -> str:
    """Strip tags such as ``<b>`` from API titles and decode entities."""
    text = _TAG_PATTERN.sub("", text or "")
    return re.sub(r"\s+", " ", html.unescape(text)).strip()


def platform_for_url(url: str) -> str:
    return "tistory" if ".tistory.com" in url else "naver"


class BaseBlogSearchClient:
    """Abstract base class for blog search clients."""

    async def search_blogs(
        self,
        query: str,
        count: int,
        start_rank: int = 1,
        content_type: Optional[str] = None,
    ) -> List[CandidateBlog]:
        raise NotImplementedError


class MockBlogSearchClient(BaseBlogSearchClient):
    """A mock client that invents ``available`` posts per query.

    No network requests are made. Titles embed the query so the selection
    stage has something meaningful to match against.
    """

    def __init__(self, available: int = 50):
        self.available = available

    async def search_blogs(
        self,
        query: str,
        count: int,
        start_rank: int = 1,
        content_type: Optional[str] = None,
    ) -> List[CandidateBlog]:
        total = min(count, self.available)
        return [
            CandidateBlog(
                rank=start_rank + i,
                title=f"{query} guide #{i + 1}",
                url=f"https://blog.naver.com/mock{i + 1}/{100000 + i}",
                platform="naver",
            )
            for i in range(total)
        ]


class NaverBlogSearchClient(BaseBlogSearchClient):
    """Blog search backed by the Naver Open API.

    Only Naver blog and Tistory links are kept because those are the
    platforms the crawler understands. Unless the request is for review or
    comparison content, posts with promotional wording in their title or
    description are filtered out as well.
    """

    SEARCH_ENDPOINT = "https://openapi.naver.com/v1/search/blog.json"
    MAX_DISPLAY = 100

    def __init__(self, client_id: str, client_secret: str, rate_limit: int = 60, timeout: float = 10):
        if not client_id or not client_secret:
            raise ValueError("Naver client id and secret must be provided")
        self.client_id = client_id
        self.client_secret = client_secret
        self.rate_limit = rate_limit
        self.timeout = timeout
        self._lock = asyncio.Lock()
        self._last_request: Optional[float] = None

    async def _throttle(self):
        """Ensures no more than `rate_limit` requests per minute are made."""
        async with self._lock:
            if self.rate_limit <= 0:
                return
            loop = asyncio.get_running_loop()
            now = loop.time()
            if self._last_request is None:
                self._last_request = now
                return
            elapsed = now - self._last_request
            min_interval = 60 / self.rate_limit
            if elapsed < min_interval:
                await asyncio.sleep(min_interval - elapsed)
            self._last_request = loop.time()

    async def search_blogs(
        self,
        query: str,
        count: int,
        start_rank: int = 1,
        content_type: Optional[str] = None,
    ) -> List[CandidateBlog]:
        await self._throttle()

        # Perform the HTTP request in a thread to avoid blocking the event loop
        response = await asyncio.to_thread(
            requests.get,
            self.SEARCH_ENDPOINT,
            params={
                "query": query,
                "display": max(1, min(count, self.MAX_DISPLAY)),
                "start": 1,
                "sort": "sim",
            },
            headers={
                "X-Naver-Client-Id": self.client_id,
                "X-Naver-Client-Secret": self.client_secret,
                "User-Agent": "blog-scout/0.1",
            },
            timeout=self.timeout,
        )
        response.raise_for_status()
        items = self.filter_items(response.json().get("items") or [], content_type)

        return [
            CandidateBlog(
                rank=start_rank + i,
                title=clean_html_tags(item.get("title", "")),
                url=item["link"],
                platform=platform_for_url(item["link"]),
            )
            for i, item in enumerate(items[:count])
        ]

    @staticmethod
    def filter_items(items: List[Dict[str, Any]], content_type: Optional[str]) -> List[Dict[str, Any]]:
        supported = [
            item for item in items
            if item.get("link") and any(host in item["link"] for host in SUPPORTED_BLOG_HOSTS)
        ]
        if content_type in COMMERCIAL_CONTENT_TYPES:
            return supported

        def is_promotional(item: Dict[str, Any]) -> bool:
            text = f"{clean_html_tags(item.get('title', ''))} {clean_html_tags(item.get('description', ''))}".lower()
            return any(keyword in text for keyword in PROMOTIONAL_KEYWORDS)

        return [item for item in supported if not is_promotional(item)]


def get_blog_search_client(
    provider: str,
    client_id: Optional[str] = None,
    client_secret: Optional[str] = None,
    rate_limit: int = 60,
) -> BaseBlogSearchClient:
    """Factory function that returns an appropriate blog search client.

    Parameters
    ----------
    provider: str
        Provider name. Supported values are ``"mock"`` and ``"naver"``.
    client_id, client_secret: Optional[str]
        Naver Open API credentials. Required when provider is ``"naver"``.
    rate_limit: int
        Maximum number of requests per minute allowed by the provider.
    """
    provider = (provider or "mock").lower()
    if provider == "naver":
        return NaverBlogSearchClient(client_id or "", client_secret or "", rate_limit=rate_limit)
    if provider == "mock":
        return MockBlogSearchClient()
    raise ValueError(f"Unsupported blog search provider: {provider}")
