"""Blog crawlers that fetch full text for the selected posts.

``crawl_selected`` walks the selected blogs in rank order and stops as soon as
``limit`` documents were fetched successfully. Every attempt, failed or not,
is returned so the report shows what was tried. Progress is reported through
an optional callback receiving :class:`CrawlProgress` events.

``HttpBlogCrawler`` understands Naver blog and Tistory pages. Fetched posts
go through a content filter; posts that are too short or too long, read like
advertisements, or look like low-quality filler are kept as failed documents.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Callable, List, Optional, Sequence

import requests
from bs4 import BeautifulSoup

from ..errors import ProviderError
from ..schemas.models import CandidateBlog, CrawledDocument, CrawlProgress


ProgressCallback = Callable[[CrawlProgress], None]

MIN_CONTENT_CHARS = 300
MAX_CONTENT_CHARS = 4000

AD_KEYWORDS = (
    "광고포스트", "광고 포스트", "광고글", "광고입니다", "유료광고", "유료 광고",
    "파트너스", "쿠팡파트너스", "파트너 활동", "추천링크",
    "협찬받", "협찬글", "협찬으로", "협찬을", "무료로 제공",
    "브랜드로부터", "업체로부터", "업체에서 제공",
    "서포터즈", "앰배서더", "원고료", "소정의", "무료로 받",
    "할인코드", "프로모션", "이벤트 참여",
    "sponsored post", "paid partnership", "affiliate link",
)

AD_PATTERNS = (
    re.compile(r"협찬.*받.*글"),
    re.compile(r"무료.*받.*후기"),
    re.compile(r"광고.*포함"),
    re.compile(r"업체.*제품.*제공"),
)

NAVER_CONTAINERS = ("div.se-main-container", "div#postViewArea", "div.post-view")
TISTORY_CONTAINERS = ("div.tt_article_useless_p_margin", "div.entry-content", "div.article-view", "article")

_NAVER_POST = re.compile(r"https?://(?:m\.)?blog\.naver\.com/([^/?#]+)/(\d+)")


def is_advertisement(text: str, title: str = "") -> bool:
    full_text = f"{text} {title}".lower()
    if any(keyword in full_text for keyword in AD_KEYWORDS):
        return True
    return any(pattern.search(full_text) for pattern in AD_PATTERNS)


def is_low_quality(text: str) -> bool:
    """Mostly numbers, too many symbols, or one character repeated."""
    cleaned = (text or "").strip()
    if len(cleaned) < 100:
        return False
    meaningful = re.sub(r"[0-9\s\-,()원₩.+#]", "", cleaned)
    if len(meaningful) / len(cleaned) < 0.3:
        return True
    special = re.sub(r"[가-힣ㄱ-ㅎㅏ-ㅣa-zA-Z0-9\s]", "", cleaned)
    if len(special) / len(cleaned) > 0.15:
        return True
    return re.search(r"(.)\1{4,}", cleaned) is not None


def filter_reason(doc: CrawledDocument) -> Optional[str]:
    """Return why a fetched document should not be used, or ``None``."""
    if not doc.success or not doc.text_content:
        return None
    length = len(re.sub(r"\s", "", doc.text_content))
    if length < MIN_CONTENT_CHARS:
        return f"Too short ({length} chars, minimum {MIN_CONTENT_CHARS})"
    if length > MAX_CONTENT_CHARS:
        return f"Too long ({length} chars, maximum {MAX_CONTENT_CHARS})"
    if is_advertisement(doc.text_content, doc.title):
        return "Advertisement or sponsored content"
    if is_low_quality(doc.text_content):
        return "Low-quality content"
    return None


def candidate_urls(url: str) -> List[str]:
    """URLs to try for a post, most reliable first."""
    url = url.strip()
    if "blog.naver.com" in url:
        match = _NAVER_POST.match(url)
        if match:
            blog_id, log_no = match.groups()
            return [f"https://blog.naver.com/PostView.naver?blogId={blog_id}&logNo={log_no}", url]
        return [url]
    if ".tistory.com" in url:
        urls = [url]
        if ".tistory.com/" in url and ".tistory.com/m/" not in url:
            urls.append(url.replace(".tistory.com/", ".tistory.com/m/", 1))
        return urls
    return []


def extract_post(html_text: str, fallback_title: str, naver: bool) -> CrawledDocument:
    """Parse a blog page into a :class:`CrawledDocument` (url left empty)."""
    soup = BeautifulSoup(html_text, "html.parser")
    for element in soup(["script", "style", "noscript"]):
        element.decompose()

    title = fallback_title
    og_title = soup.find("meta", attrs={"property": "og:title"})
    if og_title and og_title.get("content"):
        title = og_title["content"].strip()
    elif soup.title and soup.title.string:
        title = soup.title.string.strip()

    container = None
    for selector in NAVER_CONTAINERS if naver else TISTORY_CONTAINERS:
        container = soup.select_one(selector)
        if container is not None:
            break
    node = container if container is not None else soup.body or soup
    text = re.sub(r"\s+", " ", node.get_text(" ")).strip()

    return CrawledDocument(
        title=title or fallback_title,
        url="",
        text_content=text,
        success=bool(text),
        content_length=len(text),
        error=None if text else "No text content found",
    )


class BaseBlogCrawler:
    """Abstract base class for blog crawlers."""

    async def crawl_selected(
        self,
        items: Sequence[CandidateBlog],
        limit: int,
        on_progress: Optional[ProgressCallback] = None,
    ) -> List[CrawledDocument]:
        raise NotImplementedError


class MockBlogCrawler(BaseBlogCrawler):
    """Pretends every post has ``length`` characters of clean text."""

    def __init__(self, length: int = 1200):
        self.length = length

    async def crawl_selected(
        self,
        items: Sequence[CandidateBlog],
        limit: int,
        on_progress: Optional[ProgressCallback] = None,
    ) -> List[CrawledDocument]:
        docs: List[CrawledDocument] = []
        for index, item in enumerate(items[:limit]):
            if on_progress:
                on_progress(CrawlProgress(current=index + 1, total=limit, url=item.url, status="success"))
            sentence = f"{item.title} covers the topic in detail. "
            text = (sentence * (self.length // len(sentence) + 1))[: self.length]
            docs.append(
                CrawledDocument(title=item.title, url=item.url, text_content=text, success=True, content_length=len(text))
            )
        return docs


class HttpBlogCrawler(BaseBlogCrawler):
    """Fetches Naver blog and Tistory posts with requests and BeautifulSoup."""

    USER_AGENT = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )

    def __init__(
        self,
        request_delay: float = 1.0,
        timeout: float = 15,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.request_delay = request_delay
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": self.USER_AGENT,
            "Accept-Language": "ko-KR,ko;q=0.8,en-US;q=0.5,en;q=0.3",
        })
        self.logger = logger or logging.getLogger(self.__class__.__name__)

    def fetch_html(self, url: str) -> str:
        """Try each candidate URL in turn and return the first page body."""
        urls = candidate_urls(url)
        if not urls:
            raise ProviderError(f"Unsupported blog platform: {url}")
        last_error = "no response"
        for try_url in urls:
            try:
                response = self.session.get(try_url, timeout=self.timeout, allow_redirects=True)
            except requests.RequestException as exc:
                last_error = str(exc)
                self.logger.debug(f"Request failed for {try_url}: {exc}")
                continue
            if response.ok:
                if response.encoding is None or response.encoding.lower() == "iso-8859-1":
                    response.encoding = response.apparent_encoding
                return response.text
            last_error = f"HTTP {response.status_code}"
            self.logger.debug(f"{last_error} for {try_url}")
        raise ProviderError(f"All URLs failed for {url}: {last_error}")

    async def crawl_one(self, item: CandidateBlog) -> CrawledDocument:
        if not item.url or not item.url.strip():
            return CrawledDocument(title=item.title, url=item.url, error="Empty URL")
        try:
            html_text = await asyncio.to_thread(self.fetch_html, item.url)
        except ProviderError as exc:
            return CrawledDocument(title=item.title, url=item.url, error=str(exc))
        doc = extract_post(html_text, item.title, naver="blog.naver.com" in item.url)
        doc = doc.model_copy(update={"url": item.url})
        reason = filter_reason(doc)
        if reason:
            doc = doc.model_copy(update={"success": False, "error": reason})
        return doc

    async def crawl_selected(
        self,
        items: Sequence[CandidateBlog],
        limit: int,
        on_progress: Optional[ProgressCallback] = None,
    ) -> List[CrawledDocument]:
        results: List[CrawledDocument] = []
        success_count = 0

        for index, item in enumerate(items):
            if success_count >= limit:
                break
            if on_progress:
                on_progress(CrawlProgress(
                    current=min(success_count + 1, limit), total=limit, url=item.url, status="crawling"
                ))

            doc = await self.crawl_one(item)
            results.append(doc)
            if doc.success:
                success_count += 1
                self.logger.info(f"Crawled {item.url} ({doc.content_length} chars, {success_count}/{limit})")
            else:
                self.logger.info(f"Skipped {item.url}: {doc.error}")
            if on_progress:
                on_progress(CrawlProgress(
                    current=success_count if doc.success else min(success_count + 1, limit),
                    total=limit,
                    url=item.url,
                    status="success" if doc.success else "failed",
                ))

            if index < len(items) - 1 and success_count < limit and self.request_delay > 0:
                await asyncio.sleep(self.request_delay)

        if success_count < limit:
            self.logger.warning(f"Only {success_count} of {limit} blog posts could be used")
        return results


def get_blog_crawler(provider: str, request_delay: float = 1.0) -> BaseBlogCrawler:
    """Factory for crawlers. Supported values are ``"mock"`` and ``"http"``."""
    provider = (provider or "mock").lower()
    if provider == "http":
        return HttpBlogCrawler(request_delay=request_delay)
    if provider == "mock":
        return MockBlogCrawler()
    raise ValueError(f"Unsupported crawler provider: {provider}")
