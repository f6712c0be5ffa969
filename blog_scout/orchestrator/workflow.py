"""
Primary orchestration workflow for blog_scout.

Seven stages run strictly in order, each tracked by a StageProgress entry:

1. Blog acquisition      - BlogAcquirer (keyword fallback)
2. Video acquisition     - VideoSelector (relative evaluation)
3. Relevance selection   - SelectionAdviser (fallback ranking)
4. Subtitle extraction   - TranscriptCollector / SubtitleReconstructor
5. Blog content fetch    - crawler
6. Blog analysis         - ContentAnalyzer
7. Video analysis        - ContentAnalyzer (skipped without transcripts)

Known failures (CollectionError) mark their stage as errored and the run goes
on with the fallback value the failing component produced. Anything else
marks the running stage as errored and propagates to the caller.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import time
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional, Sequence, TypeVar, Union

from ..agents.blog_acquirer import BlogAcquirer
from ..agents.content_analyzer import NO_VIDEOS_TEXT, ContentAnalyzer
from ..agents.selection_adviser import SelectionAdviser
from ..agents.subtitles import SubtitleReconstructor, TranscriptCollector
from ..agents.video_selector import VideoSelector
from ..config.settings import CollectionSettings
from ..errors import CollectionError, ProviderError
from ..schemas.analysis import RawAnalysis, VideoAnalysisArtifact
from ..schemas.models import (
    CollectionReport,
    CollectionRequest,
    CrawledDocument,
    CrawlProgress,
    ProgressSnapshot,
    ReportSummary,
    SelectedBlog,
)
from ..utils.crawler import BaseBlogCrawler
from ..utils.llm_client import BaseTextGenerator
from ..utils.search_client import BaseBlogSearchClient
from ..utils.video_client import BaseSubtitleClient, BaseVideoSearchClient
from .progress import (
    BLOG_ACQUISITION,
    BLOG_ANALYSIS,
    BLOG_FETCH,
    SELECTION,
    SUBTITLES,
    VIDEO_ACQUISITION,
    VIDEO_ANALYSIS,
    ProgressListener,
    StageTracker,
)
from .report import data_quality, recommendations


T = TypeVar("T")

_DONE = object()


class CollectionOrchestrator:
    """Runs the seven-stage collection pipeline for one request at a time.

    Providers are injected at construction time. Components are built from
    them unless explicitly passed in, which is how tests swap in doubles.
    """

    def __init__(
        self,
        blog_search: BaseBlogSearchClient,
        video_search: BaseVideoSearchClient,
        llm: BaseTextGenerator,
        crawler: BaseBlogCrawler,
        subtitles: BaseSubtitleClient,
        settings: Optional[CollectionSettings] = None,
        *,
        acquirer: Optional[BlogAcquirer] = None,
        video_selector: Optional[VideoSelector] = None,
        adviser: Optional[SelectionAdviser] = None,
        transcript_collector: Optional[TranscriptCollector] = None,
        analyzer: Optional[ContentAnalyzer] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.settings = settings or CollectionSettings()
        self.crawler = crawler
        self.acquirer = acquirer or BlogAcquirer(blog_search)
        self.video_selector = video_selector or VideoSelector(video_search, self.settings)
        self.adviser = adviser or SelectionAdviser(llm, limit=self.settings.selection_limit)
        self.transcript_collector = transcript_collector or TranscriptCollector(
            subtitles,
            SubtitleReconstructor(),
            target=self.settings.transcript_target,
            min_length=self.settings.min_transcript_length,
        )
        self.analyzer = analyzer or ContentAnalyzer(llm)
        self.logger = logger or logging.getLogger(self.__class__.__name__)
        self.tracker = StageTracker()
        self._active = False

    def subscribe(self, listener: ProgressListener) -> Callable[[], None]:
        """Receive a snapshot of all seven stages after every change."""
        return self.tracker.subscribe(listener)

    async def collect_and_analyze(self, request: CollectionRequest) -> CollectionReport:
        if self._active:
            raise RuntimeError("A collection run is already in progress on this orchestrator")
        self._active = True
        started = time.monotonic()
        self.tracker.reset()
        self.logger.info(f"Starting collection for '{request.search_keyword}' -> '{request.selected_title}'")
        try:
            report = await self._run(request, started)
        except Exception as exc:
            index = self.tracker.running_index()
            if index is not None:
                self.tracker.fail(index, str(exc) or exc.__class__.__name__)
            self.logger.exception("Collection run aborted by an unexpected error")
            raise
        finally:
            self._active = False
        self.logger.info(
            f"Collection finished in {report.summary.processing_time:.1f}s "
            f"(data quality: {report.summary.data_quality})"
        )
        return report

    async def stream(self, request: CollectionRequest) -> AsyncIterator[Union[ProgressSnapshot, CollectionReport]]:
        """Run ``request`` and yield progress snapshots, then the report.

        Errors from the run are re-raised after the last snapshot. Closing the
        iterator early cancels the run.
        """
        queue: "asyncio.Queue[Any]" = asyncio.Queue()
        sequence = itertools.count(1)
        unsubscribe = self.subscribe(
            lambda stages: queue.put_nowait(ProgressSnapshot(sequence=next(sequence), stages=stages))
        )

        async def run() -> CollectionReport:
            try:
                return await self.collect_and_analyze(request)
            finally:
                queue.put_nowait(_DONE)

        task = asyncio.create_task(run())
        try:
            while True:
                item = await queue.get()
                if item is _DONE:
                    break
                yield item
            yield await task
        finally:
            unsubscribe()
            if not task.done():
                task.cancel()

    async def _run(self, request: CollectionRequest, started: float) -> CollectionReport:
        s = self.settings

        blogs = await self._stage(
            BLOG_ACQUISITION,
            lambda: self.acquirer.acquire(
                request.search_keyword, request.main_keyword, s.blog_target_count, request.content_type
            ),
            lambda value: {"count": len(value)},
        )

        videos = await self._stage(
            VIDEO_ACQUISITION,
            lambda: self.video_selector.collect(request.search_keyword, s.video_search_count),
            lambda value: {"count": len(value)},
        )

        selection = await self._stage(
            SELECTION,
            lambda: self.adviser.advise(request.selected_title, request, blogs, videos),
            lambda value: {"blogs": len(value.selected_blogs), "videos": len(value.selected_videos)},
            message=lambda value: value.fallback_reason,
        )

        transcripts = await self._stage(
            SUBTITLES,
            lambda: self.transcript_collector.collect(selection.selected_videos),
            lambda value: {"count": len(value)},
        )

        crawled = await self._stage(
            BLOG_FETCH,
            lambda: self._fetch_blogs(selection.selected_blogs),
            lambda value: {"attempted": len(value), "succeeded": sum(1 for doc in value if doc.success)},
        )

        blog_analysis = await self._stage(
            BLOG_ANALYSIS,
            lambda: self.analyzer.analyze_blogs(request, crawled),
            lambda value: {"structured": value.structured is not None},
        )

        if transcripts:
            video_analysis = await self._stage(
                VIDEO_ANALYSIS,
                lambda: self.analyzer.analyze_videos(request, transcripts),
                lambda value: {"structured": value.structured is not None},
            )
        else:
            self.tracker.start(VIDEO_ANALYSIS)
            video_analysis = VideoAnalysisArtifact(result=RawAnalysis(reason="no_content"), raw_text=NO_VIDEOS_TEXT)
            self.tracker.complete(VIDEO_ANALYSIS, message="Skipped: no transcripts available")

        summary = ReportSummary(
            total_sources=len(blogs) + len(videos),
            data_quality=data_quality(crawled),
            processing_time=round(time.monotonic() - started, 3),
            recommendations=recommendations(blog_analysis, video_analysis),
        )
        return CollectionReport(
            request=request,
            blogs=blogs,
            videos=videos,
            selected_blogs=selection.selected_blogs,
            selected_videos=selection.selected_videos,
            crawled_blogs=crawled,
            transcripts=transcripts,
            blog_analysis=blog_analysis,
            video_analysis=video_analysis,
            total_blogs_collected=len(blogs),
            total_videos_collected=len(videos),
            stages=self.tracker.snapshot(),
            summary=summary,
        )

    async def _stage(
        self,
        index: int,
        work: Callable[[], Awaitable[T]],
        describe: Callable[[T], Dict[str, Any]],
        message: Optional[Callable[[T], Optional[str]]] = None,
    ) -> T:
        self.tracker.start(index)
        try:
            value = await work()
        except CollectionError as exc:
            self.logger.warning(f"Stage {index + 1} degraded: {exc}")
            self.tracker.fail(index, str(exc))
            return exc.fallback
        self.tracker.complete(index, data=describe(value), message=message(value) if message else None)
        return value

    async def _fetch_blogs(self, selected: Sequence[SelectedBlog]) -> List[CrawledDocument]:
        if not selected:
            self.logger.info("No selected blogs to fetch")
            return []

        def on_progress(progress: CrawlProgress) -> None:
            self.tracker.annotate(BLOG_FETCH, f"{progress.current}/{progress.total}: {progress.url}")

        try:
            return await self.crawler.crawl_selected(selected, self.settings.crawl_target, on_progress)
        except Exception as exc:
            raise ProviderError(f"Blog crawling failed: {exc}", fallback=[]) from exc
