from __future__ import annotations

import json
from typing import List

import pytest

from blog_scout.agents.selection_adviser import FALLBACK_PARSE_REASON
from blog_scout.agents.video_selector import VideoSelector
from blog_scout.orchestrator import CollectionOrchestrator
from blog_scout.orchestrator.progress import BLOG_FETCH, SELECTION, VIDEO_ACQUISITION, VIDEO_ANALYSIS
from blog_scout.orchestrator.report import BLOG_RECOMMENDATION, COMPETITOR_RECOMMENDATION, VIDEO_RECOMMENDATION
from blog_scout.schemas.models import CollectionReport, CollectionRequest, ProgressSnapshot
from tests.conftest import FakeBlogSearch, FakeCrawler, FakeSubtitles, FakeVideoSearch, ScriptedLLM, make_videos
from tests.test_content_analyzer import BLOG_JSON, VIDEO_JSON


LONG_TRANSCRIPT = "word " * 40

SELECTION_REPLY = "```json\n" + json.dumps({
    "selected_blogs": [
        {"title": "robot vacuum post 1", "relevance_reason": "buying criteria"},
        {"title": "robot vacuum post 2", "relevance_reason": "price ranges"},
        {"title": "robot vacuum post 3", "relevance_reason": "pet hair"},
    ],
    "selected_videos": [
        {"title": "Video 1", "relevance_reason": "hands-on test"},
        {"title": "Video 2", "relevance_reason": "teardown"},
    ],
}) + "\n```"


def _build(
    llm=None,
    video_search=None,
    crawler=None,
    subtitles=None,
    **kwargs,
) -> CollectionOrchestrator:
    return CollectionOrchestrator(
        blog_search=FakeBlogSearch(available={"robot vacuum": 50}),
        video_search=video_search or FakeVideoSearch(make_videos(range(12, 0, -1))),
        llm=llm or ScriptedLLM([SELECTION_REPLY, json.dumps(BLOG_JSON), json.dumps(VIDEO_JSON)]),
        crawler=crawler or FakeCrawler(),
        subtitles=subtitles or FakeSubtitles({"vid1": LONG_TRANSCRIPT, "vid2": LONG_TRANSCRIPT}),
        **kwargs,
    )


@pytest.mark.asyncio
async def test_full_run_produces_complete_report(request_model: CollectionRequest) -> None:
    report = await _build().collect_and_analyze(request_model)

    assert report.total_blogs_collected == 50
    assert report.total_videos_collected == 10
    assert report.summary.total_sources == 60
    assert [b.rank for b in report.selected_blogs] == [1, 2, 3]
    assert [v.video_id for v in report.selected_videos] == ["vid1", "vid2"]
    assert [t.video_id for t in report.transcripts] == ["vid1", "vid2"]
    assert sum(doc.success for doc in report.crawled_blogs) == 3
    assert report.blog_analysis.structured.core_keywords == ["suction", "battery"]
    assert report.video_analysis.structured is not None
    assert report.summary.data_quality == "high"
    assert report.summary.recommendations == [
        COMPETITOR_RECOMMENDATION, BLOG_RECOMMENDATION, VIDEO_RECOMMENDATION,
    ]
    assert [s.status for s in report.stages] == ["completed"] * 7
    assert all(s.progress == 100 for s in report.stages)
    assert report.summary.processing_time >= 0


@pytest.mark.asyncio
async def test_notifications_follow_stage_order(request_model: CollectionRequest) -> None:
    orchestrator = _build()
    snapshots: List[tuple] = []
    orchestrator.subscribe(snapshots.append)

    await orchestrator.collect_and_analyze(request_model)

    started, finished = {}, {}
    for position, stages in enumerate(snapshots):
        for index, stage in enumerate(stages):
            if stage.status == "running":
                started.setdefault(index, position)
            if stage.status in ("completed", "error"):
                finished.setdefault(index, position)
    assert sorted(started) == list(range(7))
    for index in range(1, 7):
        assert finished[index - 1] < started[index]
    assert any(s[BLOG_FETCH].message and s[BLOG_FETCH].message.startswith("1/3") for s in snapshots)


@pytest.mark.asyncio
async def test_video_provider_failure_marks_stage_and_continues(request_model: CollectionRequest) -> None:
    llm = ScriptedLLM([SELECTION_REPLY, json.dumps(BLOG_JSON)])
    orchestrator = _build(llm=llm, video_search=FakeVideoSearch(error=RuntimeError("quota exceeded")))

    report = await orchestrator.collect_and_analyze(request_model)

    video_stage = report.stages[VIDEO_ACQUISITION]
    assert video_stage.status == "error"
    assert "quota exceeded" in video_stage.message
    assert report.videos == [] and report.transcripts == []
    assert report.selected_videos == []
    assert report.stages[VIDEO_ANALYSIS].status == "completed"
    assert report.video_analysis.result.reason == "no_content"
    assert len(llm.prompts) == 2
    assert report.summary.recommendations == [COMPETITOR_RECOMMENDATION, BLOG_RECOMMENDATION]


@pytest.mark.asyncio
async def test_crawler_failure_degrades_to_low_quality(request_model: CollectionRequest) -> None:
    llm = ScriptedLLM([SELECTION_REPLY, json.dumps(VIDEO_JSON)])
    orchestrator = _build(llm=llm, crawler=FakeCrawler(error=ConnectionError("dns failure")))

    report = await orchestrator.collect_and_analyze(request_model)

    assert report.stages[BLOG_FETCH].status == "error"
    assert report.crawled_blogs == []
    assert report.summary.data_quality == "low"
    assert report.blog_analysis.result.reason == "no_content"
    assert report.video_analysis.structured is not None
    assert report.summary.recommendations == [COMPETITOR_RECOMMENDATION, VIDEO_RECOMMENDATION]


@pytest.mark.asyncio
async def test_unparseable_replies_use_fallbacks(request_model: CollectionRequest) -> None:
    orchestrator = _build(llm=ScriptedLLM(["Sorry, I can only answer in prose."]))

    report = await orchestrator.collect_and_analyze(request_model)

    assert len(report.selected_blogs) == 10
    assert len(report.selected_videos) == 10
    assert report.stages[SELECTION].status == "completed"
    assert report.stages[SELECTION].message == FALLBACK_PARSE_REASON
    assert report.blog_analysis.raw_text == "Sorry, I can only answer in prose."
    assert report.blog_analysis.structured is None
    assert len(report.summary.recommendations) == 3


@pytest.mark.asyncio
async def test_no_transcripts_skips_video_analysis(request_model: CollectionRequest) -> None:
    llm = ScriptedLLM([SELECTION_REPLY, json.dumps(BLOG_JSON)])
    orchestrator = _build(llm=llm, subtitles=FakeSubtitles())

    report = await orchestrator.collect_and_analyze(request_model)

    assert report.transcripts == []
    assert report.stages[VIDEO_ANALYSIS].status == "completed"
    assert report.stages[VIDEO_ANALYSIS].message.startswith("Skipped")
    assert len(llm.prompts) == 2


@pytest.mark.asyncio
async def test_partial_crawl_gives_medium_quality(request_model: CollectionRequest) -> None:
    failing = {"https://blog.naver.com/robot_vacuum/1", "https://blog.naver.com/robot_vacuum/2"}
    report = await _build(crawler=FakeCrawler(failing_urls=failing)).collect_and_analyze(request_model)

    assert report.summary.data_quality == "medium"
    assert report.stages[BLOG_FETCH].data == {"attempted": 3, "succeeded": 1}


@pytest.mark.asyncio
async def test_unexpected_error_marks_running_stage_and_propagates(request_model: CollectionRequest) -> None:
    class BrokenSelector(VideoSelector):
        def select(self, candidates):
            raise RuntimeError("unexpected bug")

    video_search = FakeVideoSearch(make_videos([1, 2, 3]))
    orchestrator = _build(video_search=video_search, video_selector=BrokenSelector(video_search))

    with pytest.raises(RuntimeError, match="unexpected bug"):
        await orchestrator.collect_and_analyze(request_model)

    stages = orchestrator.tracker.snapshot()
    assert stages[0].status == "completed"
    assert stages[VIDEO_ACQUISITION].status == "error"
    assert stages[VIDEO_ACQUISITION].message == "unexpected bug"
    assert all(s.status == "pending" for s in stages[2:])


@pytest.mark.asyncio
async def test_orchestrator_can_run_again(request_model: CollectionRequest) -> None:
    orchestrator = _build(llm=ScriptedLLM(["prose"]))
    first = await orchestrator.collect_and_analyze(request_model)
    second = await orchestrator.collect_and_analyze(request_model)

    assert [s.status for s in second.stages] == ["completed"] * 7
    assert first.stages == second.stages


@pytest.mark.asyncio
async def test_stream_yields_snapshots_then_report(request_model: CollectionRequest) -> None:
    orchestrator = _build()
    items = [item async for item in orchestrator.stream(request_model)]

    *snapshots, report = items
    assert isinstance(report, CollectionReport)
    assert snapshots and all(isinstance(s, ProgressSnapshot) for s in snapshots)
    assert [s.sequence for s in snapshots] == list(range(1, len(snapshots) + 1))
    assert snapshots[-1].stages == report.stages
    assert orchestrator.tracker._listeners == []


@pytest.mark.asyncio
async def test_stream_reraises_unexpected_errors(request_model: CollectionRequest) -> None:
    class BrokenSelector(VideoSelector):
        def select(self, candidates):
            raise RuntimeError("unexpected bug")

    video_search = FakeVideoSearch(make_videos([1, 2, 3]))
    orchestrator = _build(video_search=video_search, video_selector=BrokenSelector(video_search))
    received = []

    with pytest.raises(RuntimeError, match="unexpected bug"):
        async for item in orchestrator.stream(request_model):
            received.append(item)

    assert received[-1].stages[VIDEO_ACQUISITION].status == "error"
