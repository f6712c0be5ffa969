from __future__ import annotations

import json

import pytest

from blog_scout.agents.content_analyzer import (
    BLOG_FAILURE_TEXT,
    NO_BLOGS_TEXT,
    TRANSCRIPT_HEAD,
    VIDEO_FAILURE_TEXT,
    ContentAnalyzer,
    build_video_prompt,
    transcript_excerpt,
)
from blog_scout.schemas.models import CollectionRequest, CrawledDocument, VideoTranscript
from tests.conftest import ScriptedLLM


BLOG_JSON = {
    "competitor_titles": ["A", "B"],
    "core_keywords": ["suction", "battery"],
    "essential_content": ["price"],
    "key_points": ["A focuses on pets"],
    "improvement_opportunities": ["nobody compares noise"],
}

VIDEO_JSON = {
    "video_summaries": [{"video_number": 1, "key_points": "Long battery life"}],
    "common_themes": ["maintenance"],
    "practical_tips": ["empty the bin weekly"],
    "expert_insights": ["lidar beats cameras"],
    "blog_suggestions": ["add a maintenance checklist"],
}


def _docs():
    return [
        CrawledDocument(title="A", url="https://blog.naver.com/a/1", text_content="alpha " * 100, success=True),
        CrawledDocument(title="Broken", url="https://blog.naver.com/b/2", error="HTTP 404"),
        CrawledDocument(title="B", url="https://blog.naver.com/c/3", text_content="beta " * 100, success=True),
    ]


def _transcripts(text: str = "spoken words " * 20):
    return [
        VideoTranscript(
            video_id="vid1", title="Review", channel_name="Tech", view_count=12345, duration=125,
            relevance_reason="fits", transcript=text,
        )
    ]


@pytest.mark.asyncio
async def test_plain_text_reply_is_kept_raw(request_model: CollectionRequest) -> None:
    reply = "These posts mostly talk about suction power."
    artifact = await ContentAnalyzer(ScriptedLLM([reply])).analyze_blogs(request_model, _docs())

    assert artifact.structured is None
    assert artifact.result.reason == "unparsed"
    assert artifact.raw_text == reply


@pytest.mark.asyncio
async def test_structured_blog_analysis_uses_successful_docs_only(request_model: CollectionRequest) -> None:
    reply = "```json\n" + json.dumps(BLOG_JSON) + "\n```"
    llm = ScriptedLLM([reply])
    artifact = await ContentAnalyzer(llm).analyze_blogs(request_model, _docs())

    assert artifact.structured is not None
    assert artifact.structured.core_keywords == ["suction", "battery"]
    assert artifact.raw_text == reply
    assert "Broken" not in llm.prompts[0]
    assert "2 competitor posts" in llm.prompts[0]


@pytest.mark.asyncio
async def test_reply_missing_fields_is_unparsed(request_model: CollectionRequest) -> None:
    reply = json.dumps({"competitor_titles": ["A"]})
    artifact = await ContentAnalyzer(ScriptedLLM([reply])).analyze_blogs(request_model, _docs())

    assert artifact.structured is None
    assert artifact.result.reason == "unparsed"


@pytest.mark.asyncio
async def test_blog_service_failure_yields_diagnostic(request_model: CollectionRequest) -> None:
    llm = ScriptedLLM([TimeoutError("read timed out")])
    artifact = await ContentAnalyzer(llm).analyze_blogs(request_model, _docs())

    assert artifact.result.reason == "service_error"
    assert artifact.raw_text == BLOG_FAILURE_TEXT


@pytest.mark.asyncio
async def test_no_successful_docs_skips_the_service(request_model: CollectionRequest) -> None:
    llm = ScriptedLLM(["unused"])
    docs = [CrawledDocument(title="x", url="u", error="blocked")]
    artifact = await ContentAnalyzer(llm).analyze_blogs(request_model, docs)

    assert llm.prompts == []
    assert artifact.result.reason == "no_content"
    assert artifact.raw_text == NO_BLOGS_TEXT


@pytest.mark.asyncio
async def test_structured_video_analysis(request_model: CollectionRequest) -> None:
    reply = json.dumps(VIDEO_JSON)
    artifact = await ContentAnalyzer(ScriptedLLM([reply])).analyze_videos(request_model, _transcripts())

    assert artifact.structured.video_summaries[0].key_points == "Long battery life"
    assert artifact.result.kind == "structured"


@pytest.mark.asyncio
async def test_video_service_failure_yields_diagnostic(request_model: CollectionRequest) -> None:
    llm = ScriptedLLM([RuntimeError("boom")])
    artifact = await ContentAnalyzer(llm).analyze_videos(request_model, _transcripts())

    assert artifact.raw_text == VIDEO_FAILURE_TEXT


def test_video_prompt_contains_metadata(request_model: CollectionRequest) -> None:
    prompt = build_video_prompt(request_model, _transcripts())

    assert "12,345" in prompt
    assert "2m 5s" in prompt
    assert "Robot vacuum buying guide" in prompt


def test_transcript_excerpt_lengths() -> None:
    short = "a" * 100
    medium = "b" * 2000
    long_text = "c" * (TRANSCRIPT_HEAD + 10) + "d" * 2000

    assert transcript_excerpt(short) == short
    assert transcript_excerpt(medium).startswith("b" * TRANSCRIPT_HEAD + "...(truncated")
    excerpt = transcript_excerpt(long_text)
    assert "(middle omitted)" in excerpt
    assert excerpt.count("d") >= TRANSCRIPT_HEAD
