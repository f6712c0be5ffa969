"""Structured analysis of the fetched blog posts and video transcripts.

Each analysis is a single reasoning-service request. The reply is parsed with
the shared extraction rule and validated against :class:`BlogAnalysis` or
:class:`VideoAnalysis`. Nothing here raises: a reply that does not parse is
kept as raw text, a failed call is replaced by a fixed diagnostic, and when
there is nothing to analyse the service is not called at all.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from ..schemas.analysis import (
    BlogAnalysis,
    BlogAnalysisArtifact,
    RawAnalysis,
    StructuredBlogAnalysis,
    StructuredVideoAnalysis,
    VideoAnalysis,
    VideoAnalysisArtifact,
)
from ..schemas.content_options import content_type_description, review_type_description
from ..schemas.models import CollectionRequest, CrawledDocument, VideoTranscript
from ..utils.json_extract import Parsed, parse_model
from ..utils.llm_client import BaseTextGenerator, ChatMessage


BLOG_CONTENT_LIMIT = 3000
TRANSCRIPT_HEAD = 1500
TRANSCRIPT_FULL_LIMIT = 3000

NO_BLOGS_TEXT = "No crawled blog content was available for analysis."
NO_VIDEOS_TEXT = "No videos with transcripts were available for analysis."
BLOG_FAILURE_TEXT = "Blog content analysis failed."
VIDEO_FAILURE_TEXT = "Video transcript analysis failed."

_BLOG_SHAPE = {
    "competitor_titles": ["Competitor blog title 1", "Competitor blog title 2"],
    "core_keywords": ["Frequently used core keyword 1", "Frequently used core keyword 2"],
    "essential_content": ["Topic every post covers 1", "Topic every post covers 2"],
    "key_points": ["What a post focuses on 1", "What a post focuses on 2"],
    "improvement_opportunities": ["Gap competitors missed 1", "Gap competitors missed 2"],
}

_VIDEO_SHAPE = {
    "video_summaries": [{"video_number": 1, "key_points": "Two or three lines of key points"}],
    "common_themes": ["Theme the videos share 1"],
    "practical_tips": ["Concrete information usable in the post 1"],
    "expert_insights": ["Expert perspective mentioned in a video 1"],
    "blog_suggestions": ["How to use this in the post 1"],
}


def target_info(request: CollectionRequest) -> Dict[str, Any]:
    info: Dict[str, Any] = {
        "selected_title": request.selected_title,
        "search_keyword": request.search_keyword,
        "main_keyword": request.main_keyword,
        "content_type": request.content_type,
        "content_type_description": content_type_description(request.content_type),
    }
    if request.review_type:
        info["review_type"] = request.review_type
        info["review_type_description"] = review_type_description(request.review_type)
    if request.sub_keywords:
        info["sub_keywords"] = ", ".join(request.sub_keywords)
    return info


def transcript_excerpt(text: str) -> str:
    """Shorten long transcripts, keeping the opening and the ending."""
    length = len(text)
    if length > TRANSCRIPT_FULL_LIMIT:
        return (
            f"{text[:TRANSCRIPT_HEAD]}\n\n...(middle omitted)...\n\n{text[-TRANSCRIPT_HEAD:]}\n"
            f"(original length {length:,} chars; first and last {TRANSCRIPT_HEAD} shown)"
        )
    if length > TRANSCRIPT_HEAD:
        return f"{text[:TRANSCRIPT_HEAD]}...(truncated; original length {length:,} chars)"
    return text


def _json_block(data: Any) -> str:
    return "```json\n" + json.dumps(data, ensure_ascii=False, indent=2) + "\n```"


def build_blog_prompt(request: CollectionRequest, docs: Sequence[CrawledDocument]) -> str:
    competitors = [
        {
            "blog_number": i + 1,
            "title": doc.title or "Untitled",
            "content": (doc.text_content or "No content")[:BLOG_CONTENT_LIMIT],
        }
        for i, doc in enumerate(docs)
    ]
    return "\n".join([
        f'Run a competitor analysis for writing a blog post titled "{request.selected_title}".',
        "",
        "**Post to be written**:",
        _json_block(target_info(request)),
        "",
        f'Below are the titles and bodies of {len(docs)} competitor posts found for '
        f'"{request.search_keyword}".',
        _json_block(competitors),
        "",
        "Leave out posts unrelated to the target title. Prefer concrete, practical points and "
        "make the differentiation opportunities explicit. Answer only with JSON in this shape:",
        _json_block(_BLOG_SHAPE),
    ])


def build_video_prompt(request: CollectionRequest, transcripts: Sequence[VideoTranscript]) -> str:
    sections: List[str] = []
    for i, video in enumerate(transcripts, start=1):
        minutes, seconds = divmod(video.duration, 60)
        sections.append("\n".join([
            f"## Video {i}",
            f"**Title**: {video.title}",
            f"**Channel**: {video.channel_name}",
            f"**Views**: {video.view_count:,}",
            f"**Length**: {minutes}m {seconds}s",
            "",
            "**Transcript**:",
            transcript_excerpt(video.transcript),
            "",
            "---",
        ]))
    return "\n".join([
        f'Analyse video transcripts for writing a blog post titled "{request.selected_title}".',
        "",
        "**Post to be written**:",
        _json_block(target_info(request)),
        "",
        f'Below are transcripts of the top {len(transcripts)} videos found for "{request.search_keyword}". '
        "Long transcripts are excerpted.",
        "",
        "\n\n".join(sections),
        "",
        "Leave out unrelated videos and promotional content. Focus on information that helps "
        "write the post. Answer only with JSON in this shape:",
        _json_block(_VIDEO_SHAPE),
    ])


class ContentAnalyzer:
    """Produces the blog and video analysis artifacts."""

    def __init__(self, llm: BaseTextGenerator, logger: Optional[logging.Logger] = None):
        self.llm = llm
        self.logger = logger or logging.getLogger(self.__class__.__name__)

    async def _ask(self, prompt: str) -> str:
        response = await self.llm.generate_text([ChatMessage(role="user", content=prompt)])
        return response.content

    async def analyze_blogs(
        self, request: CollectionRequest, docs: Sequence[CrawledDocument]
    ) -> BlogAnalysisArtifact:
        usable = [doc for doc in docs if doc.success]
        if not usable:
            self.logger.info("No successfully crawled blogs; skipping blog analysis")
            return BlogAnalysisArtifact(result=RawAnalysis(reason="no_content"), raw_text=NO_BLOGS_TEXT)

        try:
            content = await self._ask(build_blog_prompt(request, usable))
        except Exception:
            self.logger.exception("Blog analysis request failed")
            return BlogAnalysisArtifact(result=RawAnalysis(reason="service_error"), raw_text=BLOG_FAILURE_TEXT)

        outcome = parse_model(content, BlogAnalysis)
        if isinstance(outcome, Parsed):
            self.logger.info("Blog analysis parsed")
            return BlogAnalysisArtifact(result=StructuredBlogAnalysis(data=outcome.value), raw_text=content)
        self.logger.warning(f"Blog analysis kept as raw text: {outcome.reason}")
        return BlogAnalysisArtifact(result=RawAnalysis(reason="unparsed"), raw_text=content)

    async def analyze_videos(
        self, request: CollectionRequest, transcripts: Sequence[VideoTranscript]
    ) -> VideoAnalysisArtifact:
        if not transcripts:
            self.logger.info("No transcripts; skipping video analysis")
            return VideoAnalysisArtifact(result=RawAnalysis(reason="no_content"), raw_text=NO_VIDEOS_TEXT)

        try:
            content = await self._ask(build_video_prompt(request, transcripts))
        except Exception:
            self.logger.exception("Video analysis request failed")
            return VideoAnalysisArtifact(result=RawAnalysis(reason="service_error"), raw_text=VIDEO_FAILURE_TEXT)

        outcome = parse_model(content, VideoAnalysis)
        if isinstance(outcome, Parsed):
            self.logger.info("Video analysis parsed")
            return VideoAnalysisArtifact(result=StructuredVideoAnalysis(data=outcome.value), raw_text=content)
        self.logger.warning(f"Video analysis kept as raw text: {outcome.reason}")
        return VideoAnalysisArtifact(result=RawAnalysis(reason="unparsed"), raw_text=content)
