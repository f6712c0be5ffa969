"""Schemas for the two analysis artifacts handed to the downstream writer.

An artifact is either ``Structured`` (the reasoning service returned JSON
matching one of the fixed shapes below) or ``Raw`` (it did not, or it was
never asked). ``raw_text`` is kept in both cases so the writer always has
something to read.
"""

from __future__ import annotations

from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field


class BlogAnalysis(BaseModel):
    """Competitor analysis of the crawled blog posts."""

    competitor_titles: List[str] = Field(..., description="Titles of the competitor posts analysed")
    core_keywords: List[str] = Field(..., description="Keywords that recur across the posts")
    essential_content: List[str] = Field(..., description="Topics every post covers")
    key_points: List[str] = Field(..., description="What each post focuses on")
    improvement_opportunities: List[str] = Field(
        ..., description="Gaps the competitors missed"
    )


class VideoSummary(BaseModel):
    video_number: int
    key_points: str


class VideoAnalysis(BaseModel):
    """Analysis of the collected video transcripts."""

    video_summaries: List[VideoSummary]
    common_themes: List[str]
    practical_tips: List[str]
    expert_insights: List[str]
    blog_suggestions: List[str]


RawReason = Literal["unparsed", "service_error", "no_content"]


class RawAnalysis(BaseModel):
    kind: Literal["raw"] = "raw"
    reason: RawReason


class StructuredBlogAnalysis(BaseModel):
    kind: Literal["structured"] = "structured"
    data: BlogAnalysis


class StructuredVideoAnalysis(BaseModel):
    kind: Literal["structured"] = "structured"
    data: VideoAnalysis


class BlogAnalysisArtifact(BaseModel):
    result: Union[StructuredBlogAnalysis, RawAnalysis] = Field(..., discriminator="kind")
    raw_text: str

    @property
    def structured(self) -> Optional[BlogAnalysis]:
        if isinstance(self.result, StructuredBlogAnalysis):
            return self.result.data
        return None


class VideoAnalysisArtifact(BaseModel):
    result: Union[StructuredVideoAnalysis, RawAnalysis] = Field(..., discriminator="kind")
    raw_text: str

    @property
    def structured(self) -> Optional[VideoAnalysis]:
        if isinstance(self.result, StructuredVideoAnalysis):
            return self.result.data
        return None
