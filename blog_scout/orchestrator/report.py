"""Report summary helpers: data quality tier and recommendations."""

from __future__ import annotations

from typing import List, Sequence

from ..schemas.analysis import BlogAnalysisArtifact, VideoAnalysisArtifact
from ..schemas.models import CrawledDocument, DataQuality


# Recommendation texts containing one of these denote a failure or absence.
FAILURE_MARKERS = ("failed", "not available")

COMPETITOR_RECOMMENDATION = "Competitor analysis completed from the collected data"
BLOG_RECOMMENDATION = "Use the blog content analysis as a reference while writing"
BLOG_FAILED = "Blog analysis failed"
VIDEO_RECOMMENDATION = "Reflect insights from the video transcript analysis in the post"
VIDEO_MISSING = "Video analysis not available"


def data_quality(crawled: Sequence[CrawledDocument]) -> DataQuality:
    succeeded = sum(1 for doc in crawled if doc.success)
    if succeeded >= 2:
        return "high"
    if succeeded == 1:
        return "medium"
    return "low"


def _produced(artifact) -> bool:
    return artifact.structured is not None or artifact.result.reason == "unparsed"


def recommendations(blog: BlogAnalysisArtifact, video: VideoAnalysisArtifact) -> List[str]:
    candidates = [
        COMPETITOR_RECOMMENDATION,
        BLOG_RECOMMENDATION if _produced(blog) else BLOG_FAILED,
        VIDEO_RECOMMENDATION if _produced(video) else VIDEO_MISSING,
    ]
    return [text for text in candidates if not any(marker in text.lower() for marker in FAILURE_MARKERS)]
