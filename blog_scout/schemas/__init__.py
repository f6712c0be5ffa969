"""Pydantic schemas for requests, candidates, analysis artifacts and reports."""

from .analysis import (
    BlogAnalysis,
    BlogAnalysisArtifact,
    RawAnalysis,
    StructuredBlogAnalysis,
    StructuredVideoAnalysis,
    VideoAnalysis,
    VideoAnalysisArtifact,
    VideoSummary,
)
from .models import (
    CandidateBlog,
    CandidateVideo,
    CollectionReport,
    CollectionRequest,
    CrawledDocument,
    CrawlProgress,
    ManifestError,
    ProgressSnapshot,
    ReportSummary,
    RunManifest,
    SelectedBlog,
    SelectedVideo,
    SelectionResult,
    StageProgress,
    SubtitleTrack,
    VideoTranscript,
)

__all__ = [
    "BlogAnalysis",
    "BlogAnalysisArtifact",
    "CandidateBlog",
    "CandidateVideo",
    "CollectionReport",
    "CollectionRequest",
    "CrawledDocument",
    "CrawlProgress",
    "ManifestError",
    "ProgressSnapshot",
    "RawAnalysis",
    "ReportSummary",
    "RunManifest",
    "SelectedBlog",
    "SelectedVideo",
    "SelectionResult",
    "StageProgress",
    "StructuredBlogAnalysis",
    "StructuredVideoAnalysis",
    "SubtitleTrack",
    "VideoAnalysis",
    "VideoAnalysisArtifact",
    "VideoSummary",
    "VideoTranscript",
]
