"""Pydantic models used throughout the collection pipeline.

These models define the request, the candidates returned by the search
providers, the subsets chosen by the selection stage and the final report.
Everything is created fresh for each ``collect_and_analyze`` call; nothing
here is persisted between runs.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .analysis import BlogAnalysisArtifact, VideoAnalysisArtifact


StageStatus = Literal["pending", "running", "completed", "error"]
DataQuality = Literal["high", "medium", "low"]


class CollectionRequest(BaseModel):
    """What the writer wants to research and the title they picked."""

    search_keyword: str = Field(..., description="Keyword sent to the search providers")
    main_keyword: Optional[str] = Field(
        None, description="Original main keyword; defaults to the search keyword"
    )
    selected_title: str = Field(..., description="Title of the post that will be written")
    content_type: str = Field("info", description="Content type id (info, review, compare, howto)")
    review_type: Optional[str] = Field(None, description="Review type id for review content")
    sub_keywords: List[str] = Field(default_factory=list, description="Secondary keywords")

    @field_validator("search_keyword", "selected_title", "content_type", mode="before")
    @classmethod
    def strip_strings(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("search_keyword", "selected_title")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("sub_keywords", mode="before")
    @classmethod
    def split_sub_keywords(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, str):
            return [kw.strip() for kw in v.replace(";", ",").split(",") if kw.strip()]
        return v

    @model_validator(mode="after")
    def default_main_keyword(self) -> "CollectionRequest":
        if not self.main_keyword or not self.main_keyword.strip():
            self.main_keyword = self.search_keyword
        else:
            self.main_keyword = self.main_keyword.strip()
        return self


class CandidateBlog(BaseModel):
    """A blog post returned by the blog search provider."""

    rank: int = Field(..., ge=1, description="1-based contiguous rank within one report")
    title: str
    url: str
    platform: str = "naver"


class CandidateVideo(BaseModel):
    """A video returned, already scored, by the video search provider."""

    video_id: str
    title: str
    channel_name: str = ""
    view_count: int = 0
    duration: int = Field(0, description="Length in seconds")
    subscriber_count: int = 0
    published_at: str = ""
    priority: float = Field(0.0, description="Provider-computed ranking score")


class SelectedBlog(CandidateBlog):
    relevance_reason: str


class SelectedVideo(CandidateVideo):
    relevance_reason: str


class SelectionResult(BaseModel):
    """Output of the relevance selection stage."""

    selected_blogs: List[SelectedBlog] = Field(default_factory=list)
    selected_videos: List[SelectedVideo] = Field(default_factory=list)
    fallback_reason: Optional[str] = Field(
        None, description="Set when fallback ranking replaced automated selection"
    )


class CrawledDocument(BaseModel):
    """Full text fetched for one selected blog."""

    title: str
    url: str
    text_content: str = ""
    success: bool = False
    content_length: int = 0
    error: Optional[str] = None


class CrawlProgress(BaseModel):
    current: int
    total: int
    url: str
    status: Literal["crawling", "success", "failed"]


class SubtitleTrack(BaseModel):
    text: str
    language: Optional[str] = None


class VideoTranscript(SelectedVideo):
    """A selected video together with its cleaned transcript."""

    transcript: str


class StageProgress(BaseModel):
    """Progress of one of the seven pipeline stages. Immutable."""

    model_config = ConfigDict(frozen=True)

    step_name: str
    progress: Literal[0, 50, 100] = 0
    status: StageStatus = "pending"
    data: Optional[Dict[str, Any]] = None
    message: Optional[str] = None


class ProgressSnapshot(BaseModel):
    """One notification in the progress event stream."""

    model_config = ConfigDict(frozen=True)

    sequence: int
    stages: Tuple[StageProgress, ...]


class ReportSummary(BaseModel):
    total_sources: int
    data_quality: DataQuality
    processing_time: float = Field(..., description="Wall-clock seconds")
    recommendations: List[str] = Field(default_factory=list)


class CollectionReport(BaseModel):
    """Everything one run collected, selected, fetched and analysed."""

    request: CollectionRequest
    blogs: List[CandidateBlog] = Field(default_factory=list)
    videos: List[CandidateVideo] = Field(
        default_factory=list, description="Video pool after relative evaluation"
    )
    selected_blogs: List[SelectedBlog] = Field(default_factory=list)
    selected_videos: List[SelectedVideo] = Field(default_factory=list)
    crawled_blogs: List[CrawledDocument] = Field(default_factory=list)
    transcripts: List[VideoTranscript] = Field(default_factory=list)
    blog_analysis: BlogAnalysisArtifact
    video_analysis: VideoAnalysisArtifact
    total_blogs_collected: int = 0
    total_videos_collected: int = 0
    stages: Tuple[StageProgress, ...] = ()
    summary: ReportSummary


class ManifestError(BaseModel):
    """An error that stopped one request of a batch."""

    request: str = Field(..., description="Selected title of the failed request")
    stage: str = Field(..., description="Stage that was running, or 'input'")
    message: str


class RunManifest(BaseModel):
    """Summary of a CLI run across all requests."""

    started_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: Optional[datetime] = None
    total_requests: int = Field(..., description="Number of requests attempted")
    successful: int = 0
    errors: List[ManifestError] = Field(default_factory=list)

    def record_success(self):
        self.successful += 1

    def record_error(self, request: str, stage: str, message: str):
        self.errors.append(ManifestError(request=request, stage=stage, message=message))

    def finish(self):
        self.finished_at = datetime.now(timezone.utc)
