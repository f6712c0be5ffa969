"""Tunable thresholds and targets for the collection pipeline."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator


class CollectionSettings(BaseModel):
    """Named, overridable values for every count the pipeline works towards.

    The defaults reproduce the behaviour the pipeline has always had. They can
    be overridden from the ``collection`` section of the YAML config.
    """

    model_config = ConfigDict(extra="forbid")

    blog_target_count: int = Field(50, ge=1, description="Blog candidates to acquire")
    video_search_count: int = Field(50, ge=1, description="Video candidates to request")

    # Relative evaluation of the video pool
    proportional_pool_threshold: int = Field(
        15, ge=1, description="Pool size from which the proportional cut applies"
    )
    proportional_ratio: float = Field(0.7, gt=0, le=1, description="Share of a large pool to keep")
    absolute_pool_threshold: int = Field(
        10, ge=1, description="Pool size from which the absolute cap applies"
    )
    absolute_cap: int = Field(10, ge=1, description="Items kept from a mid-sized pool")

    selection_limit: int = Field(10, ge=1, description="Maximum picks per source")
    transcript_target: int = Field(3, ge=1, description="Transcripts to collect")
    crawl_target: int = Field(3, ge=1, description="Blog documents to fetch successfully")
    min_transcript_length: int = Field(
        100, ge=0, description="Shorter transcripts are replaced by a placeholder"
    )

    @model_validator(mode="after")
    def check_thresholds(self) -> "CollectionSettings":
        if self.absolute_pool_threshold > self.proportional_pool_threshold:
            raise ValueError(
                "absolute_pool_threshold must not exceed proportional_pool_threshold"
            )
        return self
