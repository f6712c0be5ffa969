from __future__ import annotations

import pytest
from pydantic import ValidationError

from blog_scout.schemas.analysis import BlogAnalysisArtifact, RawAnalysis
from blog_scout.schemas.content_options import content_type_description, review_type_description
from blog_scout.schemas.models import CandidateBlog, CollectionRequest, StageProgress


def test_request_defaults_and_normalisation() -> None:
    request = CollectionRequest(search_keyword="  robot vacuum ", selected_title="Guide", sub_keywords="a, b;c")

    assert request.search_keyword == "robot vacuum"
    assert request.main_keyword == "robot vacuum"
    assert request.content_type == "info"
    assert request.sub_keywords == ["a", "b", "c"]


@pytest.mark.parametrize("field", ["search_keyword", "selected_title"])
def test_request_rejects_blank_required_fields(field: str) -> None:
    values = {"search_keyword": "kw", "selected_title": "title", field: "   "}
    with pytest.raises(ValidationError):
        CollectionRequest(**values)


def test_blog_rank_is_one_based() -> None:
    with pytest.raises(ValidationError):
        CandidateBlog(rank=0, title="t", url="u")


def test_stage_progress_only_allows_known_values() -> None:
    with pytest.raises(ValidationError):
        StageProgress(step_name="x", progress=75)
    with pytest.raises(ValidationError):
        StageProgress(step_name="x", status="done")


def test_artifact_round_trips_through_json() -> None:
    artifact = BlogAnalysisArtifact(result=RawAnalysis(reason="unparsed"), raw_text="prose")
    restored = BlogAnalysisArtifact.model_validate_json(artifact.model_dump_json())

    assert restored.structured is None
    assert restored.result.reason == "unparsed"


def test_type_descriptions() -> None:
    assert content_type_description("review").startswith("Review")
    assert content_type_description("unknown") == ""
    assert review_type_description(None) == ""
    assert review_type_description("rental").endswith("rental service")
