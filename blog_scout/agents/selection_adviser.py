"""Relevance selection of blog and video candidates.

The adviser shows both candidate pools to the reasoning service together
with the target title and asks for the ten most relevant items of each. The
reply is parsed with the shared JSON extraction rule and every pick is
resolved back to an original candidate.

Resolution contract
-------------------
Matchers in :data:`DEFAULT_MATCHERS` are tried in order and the first one
that returns a candidate wins:

1. :func:`match_exact` - identical title;
2. :func:`match_containment` - one title contains the other;
3. :func:`match_position` - the candidate at the pick's own index.

Picks that resolve to nothing, to a candidate without a URL / video id, or to
a candidate already picked are dropped.

Fallback ranking
----------------
When the service call fails or its reply cannot be parsed, each list falls
back to the first ten candidates of its pool in original order. ``advise``
never raises for these cases.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, List, Optional, Sequence, Tuple, TypeVar

from pydantic import BaseModel, Field, ValidationError, field_validator

from ..errors import ParseError
from ..schemas.content_options import content_type_description, review_type_description
from ..schemas.models import (
    CandidateBlog,
    CandidateVideo,
    CollectionRequest,
    SelectedBlog,
    SelectedVideo,
    SelectionResult,
)
from ..utils.json_extract import extract_json_object
from ..utils.llm_client import BaseTextGenerator, ChatMessage


CandidateT = TypeVar("CandidateT", CandidateBlog, CandidateVideo)
Matcher = Callable[[str, int, Sequence[CandidateT]], Optional[CandidateT]]

SELECTION_LIMIT = 10
FALLBACK_SERVICE_REASON = "Automatic selection (relevance ranking service unavailable)"
FALLBACK_PARSE_REASON = "Automatic selection (relevance ranking response could not be parsed)"
DEFAULT_PICK_REASON = "Selected"


class SelectionPick(BaseModel):
    title: str
    relevance_reason: Optional[str] = None


class SelectionResponse(BaseModel):
    selected_blogs: List[SelectionPick] = Field(default_factory=list)
    selected_videos: List[SelectionPick] = Field(default_factory=list)

    @field_validator("selected_blogs", "selected_videos", mode="before")
    @classmethod
    def _non_list_is_empty(cls, value: Any) -> Any:
        """Each side is read on its own; a null or non-list side counts as no picks."""
        return value if isinstance(value, list) else []


def match_exact(title: str, index: int, pool: Sequence[CandidateT]) -> Optional[CandidateT]:
    return next((item for item in pool if item.title == title), None)


def match_containment(title: str, index: int, pool: Sequence[CandidateT]) -> Optional[CandidateT]:
    if not title:
        return None
    return next(
        (item for item in pool if item.title and (title in item.title or item.title in title)),
        None,
    )


def match_position(title: str, index: int, pool: Sequence[CandidateT]) -> Optional[CandidateT]:
    return pool[index] if 0 <= index < len(pool) else None


DEFAULT_MATCHERS: Tuple[Matcher, ...] = (match_exact, match_containment, match_position)


def resolve_candidate(
    title: str,
    index: int,
    pool: Sequence[CandidateT],
    matchers: Sequence[Matcher] = DEFAULT_MATCHERS,
) -> Optional[CandidateT]:
    """Resolve a pick to a candidate using the first matcher that succeeds."""
    for matcher in matchers:
        found = matcher(title, index, pool)
        if found is not None:
            return found
    return None


def fallback_selection(
    blogs: Sequence[CandidateBlog],
    videos: Sequence[CandidateVideo],
    reason: str,
    limit: int = SELECTION_LIMIT,
) -> SelectionResult:
    """First ``limit`` items of each pool in original order."""
    return SelectionResult(
        selected_blogs=[SelectedBlog(**blog.model_dump(), relevance_reason=reason) for blog in blogs[:limit]],
        selected_videos=[SelectedVideo(**video.model_dump(), relevance_reason=reason) for video in videos[:limit]],
        fallback_reason=reason,
    )


def build_selection_prompt(
    target_title: str,
    request: CollectionRequest,
    blogs: Sequence[CandidateBlog],
    videos: Sequence[CandidateVideo],
    limit: int = SELECTION_LIMIT,
) -> str:
    """Build the selection request sent to the reasoning service."""
    has_videos = bool(videos)
    blog_titles = "\n".join(f"{i + 1}. {blog.title}" for i, blog in enumerate(blogs))
    video_titles = "\n".join(f"{i + 1}. {video.title}" for i, video in enumerate(videos))

    content_info = f"**Content type**: {request.content_type}"
    description = content_type_description(request.content_type)
    if description:
        content_info += f" ({description})"
    if request.review_type:
        content_info += f"\n**Review type**: {request.review_type}"
        review_description = review_type_description(request.review_type)
        if review_description:
            content_info += f" ({review_description})"

    criteria = [
        f'Topical relevance to the target title "{target_title}" (highest priority)',
        "Direct connection to the main keyword",
        f"An approach that suits {request.content_type} content"
        + (f" ({request.review_type} perspective)" if request.review_type else ""),
        "Titles that promise concrete, practical information",
        "Informational content first (exclude obvious sales or company promotion)",
    ]
    sub_keywords_line = ""
    if request.sub_keywords:
        joined = ", ".join(request.sub_keywords)
        sub_keywords_line = f"**Sub keywords**: {joined}\n"
        criteria.append(f"Relevance to the sub keywords ({joined})")

    example = {
        "selected_blogs": [{"title": "Most relevant blog title (1st)", "relevance_reason": "Why it helps"}],
        "selected_videos": (
            [{"title": "Most relevant video title (1st)", "relevance_reason": "Why its transcript helps"}]
            if has_videos else []
        ),
    }

    sources = "blog posts and videos" if has_videos else "blog posts"
    sections = [
        f'I am going to write a blog post titled "{target_title}". '
        f"Select the {sources} that will help most when writing it.",
        "",
        f"**Target title**: {target_title}",
        f"**Main keyword**: {request.main_keyword}",
        f"{sub_keywords_line}**Search keyword**: {request.search_keyword}",
        content_info,
        "",
        "**Selection criteria**:",
        "\n".join(f"{i + 1}. {line}" for i, line in enumerate(criteria)),
        "",
        "**Blog titles**:",
        blog_titles or "(none)",
    ]
    if has_videos:
        sections += ["", "**Video titles** (transcripts will be extracted from the picks):", video_titles]
    sections += [
        "",
        f"Return up to {limit} blogs{f' and {limit} videos' if has_videos else ''}, most relevant first, "
        "copying titles exactly, as JSON in this shape:",
        "```json",
        json.dumps(example, ensure_ascii=False, indent=2),
        "```",
    ]
    return "\n".join(sections)


class SelectionAdviser:
    """Ranks the candidate pools against the target title."""

    def __init__(
        self,
        llm: BaseTextGenerator,
        limit: int = SELECTION_LIMIT,
        matchers: Sequence[Matcher] = DEFAULT_MATCHERS,
        logger: Optional[logging.Logger] = None,
    ):
        self.llm = llm
        self.limit = limit
        self.matchers = tuple(matchers)
        self.logger = logger or logging.getLogger(self.__class__.__name__)

    async def advise(
        self,
        target_title: str,
        request: CollectionRequest,
        blog_pool: Sequence[CandidateBlog],
        video_pool: Optional[Sequence[CandidateVideo]] = None,
    ) -> SelectionResult:
        blogs = list(blog_pool or [])
        videos = list(video_pool or [])
        if not blogs and not videos:
            self.logger.info("No candidates to select from")
            return SelectionResult()

        prompt = build_selection_prompt(target_title, request, blogs, videos, self.limit)
        try:
            response = await self.llm.generate_text([ChatMessage(role="user", content=prompt)])
        except Exception:
            self.logger.exception("Relevance ranking request failed; using fallback ranking")
            return fallback_selection(blogs, videos, FALLBACK_SERVICE_REASON, self.limit)

        try:
            result = self.parse_selection(response.content, blogs, videos)
        except ParseError as exc:
            self.logger.warning(f"Could not parse relevance ranking ({exc}); using fallback ranking")
            return fallback_selection(blogs, videos, FALLBACK_PARSE_REASON, self.limit)

        self.logger.info(
            f"Selected {len(result.selected_blogs)} blogs and {len(result.selected_videos)} videos"
        )
        return result

    def parse_selection(
        self,
        content: str,
        blogs: Sequence[CandidateBlog],
        videos: Sequence[CandidateVideo],
    ) -> SelectionResult:
        """Parse the service reply and resolve picks to candidates.

        Raises
        ------
        ParseError
            If the reply has no decodable JSON object of the expected shape.
        """
        data = extract_json_object(content)
        try:
            parsed = SelectionResponse.model_validate(data)
        except ValidationError as exc:
            raise ParseError(f"Unexpected selection shape: {exc.error_count()} error(s)") from exc

        selected_blogs: List[SelectedBlog] = []
        seen_urls = set()
        for index, pick in enumerate(parsed.selected_blogs[: self.limit]):
            blog = resolve_candidate(pick.title, index, blogs, self.matchers)
            if blog is None or not blog.url or blog.url in seen_urls:
                self.logger.debug(f"Dropping blog pick '{pick.title}'")
                continue
            seen_urls.add(blog.url)
            selected_blogs.append(
                SelectedBlog(**blog.model_dump(), relevance_reason=pick.relevance_reason or DEFAULT_PICK_REASON)
            )

        selected_videos: List[SelectedVideo] = []
        seen_ids = set()
        for index, pick in enumerate(parsed.selected_videos[: self.limit]):
            video = resolve_candidate(pick.title, index, videos, self.matchers)
            if video is None or not video.video_id or video.video_id in seen_ids:
                self.logger.debug(f"Dropping video pick '{pick.title}'")
                continue
            seen_ids.add(video.video_id)
            selected_videos.append(
                SelectedVideo(**video.model_dump(), relevance_reason=pick.relevance_reason or DEFAULT_PICK_REASON)
            )

        return SelectionResult(selected_blogs=selected_blogs, selected_videos=selected_videos)
