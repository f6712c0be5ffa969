"""Content and review type ids understood by the prompts.

The ids match the ones chosen by the writer when a request is created; the
descriptions are embedded in the selection and analysis requests so the
reasoning service knows what kind of post is being prepared.
"""

from __future__ import annotations

from typing import Dict, Optional

CONTENT_TYPES: Dict[str, str] = {
    "info": "Information/guide: answer the searcher's question systematically and accurately",
    "review": "Review: a unique post built on personal experience and an honest verdict",
    "compare": "Comparison/recommendation: settle the reader's choice with a structured comparison",
    "howto": "How-to: practical methods and a step-by-step guide",
}

REVIEW_TYPES: Dict[str, str] = {
    "self-purchase": "Bought with my own money; an honest personal review",
    "sponsored": "Product provided by the brand; an honest sponsored review",
    "experience": "Written after joining a product trial group",
    "rental": "Review of a product used through a rental service",
}

# Content types for which promotional posts are still useful references.
COMMERCIAL_CONTENT_TYPES = frozenset({"review", "compare"})


def content_type_description(content_type: str) -> str:
    return CONTENT_TYPES.get(content_type, "")


def review_type_description(review_type: Optional[str]) -> str:
    if not review_type:
        return ""
    return REVIEW_TYPES.get(review_type, "")
