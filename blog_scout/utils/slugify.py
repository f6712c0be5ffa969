"""Utility for generating filesystem-safe slugs from arbitrary text."""

from __future__ import annotations

import re

def slugify(value: str, max_length: int = 80) -> str:
    """Convert the input string into a lowercase slug suitable for filenames.

    Letters and digits of any script are kept, so Korean keywords survive.
    Everything else becomes a hyphen; runs of hyphens are collapsed and
    leading/trailing hyphens stripped. An empty result becomes ``"report"``.

    Examples
    --------
    >>> slugify("Best Robot Vacuum 2024!")
    'best-robot-vacuum-2024'
    >>> slugify("  로봇청소기 추천  ")
    '로봇청소기-추천'
    """
    value = value.strip().lower()
    value = re.sub(r"[\W_]+", "-", value)
    value = value.strip("-")
    value = re.sub(r"-+", "-", value)
    return value[:max_length].rstrip("-") or "report"
