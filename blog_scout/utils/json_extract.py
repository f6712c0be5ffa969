"""Pull a JSON object out of a free-text reasoning-service response.

Extraction rule, applied in order:

1. If the response contains a fenced ````json`` code block, its body is the
   candidate. A fenced block that fails to decode is *not* retried as bare
   JSON.
2. Otherwise, if the trimmed response starts with ``{`` and ends with ``}``,
   the whole trimmed response is the candidate.

The candidate is then decoded and validated against a pydantic model.
:func:`parse_model` returns either :class:`Parsed` or :class:`Unparsed`;
callers branch on the type instead of checking for ``None``.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, Generic, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from ..errors import ParseError


ModelT = TypeVar("ModelT", bound=BaseModel)

_FENCED_JSON = re.compile(r"```json\s*([\s\S]*?)\s*```")


@dataclass(frozen=True)
class Parsed(Generic[ModelT]):
    value: ModelT


@dataclass(frozen=True)
class Unparsed:
    reason: str


ParseOutcome = Union[Parsed[ModelT], Unparsed]


def extract_json_text(content: str) -> Optional[str]:
    """Return the JSON candidate found by the extraction rule, if any."""
    match = _FENCED_JSON.search(content or "")
    if match:
        return match.group(1)
    trimmed = (content or "").strip()
    if trimmed.startswith("{") and trimmed.endswith("}"):
        return trimmed
    return None


def extract_json_object(content: str) -> Dict[str, Any]:
    """Decode the JSON object embedded in ``content``.

    Raises
    ------
    ParseError
        If no candidate is found, it does not decode, or it is not an object.
    """
    candidate = extract_json_text(content)
    if candidate is None:
        raise ParseError("No JSON object found in response")
    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as exc:
        raise ParseError(f"Invalid JSON in response: {exc}") from exc
    if not isinstance(data, dict):
        raise ParseError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def parse_model(content: str, model: Type[ModelT]) -> "ParseOutcome[ModelT]":
    """Extract and validate ``model`` from ``content`` without raising."""
    try:
        data = extract_json_object(content)
    except ParseError as exc:
        return Unparsed(reason=str(exc))
    try:
        return Parsed(value=model.model_validate(data))
    except ValidationError as exc:
        return Unparsed(reason=f"Response did not match {model.__name__}: {exc.error_count()} error(s)")
