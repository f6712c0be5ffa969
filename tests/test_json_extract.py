from __future__ import annotations

import pytest

from blog_scout.errors import ParseError
from blog_scout.schemas.analysis import VideoSummary
from blog_scout.utils.json_extract import Parsed, Unparsed, extract_json_object, extract_json_text, parse_model


def test_fenced_block_wins_over_surrounding_text() -> None:
    content = 'Sure! {"ignored": true}\n```json\n{"a": 1}\n```'
    assert extract_json_text(content) == '{"a": 1}'


def test_bare_object_is_accepted_after_trimming() -> None:
    assert extract_json_object('\n  {"a": [1, 2]}  \n') == {"a": [1, 2]}


@pytest.mark.parametrize(
    "content",
    [
        "no json here",
        'prefix {"a": 1}',
        "```json\n{broken\n```",
        "```json\n[1, 2]\n```",
        "",
    ],
)
def test_unusable_content_raises_parse_error(content: str) -> None:
    with pytest.raises(ParseError):
        extract_json_object(content)


def test_parse_model_returns_tagged_outcome() -> None:
    ok = parse_model('{"video_number": 2, "key_points": "x"}', VideoSummary)
    assert isinstance(ok, Parsed)
    assert ok.value.video_number == 2

    wrong_shape = parse_model('{"video_number": "two"}', VideoSummary)
    assert isinstance(wrong_shape, Unparsed)
    assert "VideoSummary" in wrong_shape.reason

    assert isinstance(parse_model("plain", VideoSummary), Unparsed)
