"""Transcript reconstruction and collection.

Subtitle providers sometimes hand back the raw timed-text payload (a blob
containing ``wireMagic``/``tStartMs``/``segs utf8`` metadata) instead of clean
text. :class:`SubtitleReconstructor` recovers the spoken text from such blobs
and leaves clean input alone. :class:`TranscriptCollector` walks the selected
videos in ranked order until enough transcripts were collected.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Sequence, Tuple

from ..schemas.models import SelectedVideo, VideoTranscript
from ..utils.video_client import BaseSubtitleClient


RAW_MARKERS: Tuple[str, ...] = ("wireMagic", "tStartMs", "dDurationMs", "segs utf8", "pb3")
SEGMENT_DELIMITER = "segs utf8"
TIMING_MARKER = "tStartMs"

# Runs of Hangul with limited punctuation, digits and whitespace in between.
_HANGUL_RUN = re.compile(r"[가-힣][가-힣\s\d?!.,()~]+[가-힣?!.]")
_EDGE_JUNK = re.compile(r"^[\s,]+|[\s,]+$")
_WHITESPACE = re.compile(r"\s+")


class SubtitleReconstructor:
    """Turns raw subtitle payloads into plain text."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(self.__class__.__name__)

    @staticmethod
    def is_raw(payload: str) -> bool:
        return any(marker in payload for marker in RAW_MARKERS)

    def reconstruct(self, raw_payload: str) -> str:
        """Return clean transcript text.

        Payloads without any metadata marker are returned as they are. If
        nothing can be recovered from a raw payload, the payload itself is
        returned rather than an empty string.
        """
        if not self.is_raw(raw_payload):
            return raw_payload

        texts = self._split_segments(raw_payload)
        if not texts:
            self.logger.debug("No delimited segments found; falling back to script extraction")
            texts = self._extract_runs(raw_payload)

        result = _WHITESPACE.sub(" ", " ".join(texts)).strip()
        if not result:
            self.logger.warning("Could not recover text from raw subtitle payload; keeping it as is")
            return raw_payload
        self.logger.debug(f"Recovered {len(result)} chars from {len(texts)} segments")
        return result

    @staticmethod
    def _split_segments(payload: str) -> List[str]:
        texts: List[str] = []
        for segment in payload.split(SEGMENT_DELIMITER)[1:]:  # first segment is header metadata
            cut = segment.find(TIMING_MARKER)
            if cut > 0:
                segment = segment[:cut]
            segment = _EDGE_JUNK.sub("", segment)
            if len(segment) > 1:
                texts.append(segment)
        return texts

    @staticmethod
    def _extract_runs(payload: str) -> List[str]:
        texts: List[str] = []
        for match in _HANGUL_RUN.findall(payload):
            cleaned = match.strip()
            if len(cleaned) > 3 and not any(marker in cleaned for marker in RAW_MARKERS):
                texts.append(cleaned)
        return texts


class TranscriptCollector:
    """Collects transcripts for the top-ranked selected videos.

    Videos are tried in order until ``target`` transcripts were obtained.
    Videos without subtitles, or whose provider call fails, are skipped.
    Transcripts shorter than ``min_length`` are replaced with a placeholder
    but still count towards the target.
    """

    def __init__(
        self,
        subtitle_client: BaseSubtitleClient,
        reconstructor: Optional[SubtitleReconstructor] = None,
        target: int = 3,
        min_length: int = 100,
        logger: Optional[logging.Logger] = None,
    ):
        self.subtitle_client = subtitle_client
        self.reconstructor = reconstructor or SubtitleReconstructor()
        self.target = target
        self.min_length = min_length
        self.logger = logger or logging.getLogger(self.__class__.__name__)

    @staticmethod
    def placeholder(length: int) -> str:
        return f"Subtitles extracted ({length} chars - too short to analyse)"

    async def collect(self, videos: Sequence[SelectedVideo]) -> List[VideoTranscript]:
        transcripts: List[VideoTranscript] = []
        for position, video in enumerate(videos, start=1):
            if len(transcripts) >= self.target:
                break
            try:
                tracks = await self.subtitle_client.extract_subtitles(video.video_id)
            except Exception:
                self.logger.exception(f"[{position}] Subtitle extraction failed for '{video.title}'; trying next")
                continue
            if not tracks:
                self.logger.info(f"[{position}] No subtitles for '{video.title}'; trying next")
                continue

            text = self.reconstructor.reconstruct(tracks[0].text)
            if len(text) < self.min_length:
                text = self.placeholder(len(text))

            transcripts.append(VideoTranscript(**video.model_dump(), transcript=text))
            self.logger.info(
                f"[{position}] Transcript collected for '{video.title}' ({len(transcripts)}/{self.target})"
            )

        if len(transcripts) < self.target:
            self.logger.warning(f"Only {len(transcripts)} of {self.target} transcripts could be collected")
        return transcripts
