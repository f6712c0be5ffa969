"""Collection components for Blog Scout.

Each component owns one step of the collection workflow:

- ``BlogAcquirer`` gathers ranked competitor blog posts, topping up from the
  main keyword when the search keyword falls short.
- ``VideoSelector`` keeps the strongest videos by relative evaluation.
- ``SelectionAdviser`` asks the reasoning service which candidates fit the
  target title, with a deterministic fallback.
- ``SubtitleReconstructor`` and ``TranscriptCollector`` turn subtitles into
  usable transcripts.
- ``ContentAnalyzer`` produces the blog and video analyses.

Components degrade instead of failing wherever a partial result is still
useful. See individual modules for details.
"""

from .blog_acquirer import BlogAcquirer
from .content_analyzer import ContentAnalyzer
from .selection_adviser import SelectionAdviser
from .subtitles import SubtitleReconstructor, TranscriptCollector
from .video_selector import VideoSelector

__all__ = [
    "BlogAcquirer",
    "VideoSelector",
    "SelectionAdviser",
    "SubtitleReconstructor",
    "TranscriptCollector",
    "ContentAnalyzer",
]
