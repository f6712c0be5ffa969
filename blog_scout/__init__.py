"""
Blog Scout: Source Collection Engine for Blog Writing
=====================================================

This package gathers reference material for a blog post that is about to be
written: competitor blog posts from a search provider, ranked videos and their
transcripts, a relevance-filtered selection of both, and structured analyses
of the fetched content. Every run yields a single ``CollectionReport``.

Modules are organized by responsibility:

- ``agents``: the collection components (blog acquisition, video selection,
  relevance selection, subtitle reconstruction, content analysis).
- ``orchestrator``: the seven-stage workflow with progress tracking and
  report assembly.
- ``schemas``: Pydantic models for requests, candidates, analyses, progress
  and reports.
- ``utils``: provider clients (search, video, crawler, text generation),
  JSON extraction, logging, and slug creation.
- ``config``: helpers for loading YAML configuration files with environment
  variable placeholders.
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
