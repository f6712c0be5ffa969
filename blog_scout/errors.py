"""Exception types shared by the collection pipeline.

Known failure modes are raised as :class:`CollectionError` subclasses. Each
one may carry the safe default value produced by the component that failed,
so the orchestrator can mark the stage as errored and keep going with that
value instead of aborting the run.
"""

from __future__ import annotations

from typing import Any


class CollectionError(Exception):
    """Base class for degradable pipeline failures."""

    def __init__(self, message: str, fallback: Any = None):
        super().__init__(message)
        self.fallback = fallback


class ProviderError(CollectionError):
    """An external search, crawl, subtitle or reasoning call failed."""


class ParseError(CollectionError):
    """A reasoning-service response did not contain usable JSON."""


class StageTransitionError(RuntimeError):
    """A stage was asked to move backwards through its lifecycle."""
