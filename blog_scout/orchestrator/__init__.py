"""Orchestration for Blog Scout.

``CollectionOrchestrator`` runs the seven collection stages in order, tracks
their progress, and assembles the final report.
"""

from .progress import STAGE_NAMES, StageTracker
from .workflow import CollectionOrchestrator

__all__ = ["CollectionOrchestrator", "StageTracker", "STAGE_NAMES"]
