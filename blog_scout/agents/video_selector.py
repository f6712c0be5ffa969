"""Relative evaluation of the scored video pool.

Instead of a fixed score cut-off the selector keeps a share of the pool that
depends on its size N:

- ``N >= 15``: the top ``floor(0.7 * N)`` videos;
- ``10 <= N < 15``: exactly the top 10;
- ``N < 10``: every video, order preserved.

The thresholds come from :class:`~blog_scout.config.settings.CollectionSettings`.
"""

from __future__ import annotations

import logging
import math
from decimal import Decimal
from typing import List, Optional, Sequence

from ..config.settings import CollectionSettings
from ..errors import ProviderError
from ..schemas.models import CandidateVideo
from ..utils.video_client import BaseVideoSearchClient


class VideoSelector:
    """Fetches the prioritised video pool and narrows it."""

    def __init__(
        self,
        video_client: BaseVideoSearchClient,
        settings: Optional[CollectionSettings] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.video_client = video_client
        self.settings = settings or CollectionSettings()
        self.logger = logger or logging.getLogger(self.__class__.__name__)

    def select(self, candidates: Sequence[CandidateVideo]) -> List[CandidateVideo]:
        """Apply relative evaluation to ``candidates``.

        The pool is (re)sorted by descending priority; the sort is stable so
        ties keep provider order.
        """
        ranked = sorted(candidates, key=lambda video: video.priority, reverse=True)
        pool_size = len(ranked)
        s = self.settings

        if pool_size >= s.proportional_pool_threshold:
            # exact product: floor(0.7 * 90) is 63
            keep = math.floor(pool_size * Decimal(str(s.proportional_ratio)))
            self.logger.info(f"Relative evaluation: keeping top {keep} of {pool_size} videos")
        elif pool_size >= s.absolute_pool_threshold:
            keep = s.absolute_cap
            self.logger.info(f"Relative evaluation: keeping top {keep} of {pool_size} videos")
        else:
            keep = pool_size
            self.logger.info(f"Small pool ({pool_size} videos); keeping all of them")
        return ranked[:keep]

    async def collect(self, keyword: str, count: Optional[int] = None) -> List[CandidateVideo]:
        """Search the provider and return the relatively evaluated pool.

        Raises
        ------
        ProviderError
            If the provider call fails. The error carries an empty pool as
            its fallback.
        """
        count = count or self.settings.video_search_count
        try:
            candidates = await self.video_client.search_prioritized_videos(keyword, count)
        except Exception as exc:
            self.logger.exception(f"Video search failed for '{keyword}'")
            raise ProviderError(f"Video search failed: {exc}", fallback=[]) from exc

        if not candidates:
            self.logger.warning(f"Video search returned no results for '{keyword}'")
            return []
        return self.select(candidates)
