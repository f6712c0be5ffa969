"""Blog acquisition with a keyword fallback.

The acquirer asks the blog search provider for ``target_count`` posts using
the search keyword. If that comes up short and the writer's main keyword is
different, the deficit is requested with the main keyword and ranks continue
where the first batch stopped. Identical keywords never trigger the second
call, since it would only repeat the first query.

Provider failures are logged and counted as zero results for that call, so
this stage always hands *some* list (possibly empty) to the next one.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from ..schemas.models import CandidateBlog
from ..utils.search_client import BaseBlogSearchClient


class BlogAcquirer:
    """Collects ranked blog candidates for a request."""

    def __init__(self, search_client: BaseBlogSearchClient, logger: Optional[logging.Logger] = None):
        self.search_client = search_client
        self.logger = logger or logging.getLogger(self.__class__.__name__)

    async def acquire(
        self,
        search_keyword: str,
        main_keyword: Optional[str],
        target_count: int,
        content_type: Optional[str] = None,
    ) -> List[CandidateBlog]:
        """Return up to ``target_count`` candidates ranked 1..n."""
        main_keyword = main_keyword or search_keyword
        blogs = await self._search_ranked(search_keyword, target_count, 1, content_type)
        self.logger.info(f"Search keyword '{search_keyword}' returned {len(blogs)} blogs")

        if len(blogs) >= target_count:
            return blogs

        if main_keyword == search_keyword:
            self.logger.info("Main keyword equals search keyword; skipping the fallback search")
            return blogs

        remaining = target_count - len(blogs)
        self.logger.info(f"Requesting {remaining} more blogs with main keyword '{main_keyword}'")
        extra = await self._search_ranked(main_keyword, remaining, len(blogs) + 1, content_type)
        self.logger.info(f"Main keyword '{main_keyword}' added {len(extra)} blogs")
        return blogs + extra

    async def _search_ranked(
        self,
        query: str,
        count: int,
        start_rank: int,
        content_type: Optional[str],
    ) -> List[CandidateBlog]:
        try:
            items = await self.search_client.search_blogs(query, count, start_rank, content_type)
        except Exception:
            self.logger.exception(f"Blog search failed for '{query}'; treating as no results")
            return []

        # Ranks are re-assigned here so they stay contiguous whatever the provider did.
        return [
            item.model_copy(update={"rank": start_rank + i})
            for i, item in enumerate((items or [])[:count])
        ]
