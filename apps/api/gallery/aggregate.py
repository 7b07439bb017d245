"""Hybrid search: fuzzy-matched catalog pages topped up from the fallback provider.

The pipeline is linear and request-scoped::

    list catalog -> match (only with query text) -> plan -> fallback (shortfall > 0) -> assemble

Listing and fallback never run concurrently because the size of the fallback
request depends on the local match result.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from . import matching
from .assembler import assemble
from .metrics import FALLBACK_ITEMS, FALLBACK_REQUESTS, LOCAL_ITEMS
from .planner import plan
from .providers.storage import to_media_item
from .providers.types import CatalogLister, MediaKind, MediaSource
from .schemas import MediaItem, SearchResponse

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_PER_PAGE = 20


@dataclass(frozen=True)
class SearchQuery:
    text: str = ""
    page: int = DEFAULT_PAGE
    per_page: int = DEFAULT_PER_PAGE


def _positive_int(raw: Any, default: int) -> int:
    if raw is None:
        return default
    try:
        value = int(str(raw).strip())
    except ValueError:
        logger.debug("invalid_query_param", extra={"value": str(raw), "default": default})
        return default
    return value if value >= 1 else default


def parse_query(text: str | None = None, page: Any = None, per_page: Any = None,
                default_per_page: int = DEFAULT_PER_PAGE) -> SearchQuery:
    """Build a query from raw request values; bad page numbers fall back to defaults."""
    return SearchQuery(
        text=(text or "").strip(),
        page=_positive_int(page, DEFAULT_PAGE),
        per_page=_positive_int(per_page, default_per_page),
    )


class Gallery:
    def __init__(self, catalog: CatalogLister, fallbacks: Mapping[MediaKind, MediaSource],
                 prefixes: Mapping[MediaKind, str], base_url: str,
                 threshold: float = matching.DEFAULT_THRESHOLD):
        self.catalog = catalog
        self.fallbacks = fallbacks
        self.prefixes = prefixes
        self.base_url = base_url
        self.threshold = threshold

    async def _aggregate(self, kind: MediaKind, prefix: str, query: SearchQuery) -> SearchResponse:
        items = await self.catalog.list(prefix)
        matched = matching.match(query.text, items, self.threshold) if query.text else items
        page_plan = plan(matched, query.page, query.per_page)
        fallback: list[MediaItem] = []
        if page_plan.shortfall > 0:
            FALLBACK_REQUESTS.labels(kind=kind.value).inc()
            FALLBACK_ITEMS.labels(kind=kind.value).inc(page_plan.shortfall)
            fallback = await self.fallbacks[kind].search(query.text, page_plan.shortfall)
        LOCAL_ITEMS.labels(kind=kind.value).inc(len(page_plan.local_slice))
        logger.info("aggregate", extra={
            "kind": kind.value, "prefix": prefix, "query": query.text, "page": query.page,
            "per_page": query.per_page, "catalog": len(items), "matched": len(matched),
            "local": len(page_plan.local_slice), "shortfall": page_plan.shortfall,
        })
        return assemble(matched, page_plan.local_slice, fallback, self.base_url)

    async def search(self, kind: MediaKind, query: SearchQuery) -> SearchResponse:
        return await self._aggregate(kind, self.prefixes[kind], query)

    async def curated(self, kind: MediaKind, page: int = DEFAULT_PAGE, per_page: int = DEFAULT_PER_PAGE) -> SearchResponse:
        """Whole catalog for a kind, no fuzzy step (curated photos, popular videos, featured collections)."""
        return await self._aggregate(kind, self.prefixes[kind], SearchQuery("", page, per_page))

    async def collection(self, collection_id: str, page: int = DEFAULT_PAGE,
                         per_page: int = DEFAULT_PER_PAGE) -> SearchResponse:
        prefix = f"{self.prefixes[MediaKind.collections]}{collection_id.strip('/')}/"
        return await self._aggregate(MediaKind.collections, prefix, SearchQuery("", page, per_page))

    async def detail(self, kind: MediaKind, item_id: str) -> MediaItem | None:
        for item in await self.catalog.list(self.prefixes[kind]):
            if item.key == item_id or item.key.rsplit("/", 1)[-1] == item_id:
                return to_media_item(item, self.base_url)
        return await self.fallbacks[kind].detail(item_id)
