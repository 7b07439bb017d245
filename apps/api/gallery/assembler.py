from __future__ import annotations

from typing import Sequence

from .providers.storage import to_media_item
from .providers.types import CatalogItem
from .schemas import MediaItem, SearchResponse


def assemble(matched: Sequence[CatalogItem], local_slice: Sequence[CatalogItem],
             fallback_items: Sequence[MediaItem], base_url: str) -> SearchResponse:
    """Local items first, fallback appended; totalResults counts the local matches only."""
    items = [to_media_item(i, base_url) for i in local_slice]
    items.extend(fallback_items)
    return SearchResponse(total_results=len(matched), items=items)
