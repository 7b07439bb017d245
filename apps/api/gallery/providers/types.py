from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Protocol

from ..schemas import MediaItem


class MediaKind(str, Enum):
    photos = "photos"
    videos = "videos"
    collections = "collections"


@dataclass(frozen=True)
class CatalogItem:
    key: str
    last_modified: datetime
    size: int = 0


class CatalogLister(Protocol):
    async def list(self, prefix: str) -> List[CatalogItem]: ...


class MediaSource(Protocol):
    """Anything that can produce up to `limit` canonical items for a query."""

    name: str

    async def search(self, q: str | None, limit: int = 20) -> List[MediaItem]: ...

    async def detail(self, item_id: str) -> MediaItem | None: ...
