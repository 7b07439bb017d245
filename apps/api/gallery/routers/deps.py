from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, TypeVar

from fastapi import Request, Response

from ..aggregate import Gallery, SearchQuery, parse_query
from ..providers.pexels import PexelsClient, PexelsFallback
from ..providers.storage import MinioCatalog, get_minio_client
from ..providers.types import MediaKind
from ..settings import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Not a registered HTTP status; the client is gone and never sees it
CLIENT_CLOSED_REQUEST = 499


def get_catalog() -> MinioCatalog:
    return MinioCatalog(get_minio_client(), settings.minio_bucket)


def get_gallery() -> Gallery:
    client = PexelsClient(settings.pexels_api_key, settings.pexels_api_url, settings.provider_timeout_s)
    return Gallery(
        catalog=get_catalog(),
        fallbacks={k: PexelsFallback(client, k, settings.fallback_base_term) for k in MediaKind},
        prefixes={
            MediaKind.photos: settings.photos_prefix,
            MediaKind.videos: settings.videos_prefix,
            MediaKind.collections: settings.collections_prefix,
        },
        base_url=settings.resolved_storage_url(),
        threshold=settings.match_threshold,
    )


def read_query(query: str | None, page: str | None, per_page: str | None, per_page_alias: str | None) -> SearchQuery:
    return parse_query(query, page, per_page if per_page is not None else per_page_alias,
                       default_per_page=settings.default_per_page)


async def until_disconnect(request: Request, work: Awaitable[T], poll: float = 0.25) -> T | Response:
    """Run `work`, cancelling it when the client goes away before it finishes."""
    task = asyncio.ensure_future(work)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=poll)
            if done:
                return task.result()
            if await request.is_disconnected():
                logger.info("client_disconnected", extra={"path": request.url.path})
                task.cancel()
                await asyncio.gather(task, return_exceptions=True)
                return Response(status_code=CLIENT_CLOSED_REQUEST)
    finally:
        if not task.done():
            task.cancel()
