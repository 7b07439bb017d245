from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

import httpx

from ..errors import ProviderUnavailable
from ..metrics import ADAPTER_ERRORS
from ..schemas import MediaItem
from .types import MediaKind

logger = logging.getLogger(__name__)

# kind -> (search path, detail path template, list field in search payload)
_ENDPOINTS: Dict[MediaKind, tuple[str, str, str]] = {
    MediaKind.photos: ("v1/search", "v1/photos/{id}", "photos"),
    MediaKind.videos: ("videos/search", "videos/videos/{id}", "videos"),
    # Pexels collections hold mixed media; top-ups come from photo search
    MediaKind.collections: ("v1/search", "v1/photos/{id}", "photos"),
}


def effective_query(base_term: str, user_query: str | None) -> str:
    user_query = (user_query or "").strip()
    if not user_query:
        return base_term
    return f"{base_term} {user_query}"


def _original_url(raw: Dict[str, Any]) -> str:
    src = raw.get("src")
    if isinstance(src, dict) and src.get("original"):
        return str(src["original"])
    files = [f for f in raw.get("video_files") or [] if isinstance(f, dict) and f.get("link")]
    if files:
        best = max(files, key=lambda f: f.get("width") or 0)
        return str(best["link"])
    return str(raw.get("url") or "")


def to_media_item(raw: Dict[str, Any], now: datetime | None = None) -> MediaItem:
    """Map a Pexels photo or video record to the canonical item shape.

    Pexels exposes neither a modification time nor a byte size, so the
    timestamp is the fetch time and size is always 0.
    """
    return MediaItem(
        key=str(raw.get("id")),
        url=_original_url(raw),
        last_modified=now or datetime.now(timezone.utc),
        size=0,
    )


class PexelsClient:
    name = "pexels"

    def __init__(self, api_key: str | None, base_url: str = "https://api.pexels.com", timeout: float = 10.0,
                 transport: httpx.AsyncBaseTransport | None = None):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/") + "/"
        self.timeout = timeout
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": self.api_key} if self.api_key else {}

    async def _get(self, path: str, params: Dict[str, Any] | None = None) -> httpx.Response:
        if not self.api_key:
            ADAPTER_ERRORS.labels(adapter=self.name).inc()
            raise ProviderUnavailable("PEXELS_API_KEY is not configured")
        try:
            async with httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout,
                                         headers=self._headers(), transport=self._transport) as client:
                return await client.get(path, params=params)
        except httpx.HTTPError as e:
            ADAPTER_ERRORS.labels(adapter=self.name).inc()
            logger.warning("pexels_transport_error", extra={"path": path, "error": str(e)})
            raise ProviderUnavailable(f"pexels request failed: {e}") from e

    @staticmethod
    def _json(r: httpx.Response) -> Dict[str, Any]:
        try:
            data = r.json()
        except ValueError as e:
            ADAPTER_ERRORS.labels(adapter="pexels").inc()
            raise ProviderUnavailable("pexels returned a non-JSON body") from e
        if not isinstance(data, dict):
            ADAPTER_ERRORS.labels(adapter="pexels").inc()
            raise ProviderUnavailable("pexels returned an unexpected payload")
        return data

    async def search(self, kind: MediaKind, query: str, count: int, page: int = 1) -> List[Dict[str, Any]]:
        path, _, field = _ENDPOINTS[kind]
        r = await self._get(path, params={"query": query, "per_page": count, "page": page})
        if not r.is_success:
            ADAPTER_ERRORS.labels(adapter=self.name).inc()
            logger.warning("pexels_search_failed", extra={"status": r.status_code, "kind": kind.value})
            raise ProviderUnavailable(f"pexels search returned HTTP {r.status_code}")
        items = self._json(r).get(field) or []
        return [i for i in items if isinstance(i, dict)]

    async def get(self, kind: MediaKind, item_id: str) -> Dict[str, Any] | None:
        # Pexels ids are numeric; anything else cannot exist upstream
        if not item_id.isdigit():
            return None
        _, template, _ = _ENDPOINTS[kind]
        r = await self._get(template.format(id=item_id))
        if r.status_code == 404:
            return None
        if not r.is_success:
            ADAPTER_ERRORS.labels(adapter=self.name).inc()
            raise ProviderUnavailable(f"pexels detail returned HTTP {r.status_code}")
        return self._json(r)


async def fetch_fallback(client: PexelsClient, kind: MediaKind, base_term: str, user_query: str | None,
                         count: int) -> List[MediaItem]:
    if count <= 0:
        return []
    q = effective_query(base_term, user_query)
    raw = await client.search(kind, q, count, page=1)
    if len(raw) < count:
        # a page is either full or failed
        ADAPTER_ERRORS.labels(adapter=client.name).inc()
        logger.warning("pexels_fallback_short", extra={"query": q, "asked": count, "got": len(raw)})
        raise ProviderUnavailable(f"pexels returned {len(raw)} of {count} requested items")
    now = datetime.now(timezone.utc)
    logger.debug("pexels_fallback", extra={"query": q, "asked": count, "got": len(raw)})
    return [to_media_item(r, now) for r in raw[:count]]


class PexelsFallback:
    """Fallback media source for one kind, always anchored on the base term."""

    name = "pexels"

    def __init__(self, client: PexelsClient, kind: MediaKind, base_term: str):
        self.client = client
        self.kind = kind
        self.base_term = base_term

    async def search(self, q: str | None, limit: int = 20) -> List[MediaItem]:
        return await fetch_fallback(self.client, self.kind, self.base_term, q, limit)

    async def detail(self, item_id: str) -> MediaItem | None:
        raw = await self.client.get(self.kind, item_id)
        return to_media_item(raw) if raw else None
