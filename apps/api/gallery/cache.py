from __future__ import annotations

import json
import logging
import time
from datetime import datetime
from typing import List, Tuple
from collections import OrderedDict

from redis import Redis
from redis.exceptions import RedisError

from .settings import settings
from .metrics import CATALOG_CACHE_HITS, CATALOG_CACHE_MISSES
from .providers.types import CatalogItem

logger = logging.getLogger(__name__)

# Simple in-process LRU cache of catalog listings, keyed by storage prefix
_CACHE: OrderedDict[str, Tuple[float, List[CatalogItem]]] = OrderedDict()
_R: Redis | None = None


def _now() -> float:
    return time.time()


def _ttl() -> float:
    return float(settings.catalog_cache_ttl)


def enabled() -> bool:
    return _ttl() > 0


def _redis() -> Redis | None:
    global _R
    if _R is not None:
        return _R
    url = settings.resolved_redis_url()
    if not url:
        return None
    _R = Redis.from_url(url)
    return _R


def _redis_key(prefix: str) -> str:
    return f"gallery:catalog:{prefix}"


def _dump(items: List[CatalogItem]) -> str:
    return json.dumps([{"key": i.key, "last_modified": i.last_modified.isoformat(), "size": i.size} for i in items])


def _load(raw: bytes | str) -> List[CatalogItem]:
    return [
        CatalogItem(key=d["key"], last_modified=datetime.fromisoformat(d["last_modified"]), size=int(d["size"]))
        for d in json.loads(raw)
    ]


def get(prefix: str) -> List[CatalogItem] | None:
    if not enabled():
        return None
    r = _redis()
    if r is not None:
        try:
            raw = r.get(_redis_key(prefix))
            if not raw:
                # miss on redis
                CATALOG_CACHE_MISSES.inc()
                return None
            items = _load(raw)
        except RedisError as e:
            logger.warning("catalog_cache_redis_error", extra={"error": str(e)})
        except (ValueError, KeyError, TypeError) as e:
            # unreadable entry counts as a miss; the next listing overwrites it
            logger.warning("catalog_cache_bad_entry", extra={"prefix": prefix, "error": str(e)})
            CATALOG_CACHE_MISSES.inc()
            return None
        else:
            CATALOG_CACHE_HITS.inc()
            return items
    item = _CACHE.get(prefix)
    if not item:
        CATALOG_CACHE_MISSES.inc()
        return None
    expires, value = item
    if _now() > expires:
        _CACHE.pop(prefix, None)
        CATALOG_CACHE_MISSES.inc()
        return None
    # mark as recently used
    _CACHE.move_to_end(prefix)
    CATALOG_CACHE_HITS.inc()
    return list(value)


def set(prefix: str, items: List[CatalogItem], ttl: float | None = None):
    if not enabled():
        return
    ttl = ttl or _ttl()
    r = _redis()
    if r is not None:
        try:
            r.setex(_redis_key(prefix), max(1, int(ttl)), _dump(items))
            return
        except RedisError as e:
            logger.warning("catalog_cache_redis_error", extra={"error": str(e)})
    _CACHE[prefix] = (_now() + ttl, list(items))
    _CACHE.move_to_end(prefix)
    # evict expired entries first
    for k, (exp, _) in list(_CACHE.items()):
        if _now() > exp:
            _CACHE.pop(k, None)
    # enforce capacity
    while len(_CACHE) > settings.catalog_cache_max:
        _CACHE.popitem(last=False)


def clear():
    _CACHE.clear()
