from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, List

import urllib3
from minio import Minio
from minio.error import MinioException

from .. import cache
from ..errors import StorageUnavailable
from ..metrics import ADAPTER_ERRORS
from ..schemas import MediaItem
from ..settings import settings
from .types import CatalogItem

logger = logging.getLogger(__name__)

_EPOCH = datetime.fromtimestamp(0, timezone.utc)
_minio_client: Minio | None = None


def get_minio_client() -> Minio:
    global _minio_client
    if _minio_client is None:
        timeout = float(settings.storage_timeout_s)
        # No urllib3 retries: a failed listing surfaces immediately
        http = urllib3.PoolManager(
            timeout=urllib3.Timeout(connect=timeout, read=timeout),
            retries=urllib3.Retry(total=0),
        )
        _minio_client = Minio(
            endpoint=settings.minio_endpoint,
            access_key=settings.minio_access_key,
            secret_key=settings.minio_secret_key,
            secure=settings.minio_secure,
            region=settings.minio_region,
            http_client=http,
        )
    return _minio_client


def object_url(base_url: str, key: str) -> str:
    return f"{base_url.rstrip('/')}/{key.lstrip('/')}"


def to_media_item(item: CatalogItem, base_url: str) -> MediaItem:
    return MediaItem(key=item.key, url=object_url(base_url, item.key), last_modified=item.last_modified, size=item.size)


class MinioCatalog:
    """Lists the curated catalog from an S3-compatible bucket."""

    name = "storage"

    def __init__(self, client: Any, bucket: str):
        self.client = client
        self.bucket = bucket

    def _list_sync(self, prefix: str) -> List[CatalogItem]:
        out: List[CatalogItem] = []
        for obj in self.client.list_objects(bucket_name=self.bucket, prefix=prefix, recursive=True):
            key = obj.object_name or ""
            # folder markers are not media
            if getattr(obj, "is_dir", False) or not key or key.endswith("/"):
                continue
            out.append(CatalogItem(key=key, last_modified=obj.last_modified or _EPOCH, size=max(0, int(obj.size or 0))))
        return out

    async def list(self, prefix: str) -> List[CatalogItem]:
        cached = cache.get(prefix)
        if cached is not None:
            return cached
        try:
            items = await asyncio.to_thread(self._list_sync, prefix)
        except (MinioException, urllib3.exceptions.HTTPError, OSError) as e:
            ADAPTER_ERRORS.labels(adapter=self.name).inc()
            logger.warning("catalog_list_failed", extra={"bucket": self.bucket, "prefix": prefix, "error": str(e)})
            raise StorageUnavailable(f"listing {self.bucket}/{prefix} failed") from e
        cache.set(prefix, items)
        logger.debug("catalog_listed", extra={"prefix": prefix, "count": len(items)})
        return items

    async def ping(self) -> bool:
        try:
            return bool(await asyncio.to_thread(self.client.bucket_exists, bucket_name=self.bucket))
        except (MinioException, urllib3.exceptions.HTTPError, OSError) as e:
            raise StorageUnavailable(f"bucket {self.bucket} unreachable") from e
