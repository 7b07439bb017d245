from __future__ import annotations
from datetime import datetime, timezone
from fastapi import APIRouter, Depends
from pydantic import BaseModel

import logging
from ..errors import StorageUnavailable
from ..providers.storage import MinioCatalog
from ..settings import settings
from .deps import get_catalog

router = APIRouter(tags=["health"])
logger = logging.getLogger(__name__)


class Health(BaseModel):
    status: str
    time_utc: str
    checks: dict
    version: str | None = None
    sha: str | None = None


async def _checks(catalog: MinioCatalog) -> dict[str, dict]:
    checks: dict[str, dict] = {}

    # Bucket reachable and present
    try:
        exists = await catalog.ping()
        checks["storage"] = {"ok": exists, "bucket": catalog.bucket}
    except StorageUnavailable as e:
        checks["storage"] = {"ok": False, "bucket": catalog.bucket, "error": str(e.__cause__ or e)}

    # Fallback provider is only probed for configuration; a live call would spend quota
    checks["provider"] = {"ok": bool(settings.pexels_api_key), "configured": bool(settings.pexels_api_key)}

    checks["app"] = {"ok": True}
    return checks


@router.get("/healthz", response_model=Health)
async def healthz(catalog: MinioCatalog = Depends(get_catalog)):
    checks = await _checks(catalog)
    overall = "ok" if all(x.get("ok") for x in checks.values()) else "degraded"
    resp = Health(status=overall, time_utc=datetime.now(timezone.utc).isoformat(), checks=checks,
                  version=settings.app_version, sha=settings.git_sha)
    if resp.status != "ok":
        logger.warning("healthz degraded", extra={"checks": checks})
    return resp


@router.get("/readyz", response_model=Health)
async def readyz(catalog: MinioCatalog = Depends(get_catalog)):
    checks = await _checks(catalog)
    # Storage is required to serve anything; a missing provider key only breaks top-ups
    overall = "ok" if checks["storage"]["ok"] else "degraded"
    return Health(status=overall, time_utc=datetime.now(timezone.utc).isoformat(), checks=checks,
                  version=settings.app_version, sha=settings.git_sha)
