import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .errors import GalleryError
from .logging_setup import configure_logging
from .metrics import GALLERY_BUILD_INFO, router as metrics_router
from .middleware import RequestIdAndTimingMiddleware
from .routers import collections, health, photos, videos
from .settings import settings

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Media Gallery API", version=settings.app_version)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.origins(),
    allow_methods=["GET"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)
app.add_middleware(RequestIdAndTimingMiddleware)

app.include_router(photos.router)
app.include_router(videos.router)
app.include_router(collections.router)
app.include_router(health.router)
app.include_router(metrics_router)

GALLERY_BUILD_INFO.labels(version=app.version, sha=settings.git_sha or "unknown", env=settings.environment).set(1)


@app.exception_handler(GalleryError)
async def gallery_error_handler(request: Request, exc: GalleryError):
    # Whole request fails; no partial page is ever returned
    logger.error(
        "aggregate_failed",
        extra={"path": request.url.path, "error": type(exc).__name__, "cause": str(exc.__cause__ or exc)},
    )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.public_message})
