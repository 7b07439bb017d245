from prometheus_client import Counter, Histogram, Gauge, CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response
from fastapi import APIRouter


REQUEST_LATENCY_MS = Histogram(
    "gallery_request_latency_ms",
    "Latency of /api media requests in milliseconds",
    buckets=(5, 10, 25, 50, 100, 200, 400, 800, 1600, 3200),
    labelnames=["kind"],
)
CATALOG_CACHE_HITS = Counter("gallery_catalog_cache_hits_total", "Catalog listing cache hits")
CATALOG_CACHE_MISSES = Counter("gallery_catalog_cache_misses_total", "Catalog listing cache misses")
ADAPTER_ERRORS = Counter("gallery_adapter_errors_total", "Adapter error count", ["adapter"])

# How often pages had to be topped up, and by how much
FALLBACK_REQUESTS = Counter(
    "gallery_fallback_requests_total",
    "Aggregated pages that needed fallback items",
    ["kind"],
)
FALLBACK_ITEMS = Counter(
    "gallery_fallback_items_total",
    "Fallback items requested from the media provider",
    ["kind"],
)
LOCAL_ITEMS = Counter(
    "gallery_local_items_total",
    "Catalog items served from object storage",
    ["kind"],
)

# Build info gauge (set once at startup)
GALLERY_BUILD_INFO = Gauge(
    "gallery_build_info",
    "Build info tagged with version, sha, env",
    labelnames=["version", "sha", "env"],
)

# Total API errors (incremented on 5xx)
GALLERY_REQUEST_ERRORS = Counter(
    "gallery_request_errors_total",
    "Total API errors",
    ["route"],
)


router = APIRouter()


@router.get("/metrics")
async def metrics():
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
