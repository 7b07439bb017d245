from datetime import datetime, timezone

import httpx
import pytest

from gallery import cache
from gallery.aggregate import Gallery
from gallery.providers.pexels import PexelsClient, PexelsFallback
from gallery.providers.types import CatalogItem, MediaKind
from gallery.schemas import MediaItem

BASE_URL = "https://media.example.test/gallery"
PREFIXES = {MediaKind.photos: "photos/", MediaKind.videos: "videos/", MediaKind.collections: "collections/"}
T0 = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def items(*keys, size=1024):
    return [CatalogItem(key=k, last_modified=T0, size=size) for k in keys]


class FakeCatalog:
    def __init__(self, listing=None, error=None):
        self.listing = listing or {}
        self.error = error
        self.bucket = "gallery"
        self.calls = []

    async def list(self, prefix):
        self.calls.append(prefix)
        if self.error:
            raise self.error
        return list(self.listing.get(prefix, []))

    async def ping(self):
        if self.error:
            raise self.error
        return True


class FakeFallback:
    name = "fake"

    def __init__(self, error=None, details=None):
        self.error = error
        self.details = details or {}
        self.calls = []

    async def search(self, q, limit=20):
        self.calls.append((q, limit))
        if self.error:
            raise self.error
        return [MediaItem(key=f"fb-{i}", url=f"https://fallback.test/{i}.jpg", last_modified=T0, size=0)
                for i in range(limit)]

    async def detail(self, item_id):
        return self.details.get(item_id)


class PexelsRecorder:
    """httpx MockTransport handler answering like the Pexels search/detail API."""

    def __init__(self, status=200, cap=None):
        self.status = status
        # Pexels never returns more than 80 items per page
        self.cap = cap
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status != 200:
            return httpx.Response(self.status, json={"error": "nope"})
        path = request.url.path
        if path.endswith("/search"):
            n = int(request.url.params.get("per_page", "15"))
            if self.cap is not None:
                n = min(n, self.cap)
            if path.startswith("/videos"):
                videos = [{"id": 900 + i, "url": f"https://www.pexels.com/video/{900 + i}/",
                           "video_files": [{"link": f"https://videos.pexels.test/{900 + i}-sd.mp4", "width": 640},
                                           {"link": f"https://videos.pexels.test/{900 + i}-hd.mp4", "width": 1920}]}
                          for i in range(n)]
                return httpx.Response(200, json={"page": 1, "per_page": n, "videos": videos})
            photos = [{"id": 100 + i, "src": {"original": f"https://images.pexels.test/{100 + i}.jpeg"}}
                      for i in range(n)]
            return httpx.Response(200, json={"page": 1, "per_page": n, "photos": photos})
        if path.endswith("/photos/42"):
            return httpx.Response(200, json={"id": 42, "src": {"original": "https://images.pexels.test/42.jpeg"}})
        return httpx.Response(404, json={"error": "Not Found"})


def pexels_client(recorder, api_key="test-key"):
    return PexelsClient(api_key, "https://api.pexels.com", timeout=5, transport=httpx.MockTransport(recorder))


def make_gallery(catalog, fallback=None, recorder=None, base_term="water"):
    if fallback is None:
        client = pexels_client(recorder or PexelsRecorder())
        fallbacks = {k: PexelsFallback(client, k, base_term) for k in MediaKind}
    else:
        fallbacks = {k: fallback for k in MediaKind}
    return Gallery(catalog=catalog, fallbacks=fallbacks, prefixes=PREFIXES, base_url=BASE_URL)


@pytest.fixture(autouse=True)
def _clean_cache():
    cache.clear()
    yield
    cache.clear()
