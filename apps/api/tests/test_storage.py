import asyncio
from types import SimpleNamespace

import pytest
import urllib3

from gallery import cache
from gallery.errors import StorageUnavailable
from gallery.providers.storage import MinioCatalog, object_url
from gallery.providers.types import CatalogItem
from gallery.settings import settings

from conftest import T0


class StubMinio:
    def __init__(self, objects=None, error=None):
        self.objects = objects or []
        self.error = error
        self.calls = []

    def list_objects(self, bucket_name, prefix=None, recursive=False):
        self.calls.append((bucket_name, prefix, recursive))
        if self.error:
            raise self.error
        return iter([o for o in self.objects if o.object_name.startswith(prefix or "")])

    def bucket_exists(self, bucket_name):
        if self.error:
            raise self.error
        return bucket_name == "gallery"


def obj(name, size=10, is_dir=False, last_modified=T0):
    return SimpleNamespace(object_name=name, size=size, is_dir=is_dir, last_modified=last_modified)


def test_lists_objects_under_prefix(monkeypatch):
    monkeypatch.setattr(settings, "catalog_cache_ttl", 0)
    stub = StubMinio([obj("photos/"), obj("photos/a.jpg", 5), obj("photos/sub/", is_dir=True),
                      obj("photos/b.jpg", 7), obj("videos/c.mp4")])
    out = asyncio.run(MinioCatalog(stub, "gallery").list("photos/"))
    assert [i.key for i in out] == ["photos/a.jpg", "photos/b.jpg"]
    assert [i.size for i in out] == [5, 7]
    assert stub.calls == [("gallery", "photos/", True)]


def test_missing_timestamp_defaults_to_epoch(monkeypatch):
    monkeypatch.setattr(settings, "catalog_cache_ttl", 0)
    stub = StubMinio([obj("photos/a.jpg", last_modified=None)])
    out = asyncio.run(MinioCatalog(stub, "gallery").list("photos/"))
    assert out[0].last_modified.year == 1970


def test_transport_failure_is_storage_unavailable(monkeypatch):
    monkeypatch.setattr(settings, "catalog_cache_ttl", 0)
    stub = StubMinio(error=urllib3.exceptions.ProtocolError("connection reset"))
    with pytest.raises(StorageUnavailable):
        asyncio.run(MinioCatalog(stub, "gallery").list("photos/"))


def test_listing_is_cached_per_prefix(monkeypatch):
    monkeypatch.setattr(settings, "catalog_cache_ttl", 60)
    stub = StubMinio([obj("photos/a.jpg"), obj("videos/b.mp4")])
    catalog = MinioCatalog(stub, "gallery")
    asyncio.run(catalog.list("photos/"))
    asyncio.run(catalog.list("photos/"))
    asyncio.run(catalog.list("videos/"))
    assert [c[1] for c in stub.calls] == ["photos/", "videos/"]


def test_ping(monkeypatch):
    assert asyncio.run(MinioCatalog(StubMinio(), "gallery").ping()) is True
    assert asyncio.run(MinioCatalog(StubMinio(), "other").ping()) is False
    with pytest.raises(StorageUnavailable):
        asyncio.run(MinioCatalog(StubMinio(error=OSError("down")), "gallery").ping())


def test_object_url():
    assert object_url("http://localhost:9000/gallery/", "photos/a.jpg") == "http://localhost:9000/gallery/photos/a.jpg"


def test_cached_listing_expires_after_ttl(monkeypatch):
    monkeypatch.setattr(settings, "catalog_cache_ttl", 60)
    clock = {"now": 1000.0}
    monkeypatch.setattr(cache, "_now", lambda: clock["now"])
    stub = StubMinio([obj("photos/a.jpg")])
    catalog = MinioCatalog(stub, "gallery")
    asyncio.run(catalog.list("photos/"))
    clock["now"] += 30
    asyncio.run(catalog.list("photos/"))
    assert len(stub.calls) == 1
    clock["now"] += 31
    asyncio.run(catalog.list("photos/"))
    assert len(stub.calls) == 2


def test_cache_evicts_least_recently_used(monkeypatch):
    monkeypatch.setattr(settings, "catalog_cache_ttl", 60)
    monkeypatch.setattr(settings, "catalog_cache_max", 2)
    listing = [CatalogItem(key="a.jpg", last_modified=T0, size=1)]
    cache.set("photos/", listing)
    cache.set("videos/", listing)
    assert cache.get("photos/") == listing
    cache.set("collections/", listing)
    assert cache.get("videos/") is None
    assert cache.get("photos/") == listing
    assert cache.get("collections/") == listing


class BrokenRedis:
    def __init__(self, raw):
        self.raw = raw

    def get(self, key):
        return self.raw


@pytest.mark.parametrize("raw", [b"not json", b'[{"key": "photos/a.jpg"}]', b'[{"key": "a", "last_modified": "yesterday", "size": 1}]'])
def test_unreadable_redis_entry_is_a_miss(monkeypatch, raw):
    monkeypatch.setattr(settings, "catalog_cache_ttl", 60)
    monkeypatch.setattr(cache, "_R", BrokenRedis(raw))
    assert cache.get("photos/") is None
