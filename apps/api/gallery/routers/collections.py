from fastapi import APIRouter, Depends, Query, Request

from ..aggregate import Gallery
from ..providers.types import MediaKind
from ..schemas import SearchResponse
from .deps import get_gallery, read_query, until_disconnect

router = APIRouter(prefix="/api/collections", tags=["collections"])


@router.get("/featured", response_model=SearchResponse)
async def featured_collections(request: Request, page: str | None = None, per_page: str | None = None,
                               perPage: str | None = Query(default=None), gallery: Gallery = Depends(get_gallery)):
    q = read_query(None, page, per_page, perPage)
    return await until_disconnect(request, gallery.curated(MediaKind.collections, q.page, q.per_page))


@router.get("/{collection_id}", response_model=SearchResponse)
async def collection_media(request: Request, collection_id: str, page: str | None = None,
                           per_page: str | None = None, perPage: str | None = Query(default=None),
                           gallery: Gallery = Depends(get_gallery)):
    q = read_query(None, page, per_page, perPage)
    return await until_disconnect(request, gallery.collection(collection_id, q.page, q.per_page))
