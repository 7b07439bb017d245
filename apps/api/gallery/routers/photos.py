from fastapi import APIRouter, Depends, HTTPException, Query, Request

from ..aggregate import Gallery
from ..providers.types import MediaKind
from ..schemas import MediaItem, SearchResponse
from .deps import get_gallery, read_query, until_disconnect

router = APIRouter(prefix="/api/photos", tags=["photos"])


@router.get("/search", response_model=SearchResponse)
async def search_photos(request: Request, query: str | None = Query(default=None), page: str | None = None,
                        per_page: str | None = None, perPage: str | None = Query(default=None),
                        gallery: Gallery = Depends(get_gallery)):
    q = read_query(query, page, per_page, perPage)
    return await until_disconnect(request, gallery.search(MediaKind.photos, q))


@router.get("/curated", response_model=SearchResponse)
async def curated_photos(request: Request, page: str | None = None, per_page: str | None = None,
                         perPage: str | None = Query(default=None), gallery: Gallery = Depends(get_gallery)):
    q = read_query(None, page, per_page, perPage)
    return await until_disconnect(request, gallery.curated(MediaKind.photos, q.page, q.per_page))


@router.get("/{photo_id}", response_model=MediaItem)
async def get_photo(request: Request, photo_id: str, gallery: Gallery = Depends(get_gallery)):
    item = await until_disconnect(request, gallery.detail(MediaKind.photos, photo_id))
    if item is None:
        raise HTTPException(status_code=404, detail="Photo not found")
    return item
