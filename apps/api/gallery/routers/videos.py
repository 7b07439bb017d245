from fastapi import APIRouter, Depends, HTTPException, Query, Request

from ..aggregate import Gallery
from ..providers.types import MediaKind
from ..schemas import MediaItem, SearchResponse
from .deps import get_gallery, read_query, until_disconnect

router = APIRouter(prefix="/api/videos", tags=["videos"])


@router.get("/search", response_model=SearchResponse)
async def search_videos(request: Request, query: str | None = Query(default=None), page: str | None = None,
                        per_page: str | None = None, perPage: str | None = Query(default=None),
                        gallery: Gallery = Depends(get_gallery)):
    q = read_query(query, page, per_page, perPage)
    return await until_disconnect(request, gallery.search(MediaKind.videos, q))


@router.get("/popular", response_model=SearchResponse)
async def popular_videos(request: Request, page: str | None = None, per_page: str | None = None,
                         perPage: str | None = Query(default=None), gallery: Gallery = Depends(get_gallery)):
    # Fallback goes through provider search with the base term, not its popular endpoint
    q = read_query(None, page, per_page, perPage)
    return await until_disconnect(request, gallery.curated(MediaKind.videos, q.page, q.per_page))


@router.get("/videos/{video_id}", response_model=MediaItem)
async def get_video(request: Request, video_id: str, gallery: Gallery = Depends(get_gallery)):
    item = await until_disconnect(request, gallery.detail(MediaKind.videos, video_id))
    if item is None:
        raise HTTPException(status_code=404, detail="Video not found")
    return item
