from __future__ import annotations

from datetime import datetime
from typing import List
from pydantic import BaseModel, ConfigDict, Field


class MediaItem(BaseModel):
    """Canonical item shape shared by catalog and fallback results."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    key: str
    url: str
    last_modified: datetime = Field(alias="lastModified")
    size: int = 0


class SearchResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Size of the local matched corpus, not of the returned page
    total_results: int = Field(alias="totalResults")
    items: List[MediaItem] = Field(default_factory=list)
