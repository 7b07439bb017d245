from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence

from .providers.types import CatalogItem


@dataclass(frozen=True)
class PagePlan:
    local_slice: List[CatalogItem] = field(default_factory=list)
    shortfall: int = 0


def plan(matched: Sequence[CatalogItem], page: int, per_page: int) -> PagePlan:
    start = (page - 1) * per_page
    end = start + per_page
    local = list(matched[start:end])
    return PagePlan(local_slice=local, shortfall=max(0, per_page - len(local)))
