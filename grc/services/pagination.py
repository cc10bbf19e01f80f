"""
Offset pagination shared by the evidence and third-party listings.
"""
import math
from dataclasses import dataclass, field
from typing import Any, List

from sqlalchemy.orm import Query


@dataclass
class Page:
    page: int
    limit: int
    total: int
    items: List[Any] = field(default_factory=list)

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def paginate(query: Query, page: int, limit: int) -> Page:
    """Run `query` for one page; the caller is responsible for ordering."""
    page = max(page, 1)
    limit = max(limit, 1)
    total = query.order_by(None).count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    return Page(page=page, limit=limit, total=total, items=items)
