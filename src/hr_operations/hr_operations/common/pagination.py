from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from ..core.constants import DEFAULT_PAGE, DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class PageRequest:
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_PAGE_LIMIT

    @classmethod
    def from_args(cls, page: Optional[str], limit: Optional[str]) -> "PageRequest":
        try:
            p = int(page) if page else DEFAULT_PAGE
            lim = int(limit) if limit else DEFAULT_PAGE_LIMIT
        except ValueError:
            raise ValidationError("page and limit must be integers")
        if p < 1 or lim < 1:
            raise ValidationError("page and limit must be >= 1")
        return cls(page=p, limit=min(lim, MAX_PAGE_LIMIT))

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def paginated(items: Sequence[Any], *, total: int, page: PageRequest) -> dict:
    """List response shape shared by every list endpoint."""
    return {
        "data": list(items),
        "meta": {
            "total": int(total),
            "page": page.page,
            "limit": page.limit,
            "totalPages": math.ceil(int(total) / page.limit) if page.limit else 0,
        },
    }
