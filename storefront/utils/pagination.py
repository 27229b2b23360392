"""
Pagination helpers
"""
import math
from typing import Any, Dict, List, Optional, Tuple


def parse_pagination(
    page: Optional[int],
    limit: Optional[int],
    default_limit: int = 10,
    max_limit: int = 50
) -> Tuple[int, int, int]:
    """Clamp page/limit and return (page, limit, skip)"""
    page = max(1, page or 1)
    limit = min(max_limit, max(1, limit or default_limit))
    return page, limit, (page - 1) * limit


def page_envelope(items: List[Any], page: int, limit: int, total: int) -> Dict[str, Any]:
    total_pages = math.ceil(total / limit) if limit else 0
    return {
        "items": items,
        "page": page,
        "limit": limit,
        "total": total,
        "total_pages": total_pages,
        "has_next_page": page < total_pages,
        "has_prev_page": page > 1,
    }
