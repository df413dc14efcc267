"""
Pagination helpers shared by every list endpoint.
"""

import math
from typing import Dict


def get_offset(limit: int, page: int) -> int:
    return (max(page, 1) - 1) * limit


def get_pagination(total: int, limit: int, page: int) -> Dict[str, int]:
    """
    Pagination metadata for a page of `limit` rows.

    from/to are 1-based row positions; both are 0 when the page is empty.
    """
    last_page = max(math.ceil(total / limit), 1) if limit else 1
    offset = get_offset(limit, page)
    shown = max(min(limit, total - offset), 0)
    return {
        "total": total,
        "per_page": limit,
        "current_page": page,
        "last_page": last_page,
        "from": offset + 1 if shown else 0,
        "to": offset + shown,
    }
