from __future__ import annotations

import math


def paginate(qs, page: int = 1, page_size: int = 10):
    """Slice ``qs`` and return ``(items, pagination)``."""
    total = qs.count()
    start = (page - 1) * page_size
    items = list(qs[start:start + page_size])
    return items, {
        'total': total,
        'page': page,
        'pageSize': page_size,
        'totalPages': math.ceil(total / page_size) if page_size else 0,
    }
