import math
from typing import Any, List, Tuple

from sqlalchemy.orm import Query


def paginate(query: Query, page: int, page_size: int, *order_by) -> Tuple[List[Any], int, int]:
    """
    Apply ordering and offset pagination to a query.

    Returns:
        Tuple of (items list, total count, total pages)
    """
    total = query.count()
    total_pages = math.ceil(total / page_size) if total > 0 else 1

    offset = (page - 1) * page_size
    items = query.order_by(*order_by).offset(offset).limit(page_size).all()

    return items, total, total_pages
