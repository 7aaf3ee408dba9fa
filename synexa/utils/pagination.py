"""
Page-number pagination shared by the list endpoints.

Every list response has the shape of ``schemas.common.PaginatedResponse``.
"""
from typing import Any, List, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

MAX_PAGE_SIZE = 100


def normalize_page(page: int, page_size: int) -> Tuple[int, int]:
    """Clamp page to >= 1 and page_size to 1..MAX_PAGE_SIZE"""
    return max(1, page), min(MAX_PAGE_SIZE, max(1, page_size))


async def paginate(db: AsyncSession, query: Select, page: int = 1, page_size: int = 10) -> dict:
    """
    Run ``query`` (already filtered and ordered) for one page of ORM rows.

    The total is counted over the same query with its ORDER BY removed.
    """
    page, page_size = normalize_page(page, page_size)

    total = await db.scalar(select(func.count()).select_from(query.order_by(None).subquery()))
    rows = await db.scalars(query.offset((page - 1) * page_size).limit(page_size))

    return create_paginated_response(list(rows), total or 0, page, page_size)


def create_paginated_response(items: List[Any], total: int, page: int, page_size: int) -> dict:
    """Wrap an already sliced page, e.g. rows converted to response dicts"""
    total_pages = max(1, -(-total // page_size))
    return {
        "items": items,
        "total": total,
        "page": page,
        "page_size": page_size,
        "total_pages": total_pages,
        "has_next": page < total_pages,
        "has_previous": page > 1,
    }
