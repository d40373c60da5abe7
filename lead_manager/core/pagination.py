"""
Pagination utilities for Lead Manager.
Shared by the paginated district endpoint and the client-side lead workspace.
"""
import math
from typing import List, Sequence, Tuple, TypeVar

from sqlmodel import select, func
from sqlmodel.ext.asyncio.session import AsyncSession

T = TypeVar("T")


def total_pages(total: int, page_size: int) -> int:
    """Number of pages needed to show `total` items."""
    if page_size <= 0:
        return 0
    return math.ceil(total / page_size)


def paginate(items: Sequence[T], page: int, page_size: int) -> List[T]:
    """Slice one 1-based page out of an already filtered sequence."""
    start = max(page - 1, 0) * page_size
    return list(items[start:start + page_size])


def page_window(total: int, page: int, page_size: int) -> Tuple[int, int]:
    """
    1-based (start, end) indices shown as "Showing start-end of total".

    Returns (0, 0) for an empty result set.
    """
    if total == 0:
        return 0, 0
    start = (page - 1) * page_size + 1
    end = min(page * page_size, total)
    return start, end


def create_paginated_response(
    total: int,
    page: int,
    page_size: int
) -> dict:
    """Pagination metadata returned next to a page of rows."""
    return {
        "totalCount": total,
        "page": page,
        "pageSize": page_size,
        "totalPages": total_pages(total, page_size),
    }


async def paginate_query(
    session: AsyncSession,
    query,
    page: int = 1,
    page_size: int = 20
) -> Tuple[list, int]:
    """
    Execute a paginated query.

    Args:
        session: Database session
        query: SQLModel select query (ordering already applied)
        page: Page number (1-indexed)
        page_size: Items per page

    Returns:
        (rows for the page, total row count)
    """
    count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total_result = await session.exec(count_query)
    total = total_result.one()

    offset = (page - 1) * page_size
    result = await session.exec(query.offset(offset).limit(page_size))
    return list(result.all()), total
