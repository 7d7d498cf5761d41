"""Cursor pagination over ordered queries.

A page is requested with `limit` and the id of the last record the caller
already holds. The next page starts strictly after that record in the
query's ordering, ties broken by id.
"""
from typing import Optional

from sqlalchemy import Select, and_, or_
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings


def clamp_limit(limit: Optional[int]) -> int:
    if not limit or limit < 1:
        return settings.default_page_size
    return min(limit, settings.max_page_size)


async def paginate(
    session: AsyncSession,
    query: Select,
    model,
    order_column,
    *,
    descending: bool = False,
    limit: Optional[int] = None,
    last_id: Optional[str] = None,
) -> list:
    """Apply ordering, the start-after cursor and the limit, then fetch."""
    if last_id:
        cursor = await session.get(model, last_id)
        # Unknown cursor ids are ignored and the first page is returned
        if cursor is not None:
            cursor_value = getattr(cursor, order_column.key)
            if descending:
                after = or_(
                    order_column < cursor_value,
                    and_(order_column == cursor_value, model.id > cursor.id),
                )
            else:
                after = or_(
                    order_column > cursor_value,
                    and_(order_column == cursor_value, model.id > cursor.id),
                )
            query = query.where(after)

    ordering = order_column.desc() if descending else order_column.asc()
    query = query.order_by(ordering, model.id.asc()).limit(clamp_limit(limit))
    result = await session.execute(query)
    return list(result.scalars().all())
