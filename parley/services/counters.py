"""
Denormalised counters on forums, topics and members.
"""

import uuid

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession


async def adjust_counters(
    session: AsyncSession,
    model,
    entity_id: uuid.UUID,
    **deltas: int,
) -> None:
    """
    Add ``deltas`` to integer columns of one row in a single UPDATE.

    The arithmetic runs in SQL so concurrent requests do not overwrite each
    other's increments.
    """
    values = {
        column: getattr(model, column) + delta
        for column, delta in deltas.items()
        if delta
    }
    if not values:
        return
    await session.execute(
        update(model).where(model.id == entity_id).values(**values)
    )
