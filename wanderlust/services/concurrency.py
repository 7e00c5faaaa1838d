"""
Optimistic concurrency for shared editable records.

A write carries the ``updated_at`` the client last saw. The check and the write
are one conditional UPDATE, so two writers racing on the same row cannot both
succeed: the second one matches zero rows and gets a ConflictError.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Iterable, Mapping

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from wanderlust.core.errors import ConflictError, NotFoundError
from wanderlust.core.utils import as_utc, utcnow

logger = logging.getLogger(__name__)

ONE_MICROSECOND = timedelta(microseconds=1)


def next_updated_at(previous: datetime) -> datetime:
    """Current time, or one microsecond past ``previous`` if the clock lags."""
    now = utcnow()
    previous = as_utc(previous)
    return now if now > previous else previous + ONE_MICROSECOND


async def current_updated_at(db: AsyncSession, model, record_id: int, scope: Iterable = ()) -> datetime | None:
    q = select(model.updated_at).where(model.id == record_id, *scope)
    res = await db.execute(q)
    return res.scalar_one_or_none()


async def apply_update(
    db: AsyncSession,
    model,
    record_id: int,
    changes: Mapping[str, Any],
    client_updated_at: datetime | None = None,
    scope: Iterable = (),
):
    """Apply ``changes`` to one row and stamp a new ``updated_at``.

    ``scope`` holds extra WHERE criteria (e.g. ``Model.trip_id == trip_id``).
    With ``client_updated_at`` the row must still carry exactly that timestamp,
    otherwise ConflictError is raised and nothing is written. Without it the
    write is a forced overwrite. Returns the refreshed ORM instance.
    """
    scope = tuple(scope)
    stmt = update(model).where(model.id == record_id, *scope)

    if client_updated_at is None:
        previous = await current_updated_at(db, model, record_id, scope)
        if previous is None:
            raise NotFoundError(f"{model.__name__} not found")
    else:
        client_updated_at = as_utc(client_updated_at)
        previous = client_updated_at
        stmt = stmt.where(model.updated_at == client_updated_at)

    new_updated_at = next_updated_at(previous)
    stmt = (
        stmt.values(**dict(changes), updated_at=new_updated_at)
        .execution_options(synchronize_session=False)
    )

    result = await db.execute(stmt)

    if result.rowcount != 1:
        await db.rollback()
        if client_updated_at is None:
            raise NotFoundError(f"{model.__name__} not found")

        server_updated_at = await current_updated_at(db, model, record_id, scope)
        logger.warning(
            "Stale write to %s %s: client=%s server=%s",
            model.__tablename__, record_id, client_updated_at, server_updated_at,
        )
        raise ConflictError(server_updated_at=server_updated_at, client_updated_at=client_updated_at)

    await db.commit()
    logger.info("Updated %s %s fields=%s", model.__tablename__, record_id, sorted(changes))

    return await db.get(model, record_id, populate_existing=True)
