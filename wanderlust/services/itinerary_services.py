import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wanderlust.core.enums import ItineraryItemType
from wanderlust.core.errors import FieldError, ForbiddenError, NotFoundError, ValidationError
from wanderlust.core.permissions import can_create, can_delete, can_modify
from wanderlust.core.utils import as_utc
from wanderlust.models.itinerary_item import ItineraryItem
from wanderlust.schemas.itinerary import ItineraryItemCreate, ItineraryItemUpdate
from wanderlust.services.concurrency import apply_update
from wanderlust.services.trip_services import get_trip, require_membership

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = {"title", "type", "start_time"}


async def create_item(db: AsyncSession, trip_id: int, user_id: int, data: ItineraryItemCreate) -> ItineraryItem:
    await get_trip(db, trip_id)
    member = await require_membership(db, trip_id, user_id)

    if not can_create(member.role):
        raise ForbiddenError("Insufficient permissions to add itinerary items")

    item = ItineraryItem(trip_id=trip_id, created_by=user_id, **data.model_dump())
    db.add(item)
    await db.commit()
    await db.refresh(item)

    logger.info("Created itinerary item %s on trip %s", item.id, trip_id)
    return item


async def get_item(db: AsyncSession, trip_id: int, item_id: int) -> ItineraryItem:
    q = select(ItineraryItem).where(
        ItineraryItem.id == item_id,
        ItineraryItem.trip_id == trip_id,
    )
    res = await db.execute(q)
    item = res.scalar_one_or_none()

    if not item:
        raise NotFoundError("Itinerary item not found")

    return item


def _check_times(item: ItineraryItem, changes: dict):
    start = changes.get("start_time") or item.start_time
    end = changes["end_time"] if "end_time" in changes else item.end_time

    if end is not None and as_utc(end) <= as_utc(start):
        path = "end_time" if "end_time" in changes else "start_time"
        raise ValidationError([FieldError(path=path, message="end_time must be after start_time")])


async def update_item(
    db: AsyncSession,
    trip_id: int,
    item_id: int,
    user_id: int,
    data: ItineraryItemUpdate,
) -> ItineraryItem:
    item = await get_item(db, trip_id, item_id)
    member = await require_membership(db, trip_id, user_id)

    if not can_modify(member.role, item.created_by == user_id):
        raise ForbiddenError("You do not have permission to modify this item")

    changes = data.model_dump(exclude_unset=True, exclude={"client_updated_at"})
    changes = {k: v for k, v in changes.items() if v is not None or k not in REQUIRED_FIELDS}
    _check_times(item, changes)

    return await apply_update(
        db,
        ItineraryItem,
        item_id,
        changes,
        client_updated_at=data.client_updated_at,
        scope=(ItineraryItem.trip_id == trip_id,),
    )


async def list_items(
    db: AsyncSession,
    trip_id: int,
    user_id: int,
    item_type: ItineraryItemType | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
):
    await get_trip(db, trip_id)
    await require_membership(db, trip_id, user_id)

    q = select(ItineraryItem).where(ItineraryItem.trip_id == trip_id)
    if item_type is not None:
        q = q.where(ItineraryItem.type == item_type)
    if start is not None:
        q = q.where(ItineraryItem.start_time >= as_utc(start))
    if end is not None:
        q = q.where(ItineraryItem.start_time <= as_utc(end))

    res = await db.execute(q.order_by(ItineraryItem.start_time, ItineraryItem.id))
    return res.scalars().all()


async def get_item_for_member(db: AsyncSession, trip_id: int, item_id: int, user_id: int) -> ItineraryItem:
    await require_membership(db, trip_id, user_id)
    return await get_item(db, trip_id, item_id)


async def delete_item(db: AsyncSession, trip_id: int, item_id: int, user_id: int):
    item = await get_item(db, trip_id, item_id)
    member = await require_membership(db, trip_id, user_id)

    if not can_delete(member.role, item.created_by == user_id):
        raise ForbiddenError("You do not have permission to delete this item")

    await db.delete(item)
    await db.commit()
    logger.info("Deleted itinerary item %s from trip %s", item_id, trip_id)

    return {"status": "deleted"}
