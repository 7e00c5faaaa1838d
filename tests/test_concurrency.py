from datetime import datetime, timedelta, timezone

import pytest

from wanderlust.core.enums import ItineraryItemType
from wanderlust.core.errors import ConflictError, NotFoundError
from wanderlust.core.utils import utcnow
from wanderlust.models.itinerary_item import ItineraryItem
from wanderlust.services.concurrency import apply_update, next_updated_at


@pytest.fixture
async def item(db, trip):
    item = ItineraryItem(
        trip_id=trip.id,
        created_by=trip.alice,
        title="Museum",
        type=ItineraryItemType.ACTIVITY,
        start_time=datetime(2026, 11, 2, 10, 0, tzinfo=timezone.utc),
    )
    db.add(item)
    await db.commit()
    await db.refresh(item)
    return item


async def test_matching_timestamp_writes_and_advances(db, item):
    seen = item.updated_at

    updated = await apply_update(db, ItineraryItem, item.id, {"title": "Gallery"}, client_updated_at=seen)

    assert updated.title == "Gallery"
    assert updated.updated_at > seen


async def test_stale_timestamp_raises_conflict_and_leaves_row(db, item):
    item_id = item.id
    seen = item.updated_at
    await apply_update(db, ItineraryItem, item_id, {"title": "Gallery"}, client_updated_at=seen)
    current = (await db.get(ItineraryItem, item_id, populate_existing=True)).updated_at

    with pytest.raises(ConflictError) as exc:
        await apply_update(db, ItineraryItem, item_id, {"title": "Zoo"}, client_updated_at=seen)

    assert exc.value.client_updated_at == seen
    assert exc.value.server_updated_at == current
    assert exc.value.details == {
        "serverUpdatedAt": current.isoformat(),
        "clientUpdatedAt": seen.isoformat(),
    }

    row = await db.get(ItineraryItem, item_id, populate_existing=True)
    assert row.title == "Gallery"
    assert row.updated_at == current


async def test_missing_timestamp_overwrites(db, item):
    await apply_update(db, ItineraryItem, item.id, {"title": "Gallery"}, client_updated_at=item.updated_at)

    updated = await apply_update(db, ItineraryItem, item.id, {"title": "Zoo"})

    assert updated.title == "Zoo"


async def test_naive_client_timestamp_is_treated_as_utc(db, item):
    naive = item.updated_at.astimezone(timezone.utc).replace(tzinfo=None)

    updated = await apply_update(db, ItineraryItem, item.id, {"notes": "bring cash"}, client_updated_at=naive)

    assert updated.notes == "bring cash"


async def test_deleted_record_conflicts_without_server_timestamp(db, item):
    seen, item_id = item.updated_at, item.id
    await db.delete(item)
    await db.commit()

    with pytest.raises(ConflictError) as exc:
        await apply_update(db, ItineraryItem, item_id, {"title": "Zoo"}, client_updated_at=seen)

    assert exc.value.server_updated_at is None
    assert exc.value.details["serverUpdatedAt"] is None


async def test_forced_write_to_missing_record_is_not_found(db, trip):
    with pytest.raises(NotFoundError):
        await apply_update(db, ItineraryItem, 9999, {"title": "Zoo"})


async def test_scope_limits_the_write(db, item, trip):
    with pytest.raises(NotFoundError):
        await apply_update(
            db,
            ItineraryItem,
            item.id,
            {"title": "Zoo"},
            scope=(ItineraryItem.trip_id == trip.id + 1,),
        )

    row = await db.get(ItineraryItem, item.id, populate_existing=True)
    assert row.title == "Museum"


async def test_first_of_two_writers_wins(session_factory, item):
    seen = item.updated_at

    async with session_factory() as first:
        await apply_update(first, ItineraryItem, item.id, {"title": "First"}, client_updated_at=seen)

    async with session_factory() as second:
        with pytest.raises(ConflictError):
            await apply_update(second, ItineraryItem, item.id, {"title": "Second"}, client_updated_at=seen)

        row = await second.get(ItineraryItem, item.id)
        assert row.title == "First"


def test_next_updated_at_uses_current_time():
    previous = utcnow() - timedelta(minutes=5)
    assert next_updated_at(previous) > previous + timedelta(minutes=4)


def test_next_updated_at_steps_past_a_future_timestamp():
    previous = utcnow() + timedelta(hours=1)
    assert next_updated_at(previous) == previous + timedelta(microseconds=1)
