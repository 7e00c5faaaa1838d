from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from wanderlust.core.dependencies import get_current_user, get_db
from wanderlust.core.enums import ItineraryItemType
from wanderlust.schemas.itinerary import ItineraryItemCreate, ItineraryItemOut, ItineraryItemUpdate
from wanderlust.services.itinerary_services import (
    create_item,
    delete_item,
    get_item_for_member,
    list_items,
    update_item,
)

router = APIRouter()


@router.post("/{trip_id}/itinerary", response_model=ItineraryItemOut, status_code=201)
async def add_item(
    trip_id: int,
    data: ItineraryItemCreate,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    return await create_item(db, trip_id, user.id, data)


@router.get("/{trip_id}/itinerary", response_model=list[ItineraryItemOut], description="items ordered by start time")
async def fetch_items(
    trip_id: int,
    type: ItineraryItemType | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    return await list_items(db, trip_id, user.id, item_type=type, start=start, end=end)


@router.get("/{trip_id}/itinerary/{item_id}", response_model=ItineraryItemOut)
async def fetch_item(trip_id: int, item_id: int, db: AsyncSession = Depends(get_db), user=Depends(get_current_user)):
    return await get_item_for_member(db, trip_id, item_id, user.id)


@router.patch("/{trip_id}/itinerary/{item_id}", response_model=ItineraryItemOut)
async def edit_item(
    trip_id: int,
    item_id: int,
    data: ItineraryItemUpdate,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    return await update_item(db, trip_id, item_id, user.id, data)


@router.delete("/{trip_id}/itinerary/{item_id}")
async def del_item(trip_id: int, item_id: int, db: AsyncSession = Depends(get_db), user=Depends(get_current_user)):
    return await delete_item(db, trip_id, item_id, user.id)
