from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from wanderlust.core.dependencies import get_current_user, get_db
from wanderlust.schemas.balances import BalanceOut, TripSettlementsOut
from wanderlust.schemas.expense import ExpenseOut
from wanderlust.services.expense_services import list_trip_expenses
from wanderlust.services.trip_services import get_trip_balances, get_trip_settlements

router = APIRouter()


@router.get("/{trip_id}/expenses", response_model=list[ExpenseOut], description="get all expenses of the trip")
async def fetch_expenses(trip_id: int, db: AsyncSession = Depends(get_db), user=Depends(get_current_user)):
    return await list_trip_expenses(db, trip_id, user.id)


@router.get("/{trip_id}/balances", response_model=list[BalanceOut])
async def trip_balances(trip_id: int, db: AsyncSession = Depends(get_db), user=Depends(get_current_user)):
    return await get_trip_balances(db, trip_id, user.id)


@router.get("/{trip_id}/settlements", response_model=TripSettlementsOut)
async def trip_settlements(trip_id: int, db: AsyncSession = Depends(get_db), user=Depends(get_current_user)):
    return await get_trip_settlements(db, trip_id, user.id)
