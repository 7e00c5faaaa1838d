import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wanderlust.core.errors import ForbiddenError, NotFoundError
from wanderlust.core.utils import qround
from wanderlust.models.expense import Expense
from wanderlust.models.expense_split import ExpenseSplit
from wanderlust.models.trip import Trip, TripMember
from wanderlust.services.split_services import compute_balances, plan_settlements
from wanderlust.services.user_service import get_user_names

logger = logging.getLogger(__name__)


async def get_trip(db: AsyncSession, trip_id: int) -> Trip:
    res = await db.execute(select(Trip).where(Trip.id == trip_id))
    trip = res.scalar_one_or_none()

    if not trip:
        raise NotFoundError("Trip not found")

    return trip


async def require_membership(db: AsyncSession, trip_id: int, user_id: int) -> TripMember:
    q = select(TripMember).where(
        TripMember.trip_id == trip_id,
        TripMember.user_id == user_id,
    )
    res = await db.execute(q)
    member = res.scalar_one_or_none()

    if not member:
        raise ForbiddenError("You are not a member of this trip")

    return member


async def list_member_ids(db: AsyncSession, trip_id: int) -> list[int]:
    q = (
        select(TripMember.user_id)
        .where(TripMember.trip_id == trip_id)
        .order_by(TripMember.joined_at, TripMember.id)
    )
    res = await db.execute(q)
    return list(res.scalars().all())


async def load_trip_ledger(db: AsyncSession, trip_id: int):
    """Expenses, splits and member ids of one trip."""
    expense_res = await db.execute(select(Expense).where(Expense.trip_id == trip_id))
    expenses = expense_res.scalars().all()

    split_q = (
        select(ExpenseSplit)
        .join(Expense, Expense.id == ExpenseSplit.expense_id)
        .where(Expense.trip_id == trip_id)
    )
    split_res = await db.execute(split_q)
    splits = split_res.scalars().all()

    member_ids = await list_member_ids(db, trip_id)
    return expenses, splits, member_ids


async def get_trip_balances(db: AsyncSession, trip_id: int, user_id: int):
    await get_trip(db, trip_id)
    await require_membership(db, trip_id, user_id)

    expenses, splits, member_ids = await load_trip_ledger(db, trip_id)
    balances = compute_balances(expenses, splits, member_ids)

    names = await get_user_names(db, [b.user_id for b in balances])

    return [
        {**b.model_dump(), "user_name": names.get(b.user_id)}
        for b in balances
    ]


async def get_trip_settlements(db: AsyncSession, trip_id: int, user_id: int):
    await get_trip(db, trip_id)
    await require_membership(db, trip_id, user_id)

    expenses, splits, member_ids = await load_trip_ledger(db, trip_id)
    transfers = plan_settlements(compute_balances(expenses, splits, member_ids))

    if not transfers:
        return {
            "settlements": [],
            "summary": {"total_transactions": 0, "total_amount": Decimal("0")},
        }

    names = await get_user_names(db, {u for t in transfers for u in (t.from_user_id, t.to_user_id)})

    return {
        "settlements": [
            {
                "from_id": t.from_user_id,
                "from_name": names.get(t.from_user_id),
                "to_id": t.to_user_id,
                "to_name": names.get(t.to_user_id),
                "amount": t.amount,
            }
            for t in transfers
        ],
        "summary": {
            "total_transactions": len(transfers),
            "total_amount": qround(sum((t.amount for t in transfers), Decimal("0"))),
        },
    }
