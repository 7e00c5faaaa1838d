import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from wanderlust.core.errors import FieldError, ForbiddenError, NotFoundError, ValidationError
from wanderlust.core.permissions import can_create, can_delete, can_modify
from wanderlust.core.utils import utcnow
from wanderlust.models.expense import Expense
from wanderlust.models.expense_split import ExpenseSplit
from wanderlust.models.trip import TripMember
from wanderlust.schemas.expense import ExpenseCreate, ExpenseUpdate, SplitPaymentUpdate
from wanderlust.services.concurrency import apply_update
from wanderlust.services.split_services import PARTICIPANT_FIELDS, validate_split
from wanderlust.services.trip_services import get_trip, require_membership

logger = logging.getLogger(__name__)

# Columns a PATCH may not null out
REQUIRED_FIELDS = {"title", "category", "paid_at"}


async def _load_expense(db: AsyncSession, expense_id: int) -> Expense:
    q = (
        select(Expense)
        .options(selectinload(Expense.splits))
        .where(Expense.id == expense_id)
        .execution_options(populate_existing=True)
    )
    res = await db.execute(q)
    expense = res.scalar_one_or_none()

    if not expense:
        raise NotFoundError("Expense not found")

    return expense


async def create_expense(db: AsyncSession, data: ExpenseCreate, paid_by: int) -> Expense:
    # 1. Payer must be a member allowed to add expenses
    trip = await get_trip(db, data.trip_id)
    member = await require_membership(db, trip.id, paid_by)

    if not can_create(member.role):
        raise ForbiddenError("Insufficient permissions to create expenses")

    if data.currency != trip.currency:
        raise ValidationError([FieldError(
            path="currency",
            message=f"Expense currency must match trip currency {trip.currency}",
        )])

    # 2. Validate the split and compute shares
    shares = validate_split(data.amount, data.split_type, data.participants())

    # 3. Every split user must belong to the trip
    user_ids = [s.user_id for s in shares]
    q = select(TripMember.user_id).where(
        TripMember.trip_id == trip.id,
        TripMember.user_id.in_(user_ids),
    )
    res = await db.execute(q)
    members = set(res.scalars().all())

    if len(members) != len(user_ids):
        raise ValidationError([FieldError(
            path=PARTICIPANT_FIELDS[data.split_type],
            message="All split users must be members of the trip",
        )])

    # 4. Expense and splits in one transaction
    expense = Expense(
        trip_id=trip.id,
        title=data.title,
        description=data.description,
        category=data.category,
        amount=data.amount,
        currency=data.currency,
        split_type=data.split_type,
        paid_by=paid_by,
        paid_at=data.paid_at or utcnow(),
        receipt_url=data.receipt_url,
    )
    db.add(expense)
    await db.flush()

    for share in shares:
        db.add(ExpenseSplit(
            expense_id=expense.id,
            user_id=share.user_id,
            split_type=data.split_type,
            amount=share.amount,
        ))

    await db.commit()
    logger.info(
        "Created expense %s on trip %s: %s %s split %s ways (%s)",
        expense.id, trip.id, data.amount, data.currency, len(shares), data.split_type.value,
    )

    return await _load_expense(db, expense.id)


async def get_expense_by_id(db: AsyncSession, expense_id: int, user_id: int) -> Expense:
    expense = await _load_expense(db, expense_id)
    await require_membership(db, expense.trip_id, user_id)
    return expense


async def list_trip_expenses(db: AsyncSession, trip_id: int, user_id: int):
    await get_trip(db, trip_id)
    await require_membership(db, trip_id, user_id)

    q = (
        select(Expense)
        .options(selectinload(Expense.splits))
        .where(Expense.trip_id == trip_id)
        .order_by(Expense.paid_at.desc(), Expense.id.desc())
    )
    res = await db.execute(q)
    return res.scalars().all()


async def edit_expense(db: AsyncSession, data: ExpenseUpdate, expense_id: int, user_id: int) -> Expense:
    expense = await _load_expense(db, expense_id)
    member = await require_membership(db, expense.trip_id, user_id)

    if not can_modify(member.role, expense.paid_by == user_id):
        raise ForbiddenError("Insufficient permissions to update this expense")

    changes = data.model_dump(exclude_unset=True, exclude={"client_updated_at"})
    changes = {k: v for k, v in changes.items() if v is not None or k not in REQUIRED_FIELDS}

    await apply_update(
        db,
        Expense,
        expense_id,
        changes,
        client_updated_at=data.client_updated_at,
    )

    return await _load_expense(db, expense_id)


async def delete_expense(db: AsyncSession, expense_id: int, user_id: int):
    expense = await _load_expense(db, expense_id)
    member = await require_membership(db, expense.trip_id, user_id)

    if not can_delete(member.role, expense.paid_by == user_id):
        raise ForbiddenError("Insufficient permissions to delete this expense")

    await db.delete(expense)
    await db.commit()
    logger.info("Deleted expense %s from trip %s", expense_id, expense.trip_id)

    return {"status": "deleted"}


async def update_split_payment(
    db: AsyncSession,
    expense_id: int,
    split_id: int,
    user_id: int,
    data: SplitPaymentUpdate,
) -> ExpenseSplit:
    expense = await _load_expense(db, expense_id)
    await require_membership(db, expense.trip_id, user_id)

    split = next((s for s in expense.splits if s.id == split_id), None)
    if split is None:
        raise NotFoundError("Expense split not found")

    # The debtor marks it paid, the payer marks it received
    if user_id not in (split.user_id, expense.paid_by):
        raise ForbiddenError("Only the split owner or payer can update payment status")

    split.is_paid = data.is_paid
    split.paid_at = utcnow() if data.is_paid else None
    await db.commit()
    await db.refresh(split)

    logger.info(
        "Split %s of expense %s marked %s by user %s",
        split_id, expense_id, "paid" if data.is_paid else "unpaid", user_id,
    )
    return split
