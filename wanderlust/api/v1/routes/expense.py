from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from wanderlust.core.dependencies import get_current_user, get_db
from wanderlust.schemas.expense import ExpenseCreate, ExpenseOut, ExpenseUpdate, SplitOut, SplitPaymentUpdate
from wanderlust.services.expense_services import (
    create_expense,
    delete_expense,
    edit_expense,
    get_expense_by_id,
    update_split_payment,
)

router = APIRouter()


@router.post("/", response_model=ExpenseOut, status_code=201)
async def add_expense(data: ExpenseCreate, db: AsyncSession = Depends(get_db), current_user=Depends(get_current_user)):
    return await create_expense(db, data, current_user.id)


@router.get("/{expense_id}", response_model=ExpenseOut)
async def fetch(expense_id: int, db: AsyncSession = Depends(get_db), current_user=Depends(get_current_user)):
    return await get_expense_by_id(db, expense_id=expense_id, user_id=current_user.id)


@router.patch("/{expense_id}", response_model=ExpenseOut)
async def edit(
    expense_id: int,
    data: ExpenseUpdate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return await edit_expense(db, data, expense_id=expense_id, user_id=current_user.id)


@router.delete("/{expense_id}")
async def del_expense(expense_id: int, db: AsyncSession = Depends(get_db), current_user=Depends(get_current_user)):
    return await delete_expense(db, expense_id=expense_id, user_id=current_user.id)


@router.patch("/{expense_id}/splits/{split_id}", response_model=SplitOut)
async def mark_split(
    expense_id: int,
    split_id: int,
    data: SplitPaymentUpdate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user),
):
    return await update_split_payment(db, expense_id, split_id, current_user.id, data)
