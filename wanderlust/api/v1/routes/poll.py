from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from wanderlust.core.dependencies import get_current_user, get_db
from wanderlust.core.enums import PollStatus
from wanderlust.schemas.poll import (
    PollCreate,
    PollOut,
    PollResultsOut,
    PollUpdate,
    VoteChange,
    VoteCreate,
    VoteOut,
)
from wanderlust.services.poll_services import (
    cast_vote,
    change_vote,
    close_poll,
    create_poll,
    delete_poll,
    get_poll_for_member,
    get_poll_results,
    get_user_votes,
    list_polls,
    remove_vote,
    update_poll,
)

router = APIRouter()


@router.post("/{trip_id}/polls", response_model=PollOut, status_code=201)
async def add_poll(trip_id: int, data: PollCreate, db: AsyncSession = Depends(get_db), user=Depends(get_current_user)):
    return await create_poll(db, trip_id, user.id, data)


@router.get("/{trip_id}/polls", response_model=list[PollOut])
async def fetch_polls(
    trip_id: int,
    status: PollStatus | None = None,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    return await list_polls(db, trip_id, user.id, status=status)


@router.get("/{trip_id}/polls/{poll_id}", response_model=PollOut)
async def fetch_poll(trip_id: int, poll_id: int, db: AsyncSession = Depends(get_db), user=Depends(get_current_user)):
    return await get_poll_for_member(db, trip_id, poll_id, user.id)


@router.patch("/{trip_id}/polls/{poll_id}", response_model=PollOut)
async def edit_poll(
    trip_id: int,
    poll_id: int,
    data: PollUpdate,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    return await update_poll(db, trip_id, poll_id, user.id, data)


@router.post("/{trip_id}/polls/{poll_id}/close", response_model=PollOut)
async def finish_poll(trip_id: int, poll_id: int, db: AsyncSession = Depends(get_db), user=Depends(get_current_user)):
    return await close_poll(db, trip_id, poll_id, user.id)


@router.delete("/{trip_id}/polls/{poll_id}")
async def del_poll(trip_id: int, poll_id: int, db: AsyncSession = Depends(get_db), user=Depends(get_current_user)):
    return await delete_poll(db, trip_id, poll_id, user.id)


@router.post("/{trip_id}/polls/{poll_id}/votes", response_model=VoteOut, status_code=201)
async def vote(
    trip_id: int,
    poll_id: int,
    data: VoteCreate,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    return await cast_vote(db, trip_id, poll_id, user.id, data.option_id)


@router.put("/{trip_id}/polls/{poll_id}/votes", response_model=VoteOut)
async def move_vote(
    trip_id: int,
    poll_id: int,
    data: VoteChange,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    return await change_vote(db, trip_id, poll_id, user.id, data.old_option_id, data.new_option_id)


@router.delete("/{trip_id}/polls/{poll_id}/votes/{option_id}")
async def unvote(
    trip_id: int,
    poll_id: int,
    option_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    return await remove_vote(db, trip_id, poll_id, user.id, option_id)


@router.get("/{trip_id}/polls/{poll_id}/votes/me", response_model=list[int])
async def my_votes(trip_id: int, poll_id: int, db: AsyncSession = Depends(get_db), user=Depends(get_current_user)):
    return await get_user_votes(db, trip_id, poll_id, user.id)


@router.get("/{trip_id}/polls/{poll_id}/results", response_model=PollResultsOut)
async def results(trip_id: int, poll_id: int, db: AsyncSession = Depends(get_db), user=Depends(get_current_user)):
    return await get_poll_results(db, trip_id, poll_id, user.id)
