import logging
from collections import defaultdict

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from wanderlust.core.enums import PollStatus
from wanderlust.core.errors import FieldError, ForbiddenError, NotFoundError, ValidationError
from wanderlust.core.permissions import can_create, can_delete, can_modify
from wanderlust.core.utils import as_utc, utcnow
from wanderlust.models.poll import Poll, PollOption
from wanderlust.models.vote import Vote
from wanderlust.schemas.poll import PollCreate, PollUpdate
from wanderlust.services.concurrency import apply_update
from wanderlust.services.trip_services import get_trip, require_membership

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = {"title", "status"}

STATUS_TRANSITIONS = {
    PollStatus.ACTIVE: {PollStatus.CLOSED, PollStatus.ARCHIVED},
    PollStatus.CLOSED: {PollStatus.ARCHIVED},
    PollStatus.ARCHIVED: set(),
}


def is_open_for_voting(poll: Poll) -> bool:
    if poll.status is not PollStatus.ACTIVE:
        return False
    return poll.closes_at is None or as_utc(poll.closes_at) > utcnow()


async def get_poll(db: AsyncSession, trip_id: int, poll_id: int) -> Poll:
    q = (
        select(Poll)
        .options(selectinload(Poll.options))
        .where(Poll.id == poll_id, Poll.trip_id == trip_id)
        .execution_options(populate_existing=True)
    )
    res = await db.execute(q)
    poll = res.scalar_one_or_none()

    if not poll:
        raise NotFoundError("Poll not found")

    return poll


async def _vote_tallies(db: AsyncSession, poll_ids, user_id: int):
    """Per-option vote counts and the options ``user_id`` voted for."""
    counts = defaultdict(int)
    mine = set()
    if not poll_ids:
        return counts, mine

    q = (
        select(Vote.option_id, func.count(Vote.id))
        .where(Vote.poll_id.in_(poll_ids))
        .group_by(Vote.option_id)
    )
    for option_id, count in (await db.execute(q)).all():
        counts[option_id] = count

    q = select(Vote.option_id).where(Vote.poll_id.in_(poll_ids), Vote.user_id == user_id)
    mine.update((await db.execute(q)).scalars().all())

    return counts, mine


def _option_views(poll: Poll, counts, mine) -> list[dict]:
    return [
        {
            "id": o.id,
            "label": o.label,
            "description": o.description,
            "display_order": o.display_order,
            "vote_count": counts.get(o.id, 0),
            "has_voted": o.id in mine,
        }
        for o in poll.options
    ]


def _poll_view(poll: Poll, counts, mine) -> dict:
    options = _option_views(poll, counts, mine)
    return {
        "id": poll.id,
        "trip_id": poll.trip_id,
        "created_by": poll.created_by,
        "title": poll.title,
        "description": poll.description,
        "type": poll.type,
        "status": poll.status,
        "allow_multiple": poll.allow_multiple,
        "max_votes": poll.max_votes,
        "closes_at": poll.closes_at,
        "created_at": poll.created_at,
        "updated_at": poll.updated_at,
        "total_votes": sum(o["vote_count"] for o in options),
        "options": options,
    }


async def poll_view(db: AsyncSession, poll: Poll, user_id: int) -> dict:
    counts, mine = await _vote_tallies(db, [poll.id], user_id)
    return _poll_view(poll, counts, mine)


async def create_poll(db: AsyncSession, trip_id: int, user_id: int, data: PollCreate) -> dict:
    await get_trip(db, trip_id)
    member = await require_membership(db, trip_id, user_id)

    if not can_create(member.role):
        raise ForbiddenError("Insufficient permissions to create polls")

    poll = Poll(
        trip_id=trip_id,
        created_by=user_id,
        **data.model_dump(exclude={"options"}),
    )
    poll.options = [
        PollOption(
            label=o.label,
            description=o.description,
            display_order=o.display_order if o.display_order is not None else i,
        )
        for i, o in enumerate(data.options)
    ]
    db.add(poll)
    await db.commit()

    logger.info("Created poll %s on trip %s with %s options", poll.id, trip_id, len(data.options))
    return await poll_view(db, await get_poll(db, trip_id, poll.id), user_id)


async def list_polls(db: AsyncSession, trip_id: int, user_id: int, status: PollStatus | None = None) -> list[dict]:
    await get_trip(db, trip_id)
    await require_membership(db, trip_id, user_id)

    q = (
        select(Poll)
        .options(selectinload(Poll.options))
        .where(Poll.trip_id == trip_id)
        .order_by(Poll.created_at.desc(), Poll.id.desc())
    )
    if status is not None:
        q = q.where(Poll.status == status)

    polls = (await db.execute(q)).scalars().all()
    counts, mine = await _vote_tallies(db, [p.id for p in polls], user_id)
    return [_poll_view(p, counts, mine) for p in polls]


async def get_poll_for_member(db: AsyncSession, trip_id: int, poll_id: int, user_id: int) -> dict:
    await require_membership(db, trip_id, user_id)
    poll = await get_poll(db, trip_id, poll_id)
    return await poll_view(db, poll, user_id)


async def update_poll(db: AsyncSession, trip_id: int, poll_id: int, user_id: int, data: PollUpdate) -> dict:
    poll = await get_poll(db, trip_id, poll_id)
    member = await require_membership(db, trip_id, user_id)

    if not can_modify(member.role, poll.created_by == user_id):
        raise ForbiddenError("You do not have permission to modify this poll")

    changes = data.model_dump(exclude_unset=True, exclude={"client_updated_at"})
    changes = {k: v for k, v in changes.items() if v is not None or k not in REQUIRED_FIELDS}

    new_status = changes.get("status")
    if new_status is not None and new_status != poll.status and new_status not in STATUS_TRANSITIONS[poll.status]:
        raise ValidationError([FieldError(
            path="status",
            message=f"Invalid status transition from {poll.status.value} to {new_status.value}",
        )])

    await apply_update(
        db,
        Poll,
        poll_id,
        changes,
        client_updated_at=data.client_updated_at,
        scope=(Poll.trip_id == trip_id,),
    )

    return await poll_view(db, await get_poll(db, trip_id, poll_id), user_id)


async def close_poll(db: AsyncSession, trip_id: int, poll_id: int, user_id: int) -> dict:
    poll = await get_poll(db, trip_id, poll_id)
    member = await require_membership(db, trip_id, user_id)

    if not can_modify(member.role, poll.created_by == user_id):
        raise ForbiddenError("You do not have permission to close this poll")

    if poll.status is not PollStatus.ACTIVE:
        raise ValidationError([FieldError(path="status", message="Can only close polls with ACTIVE status")])

    await apply_update(
        db,
        Poll,
        poll_id,
        {"status": PollStatus.CLOSED},
        client_updated_at=poll.updated_at,
        scope=(Poll.trip_id == trip_id,),
    )
    logger.info("Closed poll %s on trip %s", poll_id, trip_id)

    return await poll_view(db, await get_poll(db, trip_id, poll_id), user_id)


async def delete_poll(db: AsyncSession, trip_id: int, poll_id: int, user_id: int):
    poll = await get_poll(db, trip_id, poll_id)
    member = await require_membership(db, trip_id, user_id)

    if not can_delete(member.role, poll.created_by == user_id):
        raise ForbiddenError("Insufficient permissions to delete polls")

    await db.execute(delete(Vote).where(Vote.poll_id == poll_id))
    await db.delete(poll)
    await db.commit()
    logger.info("Deleted poll %s from trip %s", poll_id, trip_id)

    return {"status": "deleted"}


# --- voting ---


async def _voting_poll(db: AsyncSession, trip_id: int, poll_id: int, user_id: int) -> Poll:
    poll = await get_poll(db, trip_id, poll_id)
    member = await require_membership(db, trip_id, user_id)

    if not can_create(member.role):
        raise ForbiddenError("Viewers cannot vote")

    if not is_open_for_voting(poll):
        raise ValidationError([FieldError(path="poll", message="Poll is not open for voting")])

    return poll


def _require_option(poll: Poll, option_id: int, path: str = "option_id"):
    if option_id not in {o.id for o in poll.options}:
        raise NotFoundError(
            "Poll option not found or does not belong to this poll",
            details=[{"path": path, "message": "Unknown option"}],
        )


async def _user_votes(db: AsyncSession, poll_id: int, user_id: int) -> list[Vote]:
    q = select(Vote).where(Vote.poll_id == poll_id, Vote.user_id == user_id).order_by(Vote.id)
    res = await db.execute(q)
    return list(res.scalars().all())


async def cast_vote(db: AsyncSession, trip_id: int, poll_id: int, user_id: int, option_id: int) -> Vote:
    poll = await _voting_poll(db, trip_id, poll_id, user_id)
    _require_option(poll, option_id)

    votes = await _user_votes(db, poll_id, user_id)

    if any(v.option_id == option_id for v in votes):
        raise ValidationError([FieldError(path="option_id", message="You have already voted for this option")])

    if not poll.allow_multiple and votes:
        raise ValidationError([FieldError(
            path="option_id",
            message="You have already voted in this single-choice poll; change your vote instead",
        )])

    if poll.allow_multiple and poll.max_votes and len(votes) >= poll.max_votes:
        raise ValidationError([FieldError(
            path="option_id",
            message=f"Maximum {poll.max_votes} votes allowed for this poll",
        )])

    vote = Vote(poll_id=poll_id, option_id=option_id, user_id=user_id)
    db.add(vote)
    await db.commit()
    await db.refresh(vote)

    logger.info("User %s voted for option %s on poll %s", user_id, option_id, poll_id)
    return vote


async def change_vote(
    db: AsyncSession,
    trip_id: int,
    poll_id: int,
    user_id: int,
    old_option_id: int,
    new_option_id: int,
) -> Vote:
    poll = await _voting_poll(db, trip_id, poll_id, user_id)
    _require_option(poll, old_option_id, "old_option_id")
    _require_option(poll, new_option_id, "new_option_id")

    votes = {v.option_id: v for v in await _user_votes(db, poll_id, user_id)}

    old_vote = votes.get(old_option_id)
    if old_vote is None:
        raise NotFoundError("You have not voted for the old option")

    if new_option_id in votes and new_option_id != old_option_id:
        raise ValidationError([FieldError(path="new_option_id", message="You have already voted for this option")])

    await db.delete(old_vote)
    await db.flush()

    vote = Vote(poll_id=poll_id, option_id=new_option_id, user_id=user_id)
    db.add(vote)
    await db.commit()
    await db.refresh(vote)

    logger.info(
        "User %s moved vote on poll %s from option %s to %s",
        user_id, poll_id, old_option_id, new_option_id,
    )
    return vote


async def remove_vote(db: AsyncSession, trip_id: int, poll_id: int, user_id: int, option_id: int):
    await _voting_poll(db, trip_id, poll_id, user_id)

    q = select(Vote).where(
        Vote.poll_id == poll_id,
        Vote.option_id == option_id,
        Vote.user_id == user_id,
    )
    vote = (await db.execute(q)).scalar_one_or_none()

    if vote is None:
        raise NotFoundError("You have not voted for this option")

    await db.delete(vote)
    await db.commit()
    logger.info("User %s removed vote for option %s on poll %s", user_id, option_id, poll_id)

    return {"status": "deleted"}


async def get_user_votes(db: AsyncSession, trip_id: int, poll_id: int, user_id: int) -> list[int]:
    await require_membership(db, trip_id, user_id)
    await get_poll(db, trip_id, poll_id)
    return [v.option_id for v in await _user_votes(db, poll_id, user_id)]


async def get_poll_results(db: AsyncSession, trip_id: int, poll_id: int, user_id: int) -> dict:
    await require_membership(db, trip_id, user_id)
    poll = await get_poll(db, trip_id, poll_id)

    view = await poll_view(db, poll, user_id)
    return {
        "poll_id": poll.id,
        "status": poll.status,
        "total_votes": view["total_votes"],
        "options": view["options"],
    }
