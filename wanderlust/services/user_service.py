from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wanderlust.models.user import User


async def get_user_by_id(db: AsyncSession, id: int):
    result = await db.execute(select(User).where(User.id == id))
    return result.scalar_one_or_none()


async def get_user_names(db: AsyncSession, user_ids) -> dict[int, str]:
    user_ids = list(user_ids)
    if not user_ids:
        return {}
    res = await db.execute(select(User.id, User.name).where(User.id.in_(user_ids)))
    return {uid: name for uid, name in res.all()}
