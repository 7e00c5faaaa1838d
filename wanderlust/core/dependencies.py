from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from wanderlust.core.errors import UnauthorizedError
from wanderlust.core.jwt_config import decode_token, get_token_from_request
from wanderlust.db.session import async_session
from wanderlust.services.user_service import get_user_by_id


async def get_db():
    async with async_session() as session:
        yield session


async def get_current_user(request: Request, db: AsyncSession = Depends(get_db)):
    token = get_token_from_request(request)
    payload = decode_token(token)
    user_id = payload.get("sub")

    if user_id is None:
        raise UnauthorizedError("Invalid authentication credentials")

    try:
        user_id = int(user_id)
    except (TypeError, ValueError):
        raise UnauthorizedError("Invalid authentication credentials")

    user = await get_user_by_id(db, user_id)

    if user is None:
        raise UnauthorizedError("User not found")

    return user
