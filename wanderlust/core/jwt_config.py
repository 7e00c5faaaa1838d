import jwt
from fastapi import Request
from jwt import ExpiredSignatureError, InvalidTokenError

from wanderlust.core.config import settings
from wanderlust.core.errors import UnauthorizedError


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGO],
        )
    except ExpiredSignatureError:
        raise UnauthorizedError("Token has expired")
    except InvalidTokenError:
        raise UnauthorizedError("Invalid token")


def get_token_from_request(request: Request) -> str:
    token = request.cookies.get("access_token")
    if not token:
        auth_header = request.headers.get("Authorization")
        if auth_header and auth_header.startswith("Bearer "):
            token = auth_header.split(" ", 1)[1]

    if not token:
        raise UnauthorizedError("Unauthorized access")

    return token.strip()
