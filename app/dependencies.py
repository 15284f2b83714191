import logging
from dataclasses import dataclass

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel.ext.asyncio.session import AsyncSession
from typing_extensions import Annotated

from app.core.errors import InvalidToken, Unauthenticated
from app.core.security import decode_access_token
from app.database import get_db
from app.services.auth_service import AuthService

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    id: str
    email: str


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> Principal:
    if credentials is None:
        logger.warning(
            f"Authentication failed: no bearer token for {request.method} {request.url.path}"
        )
        raise Unauthenticated()

    try:
        claims = decode_access_token(credentials.credentials)
    except InvalidToken as e:
        logger.warning(f"Authentication failed: {e}")
        raise Unauthenticated("Invalid or expired token") from e

    user = await AuthService.validate_principal(claims, db)
    if user is None:
        raise Unauthenticated("User not found")

    request.state.user_id = user.id
    return Principal(id=user.id, email=user.email)


CurrentUser = Annotated[Principal, Depends(get_current_user)]
