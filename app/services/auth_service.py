import logging

from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.errors import InvalidCredentials, NotFound
from app.core.security import TokenClaims, create_access_token, verify_password
from app.core.telemetry import emit
from app.models import LoginRequest, LoginResponse, User, UserResponse
from app.services.user_service import UserService

logger = logging.getLogger(__name__)


class AuthService:
    @staticmethod
    async def login(login_data: LoginRequest, db: AsyncSession) -> LoginResponse:
        """
        Check credentials and issue an access token.

        Unknown email and wrong password fail identically for the caller;
        only the log line says which one it was.
        """
        user = await UserService.find_by_email(login_data.email, db)
        if user is None:
            logger.warning(f"Login failed for {login_data.email}: unknown email")
            raise InvalidCredentials()
        if not verify_password(login_data.password, user.password_hash):
            logger.warning(f"Login failed for {login_data.email}: bad password")
            raise InvalidCredentials()

        token = create_access_token(user.id, user.email)
        logger.info(f"Login successful for user: {user.id} - {user.email}")
        emit("user.login", user_id=user.id)
        return LoginResponse(access_token=token, user=UserResponse.model_validate(user))

    @staticmethod
    async def validate_principal(claims: TokenClaims, db: AsyncSession) -> User | None:
        try:
            return await UserService.find_by_id(claims.sub, db)
        except NotFound:
            logger.warning(f"Token subject {claims.sub} no longer exists")
            return None
