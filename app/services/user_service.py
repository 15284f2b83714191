import logging
from datetime import datetime, timezone

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.errors import DuplicateEmail, InvalidInput, NotFound
from app.core.security import hash_password
from app.core.telemetry import emit
from app.models import Task, User, UserCreate, UserUpdate

logger = logging.getLogger(__name__)


class UserService:
    @staticmethod
    async def create(user_data: UserCreate, db: AsyncSession) -> User:
        email = (user_data.email or "").strip()
        name = (user_data.name or "").strip()
        if not email or not user_data.password or not name:
            logger.warning("User creation failed: missing required fields")
            raise InvalidInput("Email, password and name are required")

        logger.debug(f"Creating user with email: {email}")
        if await UserService.find_by_email(email, db) is not None:
            logger.warning(f"User creation failed: email {email} already exists")
            raise DuplicateEmail()

        user = User(email=email, name=name, password_hash=hash_password(user_data.password))
        db.add(user)
        await UserService._commit_unique_email(db, email)
        await db.refresh(user)

        logger.info(f"User created successfully: {user.id} - {user.email}")
        emit("user.registered", user_id=user.id)
        return user

    @staticmethod
    async def find_by_id(user_id: str, db: AsyncSession) -> User:
        user = await db.get(User, user_id)
        if not user:
            raise NotFound(f"User with ID {user_id} not found")
        return user

    @staticmethod
    async def find_by_email(email: str, db: AsyncSession) -> User | None:
        """Internal lookup for authentication; the result carries the hash."""
        result = await db.exec(select(User).where(User.email == email))
        return result.first()

    @staticmethod
    async def update(user_id: str, user_data: UserUpdate, db: AsyncSession) -> User:
        user = await UserService.find_by_id(user_id, db)
        update_data = user_data.model_dump(exclude_unset=True, exclude_none=True)

        if "email" in update_data:
            email = update_data["email"].strip()
            if email != user.email:
                existing = await UserService.find_by_email(email, db)
                if existing is not None:
                    logger.warning(f"User update failed: email {email} already exists")
                    raise DuplicateEmail()
            user.email = email
        if "name" in update_data:
            name = update_data["name"].strip()
            if not name:
                raise InvalidInput("Name must not be empty")
            user.name = name
        if "password" in update_data:
            user.password_hash = hash_password(update_data["password"])

        user.updated_at = datetime.now(timezone.utc)
        await UserService._commit_unique_email(db, user.email)
        await db.refresh(user)

        logger.info(f"User {user_id} updated: fields={sorted(update_data)}")
        return user

    @staticmethod
    async def remove(user_id: str, db: AsyncSession) -> None:
        user = await UserService.find_by_id(user_id, db)
        await db.execute(delete(Task).where(Task.user_id == user_id))
        await db.delete(user)
        await db.commit()

        logger.info(f"User {user_id} deleted")
        emit("user.deleted", user_id=user_id)

    @staticmethod
    async def _commit_unique_email(db: AsyncSession, email: str) -> None:
        # Two concurrent registrations can both pass the lookup; the unique index decides.
        try:
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            logger.warning(f"Duplicate entry for email {email}: {e.orig}")
            raise DuplicateEmail() from e
