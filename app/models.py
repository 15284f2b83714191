import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import EmailStr, field_validator
from sqlalchemy import DateTime, String
from sqlmodel import Column, Field, SQLModel


def get_utc_now():
    """Helper function to get current UTC time with timezone"""
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


# bcrypt rejects input longer than this
BCRYPT_MAX_BYTES = 72


def check_password_length(password: str | None) -> str | None:
    if password is not None and len(password.encode()) > BCRYPT_MAX_BYTES:
        raise ValueError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes")
    return password


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class User(SQLModel, table=True):
    """Database model"""

    __tablename__ = "users"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    email: str = Field(max_length=255, unique=True, index=True)
    password_hash: str = Field(max_length=255)
    name: str = Field(max_length=128)
    created_at: datetime = Field(
        default_factory=get_utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime | None = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )


class UserCreate(SQLModel):
    """Schema for registering a user"""

    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    name: str = Field(min_length=1, max_length=128)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        return check_password_length(value)


class UserUpdate(SQLModel):
    """Schema for updating a user - all fields optional"""

    email: EmailStr | None = None
    password: str | None = Field(default=None, min_length=6, max_length=128)
    name: str | None = Field(default=None, min_length=1, max_length=128)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str | None) -> str | None:
        return check_password_length(value)


class UserResponse(SQLModel):
    """Schema for user responses; never carries the password hash"""

    id: str
    email: str
    name: str
    created_at: datetime
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class LoginRequest(SQLModel):
    email: EmailStr
    password: str = Field(min_length=1)


class LoginResponse(SQLModel):
    access_token: str
    user: UserResponse


class TaskBase(SQLModel):
    """Base model with shared fields"""

    title: str = Field(min_length=1, max_length=200, index=True)
    description: str = Field(default="")
    priority: TaskPriority = Field(
        default=TaskPriority.MEDIUM,
        sa_column=Column(String(16), nullable=False, index=True),
    )


class Task(TaskBase, table=True):
    """Database model"""

    __tablename__ = "tasks"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)
    user_id: str = Field(
        foreign_key="users.id", index=True, max_length=36, ondelete="CASCADE"
    )
    status: TaskStatus = Field(
        default=TaskStatus.PENDING,
        sa_column=Column(String(16), nullable=False, index=True),
    )
    created_at: datetime = Field(
        default_factory=get_utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime | None = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )
    completed_at: datetime | None = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )


class TaskCreate(TaskBase):
    """Schema for creating a task"""

    description: str
    priority: TaskPriority = TaskPriority.MEDIUM


class TaskUpdate(SQLModel):
    """Schema for updating a task; status is only changed through toggle"""

    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    priority: TaskPriority | None = None


class TaskResponse(TaskBase):
    """Schema for task responses"""

    id: str
    user_id: str
    priority: TaskPriority
    status: TaskStatus
    created_at: datetime
    updated_at: datetime | None = None
    completed_at: datetime | None = None

    model_config = {"from_attributes": True}


class TaskStats(SQLModel):
    total: int
    completed: int
    pending: int
    highPriority: int
