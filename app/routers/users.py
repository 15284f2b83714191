from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession

from app.database import get_db
from app.dependencies import CurrentUser
from app.models import UserResponse, UserUpdate
from app.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserResponse)
async def read_me(user: CurrentUser, db: AsyncSession = Depends(get_db)):
    return await UserService.find_by_id(user.id, db)


@router.patch("/me", response_model=UserResponse)
async def update_me(
    user_data: UserUpdate, user: CurrentUser, db: AsyncSession = Depends(get_db)
):
    """Change the caller's email, name or password"""
    return await UserService.update(user.id, user_data, db)


@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
async def delete_me(user: CurrentUser, db: AsyncSession = Depends(get_db)):
    """Delete the caller's account together with its tasks"""
    await UserService.remove(user.id, db)
