"""User router - profile endpoints."""
from fastapi import APIRouter, Depends, Response, status

from timetracker.database import get_database
from timetracker.models.user import User, UserUpdate
from timetracker.routers.auth import get_current_user, get_current_user_id
from timetracker.services.query_service import QueryService
from timetracker.services.user_service import UserService


router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=User)
async def get_me(user: User = Depends(get_current_user)):
    """
    Get the current user's profile.

    - Requires authentication
    - Creates the user from token claims on first access
    """
    return user


@router.put("/me", response_model=User)
async def update_me(
    user_update: UserUpdate,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Update the current user's profile.

    - Requires authentication
    - Omitted fields are left unchanged
    """
    service = UserService(db)
    return await service.update_profile(user_id=user_id, user_update=user_update)


@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
async def deactivate_me(
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Deactivate the current user's account.

    - Requires authentication
    - Soft delete: data is kept, the account is hidden
    """
    service = UserService(db)
    await service.deactivate(user_id=user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("", response_model=list[User])
async def list_users(
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    List active users ordered by name.

    - Requires authentication
    """
    service = QueryService(db)
    return await service.list_users()


@router.get("/{target_id}", response_model=User)
async def get_user(
    target_id: str,
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """
    Get an active user by ID.

    - Requires authentication
    """
    service = UserService(db)
    return await service.get_user(target_id)
