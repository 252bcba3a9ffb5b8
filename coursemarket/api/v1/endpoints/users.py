from fastapi import APIRouter, Depends, Response, status
from typing import List

from coursemarket.api.dependencies import get_storage, require_admin
from coursemarket.core.exceptions import UserNotFound
from coursemarket.core.security import get_password_hash
from coursemarket.schemas.user import Identity, UserResponse, UserUpdate
from coursemarket.storage import Storage

router = APIRouter()


@router.get("", response_model=List[UserResponse])
def read_users(
    storage: Storage = Depends(get_storage),
    identity: Identity = Depends(require_admin)
):
    """List all users (admins only)"""
    return storage.list_users()


@router.get("/{user_id}", response_model=UserResponse)
def read_user(
    user_id: int,
    storage: Storage = Depends(get_storage),
    identity: Identity = Depends(require_admin)
):
    user = storage.get_user(user_id)
    if not user:
        raise UserNotFound()
    return user


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    user_update: UserUpdate,
    storage: Storage = Depends(get_storage),
    identity: Identity = Depends(require_admin)
):
    """Patch email, password or role of a user"""
    changes = user_update.model_dump(exclude_unset=True)

    password = changes.pop("password", None)
    if password is not None:
        changes["hashed_password"] = get_password_hash(password)

    # Explicit nulls carry no meaning for these columns
    changes = {field: value for field, value in changes.items() if value is not None}

    return storage.update_user(user_id, changes)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: int,
    storage: Storage = Depends(get_storage),
    identity: Identity = Depends(require_admin)
):
    storage.delete_user(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
