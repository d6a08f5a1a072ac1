from fastapi import APIRouter, Depends, HTTPException, Request, status
from typing import List

from taskboard.routers.deps import get_storage
from taskboard.schemas.task import TaskResponse
from taskboard.schemas.user import UserResponse
from taskboard.storage.base import Storage

router = APIRouter(prefix="/api")


@router.get("/me", response_model=UserResponse)
def me(request: Request, storage: Storage = Depends(get_storage)):
    # pas d'authentification: utilisateur de démo configuré
    user = storage.get_user(request.app.state.settings.DEMO_USER_ID)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get("/users", response_model=List[UserResponse])
def list_users(storage: Storage = Depends(get_storage)):
    return storage.get_users()


@router.get("/users/{user_id}", response_model=UserResponse)
def get_user(user_id: int, storage: Storage = Depends(get_storage)):
    user = storage.get_user(user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get("/users/{user_id}/tasks", response_model=List[TaskResponse])
def user_tasks(user_id: int, storage: Storage = Depends(get_storage)):
    return storage.get_tasks_by_user(user_id)
