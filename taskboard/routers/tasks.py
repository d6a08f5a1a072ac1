from fastapi import APIRouter, Depends, HTTPException, status, Query
from typing import List, Optional
from datetime import datetime

from taskboard.routers.deps import get_storage
from taskboard.schemas.task import (
    TASK_STATUSES,
    TaskCreate,
    TaskResponse,
    TaskUpdate,
    TaskWithRelations,
)
from taskboard.services.relation_service import get_task_with_relations
from taskboard.services.task_service import (
    get_overdue_tasks,
    get_today_tasks,
    get_upcoming_tasks,
)
from taskboard.storage.base import Storage

router = APIRouter(prefix="/api/tasks")


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(task_data: TaskCreate, storage: Storage = Depends(get_storage)):
    return storage.create_task(task_data)


@router.get("", response_model=List[TaskResponse])
def list_tasks(
    storage: Storage = Depends(get_storage),
    status_filter: Optional[str] = Query(None, alias="status"),
    workspace_id: Optional[int] = Query(None),
    user_id: Optional[int] = Query(None)
):
    if status_filter is not None and status_filter not in TASK_STATUSES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid status")

    # un seul filtre côté store, les autres en mémoire
    if workspace_id is not None:
        tasks = storage.get_tasks_by_workspace(workspace_id)
    elif user_id is not None:
        tasks = storage.get_tasks_by_user(user_id)
    elif status_filter is not None:
        tasks = storage.get_tasks_by_status(status_filter)
    else:
        tasks = storage.get_tasks()

    if user_id is not None and workspace_id is not None:
        user_task_ids = {task.id for task in storage.get_tasks_by_user(user_id)}
        tasks = [task for task in tasks if task.id in user_task_ids]
    if status_filter is not None:
        tasks = [task for task in tasks if task.status == status_filter]

    return tasks


@router.get("/today", response_model=List[TaskResponse])
def today(storage: Storage = Depends(get_storage)):
    return get_today_tasks(storage)


@router.get("/upcoming", response_model=List[TaskResponse])
def upcoming(storage: Storage = Depends(get_storage)):
    return get_upcoming_tasks(storage)


@router.get("/overdue", response_model=List[TaskResponse])
def overdue(storage: Storage = Depends(get_storage)):
    return get_overdue_tasks(storage)


@router.get("/{task_id}", response_model=TaskWithRelations)
def get_task(task_id: int, storage: Storage = Depends(get_storage)):
    task = get_task_with_relations(storage, task_id)
    if not task:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return task


@router.patch("/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: int,
    task_data: TaskUpdate,
    storage: Storage = Depends(get_storage)
):
    task = storage.update_task(task_id, task_data)
    if not task:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return task


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(task_id: int, storage: Storage = Depends(get_storage)):
    if not storage.delete_task(task_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")


@router.post("/{task_id}/status", response_model=TaskResponse)
def update_status(
    task_id: int,
    new_status: str = Query(...),
    storage: Storage = Depends(get_storage)
):
    if new_status not in TASK_STATUSES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid status")

    # completed_at suit le statut: posé à la complétion, effacé sinon
    completed_at = datetime.now() if new_status == "completed" else None
    task = storage.update_task(task_id, {"status": new_status, "completed_at": completed_at})
    if not task:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return task
