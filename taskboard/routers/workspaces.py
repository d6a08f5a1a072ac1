from fastapi import APIRouter, Depends, HTTPException, status
from typing import List

from taskboard.routers.deps import get_storage
from taskboard.schemas.task import TaskResponse
from taskboard.schemas.workspace import WorkspaceCreate, WorkspaceResponse, WorkspaceUpdate
from taskboard.storage.base import Storage

router = APIRouter(prefix="/api/workspaces")


@router.get("", response_model=List[WorkspaceResponse])
def list_workspaces(storage: Storage = Depends(get_storage)):
    return storage.get_workspaces()


@router.post("", response_model=WorkspaceResponse, status_code=status.HTTP_201_CREATED)
def create_workspace(workspace_data: WorkspaceCreate, storage: Storage = Depends(get_storage)):
    return storage.create_workspace(workspace_data)


@router.get("/{workspace_id}", response_model=WorkspaceResponse)
def get_workspace(workspace_id: int, storage: Storage = Depends(get_storage)):
    workspace = storage.get_workspace(workspace_id)
    if not workspace:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Workspace not found")
    return workspace


@router.patch("/{workspace_id}", response_model=WorkspaceResponse)
def update_workspace(
    workspace_id: int,
    workspace_data: WorkspaceUpdate,
    storage: Storage = Depends(get_storage)
):
    workspace = storage.update_workspace(workspace_id, workspace_data)
    if not workspace:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Workspace not found")
    return workspace


@router.delete("/{workspace_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_workspace(workspace_id: int, storage: Storage = Depends(get_storage)):
    if not storage.delete_workspace(workspace_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Workspace not found")


@router.get("/{workspace_id}/tasks", response_model=List[TaskResponse])
def workspace_tasks(workspace_id: int, storage: Storage = Depends(get_storage)):
    return storage.get_tasks_by_workspace(workspace_id)
