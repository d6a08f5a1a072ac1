from fastapi import APIRouter, Depends
from typing import List

from taskboard.routers.deps import get_storage
from taskboard.schemas.dashboard import DashboardStats, StatusCounts, WorkspaceSummary
from taskboard.services.dashboard_service import (
    compute_status_counts,
    get_dashboard_stats,
    get_workspace_breakdown,
)
from taskboard.storage.base import Storage

router = APIRouter(prefix="/api/dashboard")


@router.get("/stats", response_model=DashboardStats)
def stats(storage: Storage = Depends(get_storage)):
    return get_dashboard_stats(storage)


@router.get("/workspaces", response_model=List[WorkspaceSummary])
def workspaces(storage: Storage = Depends(get_storage)):
    return get_workspace_breakdown(storage)


@router.get("/status", response_model=StatusCounts)
def status_counts(storage: Storage = Depends(get_storage)):
    return compute_status_counts(storage.get_tasks())
