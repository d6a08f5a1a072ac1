"""Dashboard statistics, recomputed from the task list on every call."""

from typing import Dict, List

from taskboard.schemas.dashboard import (
    BudgetTotals,
    DashboardStats,
    HoursTracked,
    StatusCounts,
    TaskCounts,
    WorkspaceSummary,
)
from taskboard.schemas.task import TASK_STATUSES, TaskResponse
from taskboard.schemas.workspace import WorkspaceResponse
from taskboard.storage.base import Storage

# pas de suivi du temps réel pour l'instant: valeurs fixes affichées par le dashboard
PLACEHOLDER_HOURS_TRACKED = 32.5
PLACEHOLDER_HOURS_TOTAL = 40.0


def _percent(part: float, whole: float) -> float:
    if whole <= 0:
        return 0.0
    return round(part / whole * 100, 2)


def compute_dashboard_stats(tasks: List[TaskResponse]) -> DashboardStats:
    total_tasks = len(tasks)
    completed_tasks = sum(1 for task in tasks if task.status == "completed")

    total_budget = sum(task.total_budget or 0 for task in tasks)
    paid_amount = sum(task.paid_amount or 0 for task in tasks)

    return DashboardStats(
        tasks=TaskCounts(
            completed=completed_tasks,
            total=total_tasks,
            percent=_percent(completed_tasks, total_tasks),
        ),
        budget=BudgetTotals(
            total=total_budget,
            paid=paid_amount,
            percent=_percent(paid_amount, total_budget),
        ),
        hours=HoursTracked(
            tracked=PLACEHOLDER_HOURS_TRACKED,
            total=PLACEHOLDER_HOURS_TOTAL,
            percent=_percent(PLACEHOLDER_HOURS_TRACKED, PLACEHOLDER_HOURS_TOTAL),
        ),
    )


def compute_workspace_breakdown(
    tasks: List[TaskResponse], workspaces: List[WorkspaceResponse]
) -> List[WorkspaceSummary]:
    summaries: Dict[int, WorkspaceSummary] = {
        w.id: WorkspaceSummary(
            workspace_id=w.id,
            name=w.name,
            color=w.color,
            total_tasks=0,
            completed_tasks=0,
            total_budget=0,
            paid_amount=0,
        )
        for w in workspaces
    }

    for task in tasks:
        summary = summaries.get(task.workspace_id)
        if summary is None:
            continue  # tâche orpheline
        summary.total_tasks += 1
        if task.status == "completed":
            summary.completed_tasks += 1
        summary.total_budget += task.total_budget or 0
        summary.paid_amount += task.paid_amount or 0

    return list(summaries.values())


def compute_status_counts(tasks: List[TaskResponse]) -> StatusCounts:
    counts = {status: 0 for status in TASK_STATUSES}
    for task in tasks:
        counts[task.status] = counts.get(task.status, 0) + 1
    return StatusCounts(counts=counts, total=len(tasks))


def get_dashboard_stats(storage: Storage) -> DashboardStats:
    return compute_dashboard_stats(storage.get_tasks())


def get_workspace_breakdown(storage: Storage) -> List[WorkspaceSummary]:
    return compute_workspace_breakdown(storage.get_tasks(), storage.get_workspaces())
