from pydantic import BaseModel
from typing import Dict


class TaskCounts(BaseModel):
    completed: int
    total: int
    percent: float


class BudgetTotals(BaseModel):
    total: float
    paid: float
    percent: float


class HoursTracked(BaseModel):
    tracked: float
    total: float
    percent: float


class DashboardStats(BaseModel):
    tasks: TaskCounts
    budget: BudgetTotals
    hours: HoursTracked


class WorkspaceSummary(BaseModel):
    workspace_id: int
    name: str
    color: str
    total_tasks: int
    completed_tasks: int
    total_budget: float
    paid_amount: float


class StatusCounts(BaseModel):
    counts: Dict[str, int]
    total: int
