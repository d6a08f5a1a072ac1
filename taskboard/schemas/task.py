"""Pydantic schemas for task request/response validation."""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from typing import ClassVar, Optional, List, Literal, Tuple

from taskboard.schemas.base import PartialUpdate, to_naive_local
from taskboard.schemas.comment import CommentWithUser
from taskboard.schemas.attachment import TaskAttachmentResponse, VoiceNoteResponse
from taskboard.schemas.user import UserResponse
from taskboard.schemas.workspace import WorkspaceResponse

TaskStatus = Literal["to-do", "in-progress", "completed", "on-hold", "cancelled"]
TaskPriority = Literal["low", "medium", "high", "urgent"]

TASK_STATUSES = ("to-do", "in-progress", "completed", "on-hold", "cancelled")
TASK_PRIORITIES = ("low", "medium", "high", "urgent")


class TaskCreate(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    status: TaskStatus = "to-do"
    priority: TaskPriority = "medium"
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    workspace_id: int
    created_by_id: int
    total_budget: float = Field(default=0, ge=0)
    paid_amount: float = Field(default=0, ge=0)

    # dates stockées en heure locale naïve
    normalize_dates = field_validator("start_date", "end_date")(to_naive_local)


class TaskUpdate(PartialUpdate):
    """Schema for updating an existing task.

    ``completed_at`` is set by the caller; the store does not derive it
    from ``status``.
    """

    non_nullable: ClassVar[Tuple[str, ...]] = ("title", "status", "priority", "workspace_id", "created_by_id", "total_budget", "paid_amount")

    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    workspace_id: Optional[int] = None
    created_by_id: Optional[int] = None
    total_budget: Optional[float] = Field(default=None, ge=0)
    paid_amount: Optional[float] = Field(default=None, ge=0)
    completed_at: Optional[datetime] = None

    normalize_dates = field_validator("start_date", "end_date", "completed_at")(to_naive_local)


class TaskResponse(BaseModel):
    """Schema for task responses."""

    id: int
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    workspace_id: int
    created_by_id: int
    total_budget: float
    paid_amount: float
    created_at: datetime
    updated_at: datetime
    completed_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class TaskAssigneeCreate(BaseModel):
    task_id: int
    user_id: int


class TaskAssigneeResponse(BaseModel):
    id: int
    task_id: int
    user_id: int

    model_config = ConfigDict(from_attributes=True)


class TaskWithRelations(TaskResponse):
    """A task with everything hanging off it, built at read time."""

    assignees: List[UserResponse] = []
    attachments: List[TaskAttachmentResponse] = []
    voice_notes: List[VoiceNoteResponse] = []
    comments: List[CommentWithUser] = []
    workspace: Optional[WorkspaceResponse] = None
    created_by: Optional[UserResponse] = None
