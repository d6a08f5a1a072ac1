"""Storage contract shared by every backend.

Point lookups and updates return ``None`` when the id is absent and deletes
return ``False``; they never raise for a missing row. Bad input raises
``ValidationFailure``, broken references raise ``IntegrityViolation`` and a
persistent backend that cannot do its job raises ``BackendUnavailable``.

Every list operation returns rows newest first (``created_at`` descending,
then ``id`` descending), whatever the backend.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from taskboard.core.errors import ValidationFailure
from taskboard.schemas.attachment import (
    TaskAttachmentCreate,
    TaskAttachmentResponse,
    VoiceNoteCreate,
    VoiceNoteResponse,
)
from taskboard.schemas.comment import CommentCreate, CommentResponse, CommentUpdate
from taskboard.schemas.task import (
    TaskAssigneeResponse,
    TaskCreate,
    TaskResponse,
    TaskUpdate,
)
from taskboard.schemas.user import UserCreate, UserResponse, UserUpdate
from taskboard.schemas.workspace import WorkspaceCreate, WorkspaceResponse, WorkspaceUpdate

SchemaT = TypeVar("SchemaT", bound=BaseModel)
Payload = Union[BaseModel, Mapping[str, Any]]


def coerce(schema: Type[SchemaT], data: Payload, entity: str) -> SchemaT:
    """Validate ``data`` against ``schema``, raising ``ValidationFailure``.

    An instance of ``schema`` is returned as is so the set of fields the
    caller explicitly provided survives for partial updates.
    """
    if isinstance(data, schema):
        return data
    if isinstance(data, BaseModel):
        data = data.model_dump(exclude_unset=True)
    try:
        return schema.model_validate(data)
    except ValidationError as exc:
        raise ValidationFailure.from_pydantic(entity, exc) from exc


def newest_first(rows: List[Any]) -> List[Any]:
    return sorted(rows, key=lambda row: (row.created_at, row.id), reverse=True)


class Storage(ABC):
    """Entity store for users, workspaces, tasks and everything attached to tasks."""

    name = "abstract"

    def close(self) -> None:
        """Release backend resources. No-op by default."""

    # ---- users ----

    @abstractmethod
    def get_user(self, user_id: int) -> Optional[UserResponse]: ...

    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[UserResponse]: ...

    @abstractmethod
    def get_users(self) -> List[UserResponse]: ...

    @abstractmethod
    def create_user(self, data: Union[UserCreate, Payload]) -> UserResponse: ...

    @abstractmethod
    def update_user(self, user_id: int, data: Union[UserUpdate, Payload]) -> Optional[UserResponse]: ...

    # ---- workspaces ----

    @abstractmethod
    def get_workspace(self, workspace_id: int) -> Optional[WorkspaceResponse]: ...

    @abstractmethod
    def get_workspaces(self) -> List[WorkspaceResponse]: ...

    @abstractmethod
    def create_workspace(self, data: Union[WorkspaceCreate, Payload]) -> WorkspaceResponse: ...

    @abstractmethod
    def update_workspace(
        self, workspace_id: int, data: Union[WorkspaceUpdate, Payload]
    ) -> Optional[WorkspaceResponse]: ...

    @abstractmethod
    def delete_workspace(self, workspace_id: int) -> bool:
        """Delete a workspace no task refers to.

        Raises ``IntegrityViolation`` while tasks still belong to it.
        """

    # ---- tasks ----

    @abstractmethod
    def get_task(self, task_id: int) -> Optional[TaskResponse]: ...

    @abstractmethod
    def get_tasks(self) -> List[TaskResponse]: ...

    @abstractmethod
    def get_tasks_by_workspace(self, workspace_id: int) -> List[TaskResponse]: ...

    @abstractmethod
    def get_tasks_by_user(self, user_id: int) -> List[TaskResponse]:
        """Tasks the user is assigned to or created, each task once."""

    @abstractmethod
    def get_tasks_by_status(self, status: str) -> List[TaskResponse]: ...

    @abstractmethod
    def get_tasks_between(
        self,
        start: datetime,
        end: datetime,
        include_start: bool = True,
        include_end: bool = False,
    ) -> List[TaskResponse]:
        """Tasks whose ``start_date`` lies between ``start`` and ``end``.

        Tasks without a start date are never returned.
        """

    @abstractmethod
    def create_task(self, data: Union[TaskCreate, Payload]) -> TaskResponse: ...

    @abstractmethod
    def update_task(self, task_id: int, data: Union[TaskUpdate, Payload]) -> Optional[TaskResponse]: ...

    @abstractmethod
    def delete_task(self, task_id: int) -> bool:
        """Delete a task along with its assignee links, attachments, voice notes and comments."""

    # ---- assignees ----

    @abstractmethod
    def assign_user_to_task(self, task_id: int, user_id: int) -> TaskAssigneeResponse:
        """Link a user to a task. Assigning the same pair twice returns the existing link."""

    @abstractmethod
    def remove_user_from_task(self, task_id: int, user_id: int) -> bool: ...

    @abstractmethod
    def get_task_assignees(self, task_id: int) -> List[UserResponse]:
        """Assigned users, in the order they were assigned."""

    # ---- attachments ----

    @abstractmethod
    def add_task_attachment(self, data: Union[TaskAttachmentCreate, Payload]) -> TaskAttachmentResponse: ...

    @abstractmethod
    def get_task_attachment(self, attachment_id: int) -> Optional[TaskAttachmentResponse]: ...

    @abstractmethod
    def get_task_attachments(self, task_id: int) -> List[TaskAttachmentResponse]: ...

    @abstractmethod
    def delete_task_attachment(self, attachment_id: int) -> bool: ...

    # ---- voice notes ----

    @abstractmethod
    def add_voice_note(self, data: Union[VoiceNoteCreate, Payload]) -> VoiceNoteResponse: ...

    @abstractmethod
    def get_voice_note(self, voice_note_id: int) -> Optional[VoiceNoteResponse]: ...

    @abstractmethod
    def get_voice_notes(self, task_id: int) -> List[VoiceNoteResponse]: ...

    @abstractmethod
    def delete_voice_note(self, voice_note_id: int) -> bool: ...

    # ---- comments ----

    @abstractmethod
    def add_comment(self, data: Union[CommentCreate, Payload]) -> CommentResponse: ...

    @abstractmethod
    def get_comment(self, comment_id: int) -> Optional[CommentResponse]: ...

    @abstractmethod
    def get_comments(self, task_id: int) -> List[CommentResponse]:
        """Raw comments of a task. Authors are joined by the relation service."""

    @abstractmethod
    def update_comment(self, comment_id: int, data: Union[CommentUpdate, Payload]) -> Optional[CommentResponse]: ...

    @abstractmethod
    def delete_comment(self, comment_id: int) -> bool: ...
