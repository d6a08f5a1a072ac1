"""In-process reference backend.

Each entity family lives in a dict keyed by id, with its own counter
starting at 1. Counters only move forward, so ids are never reused by the
same instance.
"""

import itertools
import logging
from datetime import datetime
from typing import Dict, List, Optional

from taskboard.core.errors import IntegrityViolation
from taskboard.core.security import hash_password
from taskboard.schemas.attachment import (
    TaskAttachmentCreate,
    TaskAttachmentResponse,
    VoiceNoteCreate,
    VoiceNoteResponse,
)
from taskboard.schemas.comment import CommentCreate, CommentResponse, CommentUpdate
from taskboard.schemas.task import (
    TaskAssigneeCreate,
    TaskAssigneeResponse,
    TaskCreate,
    TaskResponse,
    TaskUpdate,
)
from taskboard.schemas.user import UserCreate, UserResponse, UserUpdate
from taskboard.schemas.workspace import WorkspaceCreate, WorkspaceResponse, WorkspaceUpdate
from taskboard.storage.base import Storage, coerce, newest_first

logger = logging.getLogger(__name__)


class MemStorage(Storage):
    name = "memory"

    def __init__(self, seed: bool = True, now: Optional[datetime] = None):
        self.users: Dict[int, UserResponse] = {}
        self.password_hashes: Dict[int, str] = {}
        self.workspaces: Dict[int, WorkspaceResponse] = {}
        self.tasks: Dict[int, TaskResponse] = {}
        self.task_assignees: Dict[int, TaskAssigneeResponse] = {}
        self.task_attachments: Dict[int, TaskAttachmentResponse] = {}
        self.voice_notes: Dict[int, VoiceNoteResponse] = {}
        self.comments: Dict[int, CommentResponse] = {}

        self._user_ids = itertools.count(1)
        self._workspace_ids = itertools.count(1)
        self._task_ids = itertools.count(1)
        self._assignee_ids = itertools.count(1)
        self._attachment_ids = itertools.count(1)
        self._voice_note_ids = itertools.count(1)
        self._comment_ids = itertools.count(1)

        if seed:
            # import local: seed.py passe par le contrat Storage
            from taskboard.storage.seed import seed_demo_data

            seed_demo_data(self, now=now)

        logger.info(f"MemStorage ready: {len(self.users)} users, {len(self.tasks)} tasks")

    # ---- reference checks ----

    def _require_user(self, user_id: int, field: str) -> None:
        if user_id not in self.users:
            raise IntegrityViolation(f"{field}={user_id} does not reference an existing user")

    def _require_workspace(self, workspace_id: int) -> None:
        if workspace_id not in self.workspaces:
            raise IntegrityViolation(f"workspace_id={workspace_id} does not reference an existing workspace")

    def _require_task(self, task_id: int) -> None:
        if task_id not in self.tasks:
            raise IntegrityViolation(f"task_id={task_id} does not reference an existing task")

    def _require_unique_username(self, username: str, user_id: Optional[int] = None) -> None:
        existing = self.get_user_by_username(username)
        if existing is not None and existing.id != user_id:
            raise IntegrityViolation(f"username '{username}' is already taken")

    # ---- users ----

    def get_user(self, user_id: int) -> Optional[UserResponse]:
        return self.users.get(user_id)

    def get_user_by_username(self, username: str) -> Optional[UserResponse]:
        return next((user for user in self.users.values() if user.username == username), None)

    def get_users(self) -> List[UserResponse]:
        return newest_first(list(self.users.values()))

    def create_user(self, data) -> UserResponse:
        user_data = coerce(UserCreate, data, "user")
        self._require_unique_username(user_data.username)

        user_id = next(self._user_ids)
        fields = user_data.model_dump(exclude={"password"})
        user = UserResponse(id=user_id, created_at=datetime.now(), **fields)
        self.users[user_id] = user
        self.password_hashes[user_id] = hash_password(user_data.password)
        return user

    def update_user(self, user_id: int, data) -> Optional[UserResponse]:
        changes = coerce(UserUpdate, data, "user").changes()
        user = self.users.get(user_id)
        if user is None:
            return None

        if "username" in changes:
            self._require_unique_username(changes["username"], user_id)
        if "password" in changes:
            self.password_hashes[user_id] = hash_password(changes.pop("password"))

        updated = user.model_copy(update=changes)
        self.users[user_id] = updated
        return updated

    # ---- workspaces ----

    def get_workspace(self, workspace_id: int) -> Optional[WorkspaceResponse]:
        return self.workspaces.get(workspace_id)

    def get_workspaces(self) -> List[WorkspaceResponse]:
        return newest_first(list(self.workspaces.values()))

    def create_workspace(self, data) -> WorkspaceResponse:
        workspace_data = coerce(WorkspaceCreate, data, "workspace")
        workspace_id = next(self._workspace_ids)
        workspace = WorkspaceResponse(id=workspace_id, created_at=datetime.now(), **workspace_data.model_dump())
        self.workspaces[workspace_id] = workspace
        return workspace

    def update_workspace(self, workspace_id: int, data) -> Optional[WorkspaceResponse]:
        changes = coerce(WorkspaceUpdate, data, "workspace").changes()
        workspace = self.workspaces.get(workspace_id)
        if workspace is None:
            return None

        updated = workspace.model_copy(update=changes)
        self.workspaces[workspace_id] = updated
        return updated

    def delete_workspace(self, workspace_id: int) -> bool:
        if workspace_id not in self.workspaces:
            return False
        if any(task.workspace_id == workspace_id for task in self.tasks.values()):
            raise IntegrityViolation(f"workspace {workspace_id} still has tasks")
        del self.workspaces[workspace_id]
        return True

    # ---- tasks ----

    def get_task(self, task_id: int) -> Optional[TaskResponse]:
        return self.tasks.get(task_id)

    def get_tasks(self) -> List[TaskResponse]:
        return newest_first(list(self.tasks.values()))

    def get_tasks_by_workspace(self, workspace_id: int) -> List[TaskResponse]:
        return newest_first([task for task in self.tasks.values() if task.workspace_id == workspace_id])

    def get_tasks_by_user(self, user_id: int) -> List[TaskResponse]:
        assigned_task_ids = {link.task_id for link in self.task_assignees.values() if link.user_id == user_id}
        return newest_first([
            task for task in self.tasks.values()
            if task.id in assigned_task_ids or task.created_by_id == user_id
        ])

    def get_tasks_by_status(self, status: str) -> List[TaskResponse]:
        return newest_first([task for task in self.tasks.values() if task.status == status])

    def get_tasks_between(self, start, end, include_start=True, include_end=False) -> List[TaskResponse]:
        def in_range(value: Optional[datetime]) -> bool:
            if value is None:
                return False
            after_start = value >= start if include_start else value > start
            before_end = value <= end if include_end else value < end
            return after_start and before_end

        return newest_first([task for task in self.tasks.values() if in_range(task.start_date)])

    def create_task(self, data) -> TaskResponse:
        task_data = coerce(TaskCreate, data, "task")
        self._require_workspace(task_data.workspace_id)
        self._require_user(task_data.created_by_id, "created_by_id")

        task_id = next(self._task_ids)
        now = datetime.now()
        task = TaskResponse(id=task_id, created_at=now, updated_at=now, completed_at=None, **task_data.model_dump())
        self.tasks[task_id] = task
        return task

    def update_task(self, task_id: int, data) -> Optional[TaskResponse]:
        changes = coerce(TaskUpdate, data, "task").changes()
        task = self.tasks.get(task_id)
        if task is None:
            return None

        if "workspace_id" in changes:
            self._require_workspace(changes["workspace_id"])
        if "created_by_id" in changes:
            self._require_user(changes["created_by_id"], "created_by_id")

        changes["updated_at"] = datetime.now()
        updated = task.model_copy(update=changes)
        self.tasks[task_id] = updated
        return updated

    def delete_task(self, task_id: int) -> bool:
        if self.tasks.pop(task_id, None) is None:
            return False

        # cascade vers les lignes dépendantes
        for table in (self.task_assignees, self.task_attachments, self.voice_notes, self.comments):
            for row_id in [row_id for row_id, row in table.items() if row.task_id == task_id]:
                del table[row_id]
        return True

    # ---- assignees ----

    def assign_user_to_task(self, task_id: int, user_id: int) -> TaskAssigneeResponse:
        link_data = coerce(TaskAssigneeCreate, {"task_id": task_id, "user_id": user_id}, "assignee")
        self._require_task(link_data.task_id)
        self._require_user(link_data.user_id, "user_id")

        for link in self.task_assignees.values():
            if link.task_id == link_data.task_id and link.user_id == link_data.user_id:
                return link

        link_id = next(self._assignee_ids)
        link = TaskAssigneeResponse(id=link_id, **link_data.model_dump())
        self.task_assignees[link_id] = link
        return link

    def remove_user_from_task(self, task_id: int, user_id: int) -> bool:
        for link_id, link in self.task_assignees.items():
            if link.task_id == task_id and link.user_id == user_id:
                del self.task_assignees[link_id]
                return True
        return False

    def get_task_assignees(self, task_id: int) -> List[UserResponse]:
        links = sorted(
            (link for link in self.task_assignees.values() if link.task_id == task_id),
            key=lambda link: link.id,
        )
        users = []
        for link in links:
            user = self.users.get(link.user_id)
            if user is not None:
                users.append(user)
        return users

    # ---- attachments ----

    def add_task_attachment(self, data) -> TaskAttachmentResponse:
        attachment_data = coerce(TaskAttachmentCreate, data, "attachment")
        self._require_task(attachment_data.task_id)
        self._require_user(attachment_data.uploaded_by_id, "uploaded_by_id")

        attachment_id = next(self._attachment_ids)
        attachment = TaskAttachmentResponse(
            id=attachment_id, uploaded_at=datetime.now(), **attachment_data.model_dump()
        )
        self.task_attachments[attachment_id] = attachment
        return attachment

    def get_task_attachment(self, attachment_id: int) -> Optional[TaskAttachmentResponse]:
        return self.task_attachments.get(attachment_id)

    def get_task_attachments(self, task_id: int) -> List[TaskAttachmentResponse]:
        attachments = [a for a in self.task_attachments.values() if a.task_id == task_id]
        return sorted(attachments, key=lambda a: (a.uploaded_at, a.id), reverse=True)

    def delete_task_attachment(self, attachment_id: int) -> bool:
        return self.task_attachments.pop(attachment_id, None) is not None

    # ---- voice notes ----

    def add_voice_note(self, data) -> VoiceNoteResponse:
        voice_note_data = coerce(VoiceNoteCreate, data, "voice note")
        self._require_task(voice_note_data.task_id)
        self._require_user(voice_note_data.recorded_by_id, "recorded_by_id")

        voice_note_id = next(self._voice_note_ids)
        voice_note = VoiceNoteResponse(id=voice_note_id, recorded_at=datetime.now(), **voice_note_data.model_dump())
        self.voice_notes[voice_note_id] = voice_note
        return voice_note

    def get_voice_note(self, voice_note_id: int) -> Optional[VoiceNoteResponse]:
        return self.voice_notes.get(voice_note_id)

    def get_voice_notes(self, task_id: int) -> List[VoiceNoteResponse]:
        notes = [n for n in self.voice_notes.values() if n.task_id == task_id]
        return sorted(notes, key=lambda n: (n.recorded_at, n.id), reverse=True)

    def delete_voice_note(self, voice_note_id: int) -> bool:
        return self.voice_notes.pop(voice_note_id, None) is not None

    # ---- comments ----

    def add_comment(self, data) -> CommentResponse:
        comment_data = coerce(CommentCreate, data, "comment")
        self._require_task(comment_data.task_id)
        self._require_user(comment_data.user_id, "user_id")

        comment_id = next(self._comment_ids)
        now = datetime.now()
        comment = CommentResponse(id=comment_id, created_at=now, updated_at=now, **comment_data.model_dump())
        self.comments[comment_id] = comment
        return comment

    def get_comment(self, comment_id: int) -> Optional[CommentResponse]:
        return self.comments.get(comment_id)

    def get_comments(self, task_id: int) -> List[CommentResponse]:
        return newest_first([c for c in self.comments.values() if c.task_id == task_id])

    def update_comment(self, comment_id: int, data) -> Optional[CommentResponse]:
        changes = coerce(CommentUpdate, data, "comment").changes()
        comment = self.comments.get(comment_id)
        if comment is None:
            return None

        changes["updated_at"] = datetime.now()
        updated = comment.model_copy(update=changes)
        self.comments[comment_id] = updated
        return updated

    def delete_comment(self, comment_id: int) -> bool:
        return self.comments.pop(comment_id, None) is not None
