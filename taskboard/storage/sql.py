"""Relational backend on top of SQLAlchemy.

Every public method runs in its own session and transaction. Database
errors never leave this module raw: integrity errors become
``IntegrityViolation`` and every other ``SQLAlchemyError`` becomes
``BackendUnavailable``.
"""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, List, Optional

from sqlalchemy import or_
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from taskboard.core.database import Base, make_engine, make_session_factory
from taskboard.core.errors import BackendUnavailable, IntegrityViolation
from taskboard.core.security import hash_password
from taskboard.models.attachment import TaskAttachment, VoiceNote
from taskboard.models.comment import Comment
from taskboard.models.task import Task
from taskboard.models.task_assignee import TaskAssignee
from taskboard.models.user import User
from taskboard.models.workspace import Workspace
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
from taskboard.storage.base import Storage, coerce

logger = logging.getLogger(__name__)


class SqlStorage(Storage):
    name = "database"

    def __init__(self, session_factory: sessionmaker, engine: Optional[Engine] = None):
        self._session_factory = session_factory
        self._engine = engine if engine is not None else session_factory.kw.get("bind")

    @classmethod
    def from_url(cls, database_url: str, echo: bool = False) -> "SqlStorage":
        engine = make_engine(database_url, echo=echo)
        return cls(make_session_factory(engine), engine=engine)

    def create_schema(self) -> None:
        """Create missing tables. Existing tables are left untouched."""
        try:
            Base.metadata.create_all(bind=self._engine)
        except SQLAlchemyError as exc:
            logger.error(f"Schema creation failed: {exc}")
            raise BackendUnavailable(f"Could not create schema: {exc}") from exc

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            logger.warning(f"Integrity error: {exc.orig}")
            raise IntegrityViolation(str(exc.orig)) from exc
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error(f"Database error: {exc}")
            raise BackendUnavailable(f"Storage backend unavailable: {exc}") from exc
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    # ---- reference checks ----

    @staticmethod
    def _require(db: Session, model, row_id: int, field: str) -> None:
        if db.get(model, row_id) is None:
            raise IntegrityViolation(f"{field}={row_id} does not reference an existing {model.__tablename__} row")

    @staticmethod
    def _require_unique_username(db: Session, username: str, user_id: Optional[int] = None) -> None:
        existing = db.query(User).filter(User.username == username).first()
        if existing is not None and existing.id != user_id:
            raise IntegrityViolation(f"username '{username}' is already taken")

    @staticmethod
    def _insert(db: Session, row):
        db.add(row)
        db.flush()
        db.refresh(row)
        return row

    # ---- users ----

    def get_user(self, user_id: int) -> Optional[UserResponse]:
        with self._session() as db:
            user = db.get(User, user_id)
            return UserResponse.model_validate(user) if user else None

    def get_user_by_username(self, username: str) -> Optional[UserResponse]:
        with self._session() as db:
            user = db.query(User).filter(User.username == username).first()
            return UserResponse.model_validate(user) if user else None

    def get_users(self) -> List[UserResponse]:
        with self._session() as db:
            users = db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()
            return [UserResponse.model_validate(user) for user in users]

    def create_user(self, data) -> UserResponse:
        user_data = coerce(UserCreate, data, "user")
        with self._session() as db:
            self._require_unique_username(db, user_data.username)
            user = User(
                username=user_data.username,
                password_hash=hash_password(user_data.password),
                full_name=user_data.full_name,
                email=user_data.email,
                avatar_url=user_data.avatar_url,
                created_at=datetime.now(),
            )
            return UserResponse.model_validate(self._insert(db, user))

    def update_user(self, user_id: int, data) -> Optional[UserResponse]:
        changes = coerce(UserUpdate, data, "user").changes()
        with self._session() as db:
            user = db.get(User, user_id)
            if user is None:
                return None

            if "username" in changes:
                self._require_unique_username(db, changes["username"], user_id)
            if "password" in changes:
                changes["password_hash"] = hash_password(changes.pop("password"))

            for field, value in changes.items():
                setattr(user, field, value)
            db.flush()
            return UserResponse.model_validate(user)

    # ---- workspaces ----

    def get_workspace(self, workspace_id: int) -> Optional[WorkspaceResponse]:
        with self._session() as db:
            workspace = db.get(Workspace, workspace_id)
            return WorkspaceResponse.model_validate(workspace) if workspace else None

    def get_workspaces(self) -> List[WorkspaceResponse]:
        with self._session() as db:
            workspaces = db.query(Workspace).order_by(Workspace.created_at.desc(), Workspace.id.desc()).all()
            return [WorkspaceResponse.model_validate(w) for w in workspaces]

    def create_workspace(self, data) -> WorkspaceResponse:
        workspace_data = coerce(WorkspaceCreate, data, "workspace")
        with self._session() as db:
            workspace = Workspace(**workspace_data.model_dump(), created_at=datetime.now())
            return WorkspaceResponse.model_validate(self._insert(db, workspace))

    def update_workspace(self, workspace_id: int, data) -> Optional[WorkspaceResponse]:
        changes = coerce(WorkspaceUpdate, data, "workspace").changes()
        with self._session() as db:
            workspace = db.get(Workspace, workspace_id)
            if workspace is None:
                return None

            for field, value in changes.items():
                setattr(workspace, field, value)
            db.flush()
            return WorkspaceResponse.model_validate(workspace)

    def delete_workspace(self, workspace_id: int) -> bool:
        with self._session() as db:
            workspace = db.get(Workspace, workspace_id)
            if workspace is None:
                return False
            if db.query(Task.id).filter(Task.workspace_id == workspace_id).first() is not None:
                raise IntegrityViolation(f"workspace {workspace_id} still has tasks")
            db.delete(workspace)
            return True

    # ---- tasks ----

    @staticmethod
    def _task_rows(query) -> List[TaskResponse]:
        tasks = query.order_by(Task.created_at.desc(), Task.id.desc()).all()
        return [TaskResponse.model_validate(task) for task in tasks]

    def get_task(self, task_id: int) -> Optional[TaskResponse]:
        with self._session() as db:
            task = db.get(Task, task_id)
            return TaskResponse.model_validate(task) if task else None

    def get_tasks(self) -> List[TaskResponse]:
        with self._session() as db:
            return self._task_rows(db.query(Task))

    def get_tasks_by_workspace(self, workspace_id: int) -> List[TaskResponse]:
        with self._session() as db:
            return self._task_rows(db.query(Task).filter(Task.workspace_id == workspace_id))

    def get_tasks_by_user(self, user_id: int) -> List[TaskResponse]:
        with self._session() as db:
            assigned = db.query(TaskAssignee.task_id).filter(TaskAssignee.user_id == user_id)
            return self._task_rows(
                db.query(Task).filter(or_(Task.created_by_id == user_id, Task.id.in_(assigned)))
            )

    def get_tasks_by_status(self, status: str) -> List[TaskResponse]:
        with self._session() as db:
            return self._task_rows(db.query(Task).filter(Task.status == status))

    def get_tasks_between(self, start, end, include_start=True, include_end=False) -> List[TaskResponse]:
        with self._session() as db:
            lower = Task.start_date >= start if include_start else Task.start_date > start
            upper = Task.start_date <= end if include_end else Task.start_date < end
            return self._task_rows(db.query(Task).filter(Task.start_date.is_not(None), lower, upper))

    def create_task(self, data) -> TaskResponse:
        task_data = coerce(TaskCreate, data, "task")
        with self._session() as db:
            self._require(db, Workspace, task_data.workspace_id, "workspace_id")
            self._require(db, User, task_data.created_by_id, "created_by_id")

            now = datetime.now()
            task = Task(**task_data.model_dump(), created_at=now, updated_at=now)
            return TaskResponse.model_validate(self._insert(db, task))

    def update_task(self, task_id: int, data) -> Optional[TaskResponse]:
        changes = coerce(TaskUpdate, data, "task").changes()
        with self._session() as db:
            task = db.get(Task, task_id)
            if task is None:
                return None

            if "workspace_id" in changes:
                self._require(db, Workspace, changes["workspace_id"], "workspace_id")
            if "created_by_id" in changes:
                self._require(db, User, changes["created_by_id"], "created_by_id")

            for field, value in changes.items():
                setattr(task, field, value)
            task.updated_at = datetime.now()
            db.flush()
            return TaskResponse.model_validate(task)

    def delete_task(self, task_id: int) -> bool:
        with self._session() as db:
            task = db.get(Task, task_id)
            if task is None:
                return False

            # la cascade FK n'est pas garantie partout (SQLite sans PRAGMA), on supprime explicitement
            for model in (TaskAssignee, TaskAttachment, VoiceNote, Comment):
                db.query(model).filter(model.task_id == task_id).delete(synchronize_session=False)
            db.delete(task)
            return True

    # ---- assignees ----

    def assign_user_to_task(self, task_id: int, user_id: int) -> TaskAssigneeResponse:
        link_data = coerce(TaskAssigneeCreate, {"task_id": task_id, "user_id": user_id}, "assignee")
        with self._session() as db:
            self._require(db, Task, link_data.task_id, "task_id")
            self._require(db, User, link_data.user_id, "user_id")

            existing = db.query(TaskAssignee).filter(
                TaskAssignee.task_id == link_data.task_id,
                TaskAssignee.user_id == link_data.user_id,
            ).first()
            if existing is not None:
                return TaskAssigneeResponse.model_validate(existing)

            link = TaskAssignee(**link_data.model_dump())
            return TaskAssigneeResponse.model_validate(self._insert(db, link))

    def remove_user_from_task(self, task_id: int, user_id: int) -> bool:
        with self._session() as db:
            deleted = db.query(TaskAssignee).filter(
                TaskAssignee.task_id == task_id,
                TaskAssignee.user_id == user_id,
            ).delete(synchronize_session=False)
            return deleted > 0

    def get_task_assignees(self, task_id: int) -> List[UserResponse]:
        with self._session() as db:
            users = (
                db.query(User)
                .join(TaskAssignee, TaskAssignee.user_id == User.id)
                .filter(TaskAssignee.task_id == task_id)
                .order_by(TaskAssignee.id)
                .all()
            )
            return [UserResponse.model_validate(user) for user in users]

    # ---- attachments ----

    def add_task_attachment(self, data) -> TaskAttachmentResponse:
        attachment_data = coerce(TaskAttachmentCreate, data, "attachment")
        with self._session() as db:
            self._require(db, Task, attachment_data.task_id, "task_id")
            self._require(db, User, attachment_data.uploaded_by_id, "uploaded_by_id")

            attachment = TaskAttachment(**attachment_data.model_dump(), uploaded_at=datetime.now())
            return TaskAttachmentResponse.model_validate(self._insert(db, attachment))

    def get_task_attachment(self, attachment_id: int) -> Optional[TaskAttachmentResponse]:
        with self._session() as db:
            attachment = db.get(TaskAttachment, attachment_id)
            return TaskAttachmentResponse.model_validate(attachment) if attachment else None

    def get_task_attachments(self, task_id: int) -> List[TaskAttachmentResponse]:
        with self._session() as db:
            attachments = (
                db.query(TaskAttachment)
                .filter(TaskAttachment.task_id == task_id)
                .order_by(TaskAttachment.uploaded_at.desc(), TaskAttachment.id.desc())
                .all()
            )
            return [TaskAttachmentResponse.model_validate(a) for a in attachments]

    def delete_task_attachment(self, attachment_id: int) -> bool:
        with self._session() as db:
            return db.query(TaskAttachment).filter(TaskAttachment.id == attachment_id).delete() > 0

    # ---- voice notes ----

    def add_voice_note(self, data) -> VoiceNoteResponse:
        voice_note_data = coerce(VoiceNoteCreate, data, "voice note")
        with self._session() as db:
            self._require(db, Task, voice_note_data.task_id, "task_id")
            self._require(db, User, voice_note_data.recorded_by_id, "recorded_by_id")

            voice_note = VoiceNote(**voice_note_data.model_dump(), recorded_at=datetime.now())
            return VoiceNoteResponse.model_validate(self._insert(db, voice_note))

    def get_voice_note(self, voice_note_id: int) -> Optional[VoiceNoteResponse]:
        with self._session() as db:
            voice_note = db.get(VoiceNote, voice_note_id)
            return VoiceNoteResponse.model_validate(voice_note) if voice_note else None

    def get_voice_notes(self, task_id: int) -> List[VoiceNoteResponse]:
        with self._session() as db:
            notes = (
                db.query(VoiceNote)
                .filter(VoiceNote.task_id == task_id)
                .order_by(VoiceNote.recorded_at.desc(), VoiceNote.id.desc())
                .all()
            )
            return [VoiceNoteResponse.model_validate(n) for n in notes]

    def delete_voice_note(self, voice_note_id: int) -> bool:
        with self._session() as db:
            return db.query(VoiceNote).filter(VoiceNote.id == voice_note_id).delete() > 0

    # ---- comments ----

    def add_comment(self, data) -> CommentResponse:
        comment_data = coerce(CommentCreate, data, "comment")
        with self._session() as db:
            self._require(db, Task, comment_data.task_id, "task_id")
            self._require(db, User, comment_data.user_id, "user_id")

            now = datetime.now()
            comment = Comment(**comment_data.model_dump(), created_at=now, updated_at=now)
            return CommentResponse.model_validate(self._insert(db, comment))

    def get_comment(self, comment_id: int) -> Optional[CommentResponse]:
        with self._session() as db:
            comment = db.get(Comment, comment_id)
            return CommentResponse.model_validate(comment) if comment else None

    def get_comments(self, task_id: int) -> List[CommentResponse]:
        with self._session() as db:
            comments = (
                db.query(Comment)
                .filter(Comment.task_id == task_id)
                .order_by(Comment.created_at.desc(), Comment.id.desc())
                .all()
            )
            return [CommentResponse.model_validate(c) for c in comments]

    def update_comment(self, comment_id: int, data) -> Optional[CommentResponse]:
        changes = coerce(CommentUpdate, data, "comment").changes()
        with self._session() as db:
            comment = db.get(Comment, comment_id)
            if comment is None:
                return None

            for field, value in changes.items():
                setattr(comment, field, value)
            comment.updated_at = datetime.now()
            db.flush()
            return CommentResponse.model_validate(comment)

    def delete_comment(self, comment_id: int) -> bool:
        with self._session() as db:
            return db.query(Comment).filter(Comment.id == comment_id).delete() > 0
