"""Routes for what hangs off a task: assignees, comments, attachments, voice notes."""

from fastapi import APIRouter, Depends, HTTPException, status, Body
from typing import Any, Dict, List

from taskboard.routers.deps import get_storage
from taskboard.schemas.attachment import TaskAttachmentResponse, VoiceNoteResponse
from taskboard.schemas.comment import CommentWithUser
from taskboard.schemas.task import TaskAssigneeResponse
from taskboard.schemas.user import UserResponse
from taskboard.services.relation_service import attach_comment_authors
from taskboard.storage.base import Storage

router = APIRouter(prefix="/api/tasks/{task_id}")


def _require_task(storage: Storage, task_id: int) -> None:
    if storage.get_task(task_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")


# ---- assignees ----

@router.get("/assignees", response_model=List[UserResponse])
def list_assignees(task_id: int, storage: Storage = Depends(get_storage)):
    return storage.get_task_assignees(task_id)


@router.post("/assignees/{user_id}", response_model=TaskAssigneeResponse, status_code=status.HTTP_201_CREATED)
def assign_user(task_id: int, user_id: int, storage: Storage = Depends(get_storage)):
    _require_task(storage, task_id)
    return storage.assign_user_to_task(task_id, user_id)


@router.delete("/assignees/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_assignee(task_id: int, user_id: int, storage: Storage = Depends(get_storage)):
    if not storage.remove_user_from_task(task_id, user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Assignee not found")


# ---- comments ----

@router.get("/comments", response_model=List[CommentWithUser])
def list_comments(task_id: int, storage: Storage = Depends(get_storage)):
    return attach_comment_authors(storage, storage.get_comments(task_id))


@router.post("/comments", response_model=CommentWithUser, status_code=status.HTTP_201_CREATED)
def add_comment(
    task_id: int,
    payload: Dict[str, Any] = Body(...),
    storage: Storage = Depends(get_storage)
):
    _require_task(storage, task_id)
    comment = storage.add_comment({**payload, "task_id": task_id})
    return attach_comment_authors(storage, [comment])[0]


@router.delete("/comments/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_comment(task_id: int, comment_id: int, storage: Storage = Depends(get_storage)):
    comment = storage.get_comment(comment_id)
    if comment is None or comment.task_id != task_id or not storage.delete_comment(comment_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found")


# ---- attachments ----

@router.get("/attachments", response_model=List[TaskAttachmentResponse])
def list_attachments(task_id: int, storage: Storage = Depends(get_storage)):
    return storage.get_task_attachments(task_id)


@router.post("/attachments", response_model=TaskAttachmentResponse, status_code=status.HTTP_201_CREATED)
def add_attachment(
    task_id: int,
    payload: Dict[str, Any] = Body(...),
    storage: Storage = Depends(get_storage)
):
    # seule la référence au fichier est stockée, pas le contenu
    _require_task(storage, task_id)
    return storage.add_task_attachment({**payload, "task_id": task_id})


@router.delete("/attachments/{attachment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_attachment(task_id: int, attachment_id: int, storage: Storage = Depends(get_storage)):
    attachment = storage.get_task_attachment(attachment_id)
    if attachment is None or attachment.task_id != task_id or not storage.delete_task_attachment(attachment_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Attachment not found")


# ---- voice notes ----

@router.get("/voice-notes", response_model=List[VoiceNoteResponse])
def list_voice_notes(task_id: int, storage: Storage = Depends(get_storage)):
    return storage.get_voice_notes(task_id)


@router.post("/voice-notes", response_model=VoiceNoteResponse, status_code=status.HTTP_201_CREATED)
def add_voice_note(
    task_id: int,
    payload: Dict[str, Any] = Body(...),
    storage: Storage = Depends(get_storage)
):
    _require_task(storage, task_id)
    return storage.add_voice_note({**payload, "task_id": task_id})


@router.delete("/voice-notes/{voice_note_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_voice_note(task_id: int, voice_note_id: int, storage: Storage = Depends(get_storage)):
    voice_note = storage.get_voice_note(voice_note_id)
    if voice_note is None or voice_note.task_id != task_id or not storage.delete_voice_note(voice_note_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Voice note not found")
