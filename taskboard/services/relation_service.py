"""Assemble a task with everything attached to it.

Nothing here is cached or persisted: each call reads the current state of
the store. The reads are not wrapped in a transaction, so a task deleted
by someone else halfway through resolution comes back with whatever child
rows were still present when they were fetched.
"""

from typing import Dict, Iterable, List, Optional

from taskboard.schemas.comment import CommentResponse, CommentWithUser
from taskboard.schemas.task import TaskResponse, TaskWithRelations
from taskboard.schemas.user import UserResponse
from taskboard.storage.base import Storage


class UserCache:
    """Users fetched during one resolution pass, looked up at most once each."""

    def __init__(self, storage: Storage):
        self._storage = storage
        self._users: Dict[int, Optional[UserResponse]] = {}

    def get(self, user_id: int) -> Optional[UserResponse]:
        if user_id not in self._users:
            self._users[user_id] = self._storage.get_user(user_id)
        return self._users[user_id]

    def prime(self, users: Iterable[UserResponse]) -> None:
        for user in users:
            self._users.setdefault(user.id, user)


def attach_comment_authors(
    storage: Storage,
    comments: List[CommentResponse],
    users: Optional[UserCache] = None,
) -> List[CommentWithUser]:
    """Join each comment to its author; comments whose author is gone are dropped."""
    users = users or UserCache(storage)

    for user_id in {comment.user_id for comment in comments}:
        users.get(user_id)

    result = []
    for comment in comments:
        author = users.get(comment.user_id)
        if author is not None:
            result.append(CommentWithUser(**comment.model_dump(), user=author))
    return result


def _resolve(storage: Storage, task: TaskResponse, users: UserCache) -> TaskWithRelations:
    assignees = storage.get_task_assignees(task.id)
    users.prime(assignees)

    return TaskWithRelations(
        **task.model_dump(),
        assignees=assignees,
        attachments=storage.get_task_attachments(task.id),
        voice_notes=storage.get_voice_notes(task.id),
        comments=attach_comment_authors(storage, storage.get_comments(task.id), users),
        workspace=storage.get_workspace(task.workspace_id),
        created_by=users.get(task.created_by_id),
    )


def get_task_with_relations(storage: Storage, task_id: int) -> Optional[TaskWithRelations]:
    task = storage.get_task(task_id)
    if task is None:
        return None
    return _resolve(storage, task, UserCache(storage))


def get_tasks_with_relations(storage: Storage, tasks: Iterable[TaskResponse]) -> List[TaskWithRelations]:
    """Resolve several tasks sharing one user cache across all of them."""
    users = UserCache(storage)
    return [_resolve(storage, task, users) for task in tasks]
