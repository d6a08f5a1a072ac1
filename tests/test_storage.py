"""Contract tests, run against both storage backends."""

import pytest
from datetime import datetime, timedelta, timezone

from taskboard.core.errors import IntegrityViolation, ValidationFailure
from taskboard.services.task_service import get_overdue_tasks, get_today_tasks


# ========== USERS ==========
def test_create_user_assigns_id_and_hides_password(storage):
    """Tester la création d'un utilisateur"""
    user = storage.create_user({
        "id": 99,
        "username": "bob",
        "password": "pw",
        "full_name": "Bob Stone",
        "email": "bob@example.com",
    })
    assert user.id == 1  # id fourni ignoré
    assert user.username == "bob"
    assert isinstance(user.created_at, datetime)
    assert "password" not in user.model_dump()
    assert storage.get_user(user.id) == user
    assert storage.get_user_by_username("bob") == user


def test_duplicate_username_rejected(storage, user):
    with pytest.raises(IntegrityViolation):
        storage.create_user({
            "username": user.username,
            "password": "x",
            "full_name": "Other",
            "email": "other@example.com",
        })


def test_invalid_user_payload(storage):
    with pytest.raises(ValidationFailure) as exc_info:
        storage.create_user({"username": "carl", "password": "pw", "full_name": "Carl", "email": "not-an-email"})
    assert exc_info.value.errors


def test_update_user_merges_fields(storage, user):
    updated = storage.update_user(user.id, {"full_name": "Alice M."})
    assert updated.full_name == "Alice M."
    assert updated.username == user.username
    assert updated.email == user.email
    assert updated.created_at == user.created_at
    assert storage.update_user(999, {"full_name": "Nobody"}) is None


def test_get_missing_user_returns_none(storage):
    assert storage.get_user(42) is None
    assert storage.get_user_by_username("ghost") is None


# ========== WORKSPACES ==========
def test_workspace_crud(storage):
    workspace = storage.create_workspace({"name": "Eng", "color": "#000"})
    assert workspace.id == 1
    assert workspace.description is None
    assert storage.get_workspace(workspace.id) == workspace

    updated = storage.update_workspace(workspace.id, {"description": "Engineering"})
    assert updated.description == "Engineering"
    assert updated.name == "Eng"
    assert updated.color == "#000"

    assert storage.delete_workspace(workspace.id) is True
    assert storage.get_workspace(workspace.id) is None
    assert storage.delete_workspace(workspace.id) is False


def test_delete_workspace_with_tasks_rejected(storage, task, workspace):
    with pytest.raises(IntegrityViolation):
        storage.delete_workspace(workspace.id)
    assert storage.get_workspace(workspace.id) is not None


def test_update_workspace_rejects_null_name(storage, workspace):
    with pytest.raises(ValidationFailure):
        storage.update_workspace(workspace.id, {"name": None})


# ========== TASKS ==========
def test_create_task_defaults(storage, task):
    """Scénario: workspace Eng, tâche T1 avec les valeurs par défaut"""
    assert task.status == "to-do"
    assert task.priority == "medium"
    assert task.total_budget == 0
    assert task.paid_amount == 0
    assert task.completed_at is None
    assert task.start_date is None
    assert storage.get_task(task.id) == task


def test_status_update_moves_task_between_filters(storage, task):
    storage.update_task(task.id, {"status": "completed"})

    completed_ids = [t.id for t in storage.get_tasks_by_status("completed")]
    todo_ids = [t.id for t in storage.get_tasks_by_status("to-do")]
    assert task.id in completed_ids
    assert task.id not in todo_ids


def test_update_task_changes_only_given_field(storage, task):
    updated = storage.update_task(task.id, {"priority": "urgent"})

    before = task.model_dump(exclude={"priority", "updated_at"})
    after = updated.model_dump(exclude={"priority", "updated_at"})
    assert updated.priority == "urgent"
    assert after == before
    assert updated.updated_at >= task.updated_at


def test_update_task_completed_at_is_caller_set(storage, task):
    updated = storage.update_task(task.id, {"status": "completed"})
    assert updated.completed_at is None

    done_at = datetime(2026, 1, 2, 3, 4, 5)
    updated = storage.update_task(task.id, {"completed_at": done_at})
    assert updated.completed_at == done_at
    assert updated.status == "completed"


def test_task_dates_with_timezone_stored_as_local(storage, user, workspace):
    """Dates ISO avec 'Z' -> heure locale naïve, visibles dans les vues"""
    local = datetime(2026, 10, 18, 10, 0, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
    created = storage.create_task({
        "title": "aware",
        "workspace_id": workspace.id,
        "created_by_id": user.id,
        "start_date": "2026-10-18T10:00:00Z",
        "end_date": "2026-10-18T12:00:00+02:00",
    })
    assert created.start_date == local
    assert created.start_date.tzinfo is None
    assert created.end_date.tzinfo is None
    assert [t.id for t in get_today_tasks(storage, now=local)] == [created.id]
    assert get_overdue_tasks(storage, now=local) == []

    updated = storage.update_task(created.id, {"completed_at": "2026-10-18T11:00:00Z"})
    assert updated.completed_at.tzinfo is None
    assert updated.completed_at == local + timedelta(hours=1)


def test_update_missing_task_returns_none(storage):
    assert storage.update_task(123, {"title": "x"}) is None


def test_task_validation(storage, user, workspace):
    base = {"title": "T", "workspace_id": workspace.id, "created_by_id": user.id}
    with pytest.raises(ValidationFailure):
        storage.create_task({**base, "status": "done"})
    with pytest.raises(ValidationFailure):
        storage.create_task({**base, "total_budget": -5})
    with pytest.raises(ValidationFailure):
        storage.create_task({**base, "title": ""})
    with pytest.raises(ValidationFailure):
        storage.create_task({"title": "no workspace"})


def test_update_task_rejects_null_title(storage, task):
    with pytest.raises(ValidationFailure):
        storage.update_task(task.id, {"title": None})
    assert storage.get_task(task.id).title == "T1"


def test_task_references_checked(storage, user, workspace):
    with pytest.raises(IntegrityViolation):
        storage.create_task({"title": "T", "workspace_id": 999, "created_by_id": user.id})
    with pytest.raises(IntegrityViolation):
        storage.create_task({"title": "T", "workspace_id": workspace.id, "created_by_id": 999})
    assert storage.get_tasks() == []


def test_delete_task(storage, task):
    assert storage.delete_task(task.id) is True
    assert storage.get_task(task.id) is None
    assert storage.delete_task(task.id) is False


def test_ids_not_reused_after_delete(storage, user, workspace):
    first = storage.create_task({"title": "A", "workspace_id": workspace.id, "created_by_id": user.id})
    storage.delete_task(first.id)
    second = storage.create_task({"title": "B", "workspace_id": workspace.id, "created_by_id": user.id})
    assert second.id != first.id
    assert second.id > first.id


def test_comment_ids_not_reused_after_delete(storage, task, user):
    first = storage.add_comment({"task_id": task.id, "user_id": user.id, "content": "a"})
    storage.delete_comment(first.id)
    second = storage.add_comment({"task_id": task.id, "user_id": user.id, "content": "b"})
    assert second.id > first.id


def test_list_tasks_newest_first(storage, user, workspace):
    created = [
        storage.create_task({"title": f"Task {i}", "workspace_id": workspace.id, "created_by_id": user.id})
        for i in range(3)
    ]
    assert [t.id for t in storage.get_tasks()] == [t.id for t in reversed(created)]


def test_tasks_by_workspace(storage, user, workspace):
    other = storage.create_workspace({"name": "Sales", "color": "#fdab3d"})
    mine = storage.create_task({"title": "A", "workspace_id": workspace.id, "created_by_id": user.id})
    storage.create_task({"title": "B", "workspace_id": other.id, "created_by_id": user.id})

    assert [t.id for t in storage.get_tasks_by_workspace(workspace.id)] == [mine.id]


def test_tasks_by_user_assignee_or_creator(storage, user, workspace):
    other = storage.create_user({
        "username": "bob", "password": "pw", "full_name": "Bob", "email": "bob@example.com",
    })
    created = storage.create_task({"title": "Mine", "workspace_id": workspace.id, "created_by_id": user.id})
    assigned = storage.create_task({"title": "Assigned", "workspace_id": workspace.id, "created_by_id": other.id})
    storage.create_task({"title": "Not mine", "workspace_id": workspace.id, "created_by_id": other.id})
    storage.assign_user_to_task(assigned.id, user.id)
    # créateur ET assigné: la tâche ne doit apparaître qu'une fois
    storage.assign_user_to_task(created.id, user.id)

    ids = [t.id for t in storage.get_tasks_by_user(user.id)]
    assert sorted(ids) == sorted([created.id, assigned.id])


def test_tasks_between_bounds(storage, user, workspace):
    base = datetime(2026, 3, 10)

    def make(title, start):
        return storage.create_task({
            "title": title, "workspace_id": workspace.id, "created_by_id": user.id, "start_date": start,
        })

    at_start = make("at start", base)
    inside = make("inside", base + timedelta(hours=5))
    at_end = make("at end", base + timedelta(days=1))
    make("no date", None)

    half_open = storage.get_tasks_between(base, base + timedelta(days=1))
    assert {t.id for t in half_open} == {at_start.id, inside.id}

    open_closed = storage.get_tasks_between(base, base + timedelta(days=1), include_start=False, include_end=True)
    assert {t.id for t in open_closed} == {inside.id, at_end.id}


# ========== ASSIGNEES ==========
def test_assignees_are_deduplicated(storage, task, user):
    bob = storage.create_user({"username": "bob", "password": "pw", "full_name": "Bob", "email": "bob@example.com"})
    carl = storage.create_user({"username": "carl", "password": "pw", "full_name": "Carl", "email": "carl@example.com"})

    first = storage.assign_user_to_task(task.id, bob.id)
    storage.assign_user_to_task(task.id, carl.id)
    again = storage.assign_user_to_task(task.id, bob.id)

    assert again.id == first.id
    assert [u.id for u in storage.get_task_assignees(task.id)] == [bob.id, carl.id]


def test_remove_assignee(storage, task, user):
    storage.assign_user_to_task(task.id, user.id)
    assert storage.remove_user_from_task(task.id, user.id) is True
    assert storage.remove_user_from_task(task.id, user.id) is False
    assert storage.get_task_assignees(task.id) == []


def test_assign_requires_existing_task_and_user(storage, task, user):
    with pytest.raises(IntegrityViolation):
        storage.assign_user_to_task(999, user.id)
    with pytest.raises(IntegrityViolation):
        storage.assign_user_to_task(task.id, 999)


# ========== ATTACHMENTS / VOICE NOTES / COMMENTS ==========
def test_attachment_lifecycle(storage, task, user):
    attachment = storage.add_task_attachment({
        "task_id": task.id,
        "file_name": "spec.pdf",
        "file_type": "application/pdf",
        "file_size": 1024,
        "file_url": "/uploads/spec.pdf",
        "uploaded_by_id": user.id,
    })
    assert storage.get_task_attachment(attachment.id) == attachment
    assert storage.get_task_attachments(task.id) == [attachment]

    assert storage.delete_task_attachment(attachment.id) is True
    assert storage.get_task_attachment(attachment.id) is None
    assert storage.delete_task_attachment(attachment.id) is False


def test_voice_note_lifecycle(storage, task, user):
    note = storage.add_voice_note({
        "task_id": task.id,
        "title": "Kickoff",
        "file_name": "kickoff.mp3",
        "duration": 30,
        "file_url": "/uploads/kickoff.mp3",
        "recorded_by_id": user.id,
    })
    assert note.file_size == 0
    assert storage.get_voice_notes(task.id) == [note]
    assert storage.delete_voice_note(note.id) is True
    assert storage.get_voice_note(note.id) is None
    assert storage.delete_voice_note(note.id) is False


def test_voice_note_negative_duration(storage, task, user):
    with pytest.raises(ValidationFailure):
        storage.add_voice_note({
            "task_id": task.id, "file_name": "a.mp3", "duration": -1,
            "file_url": "/a.mp3", "recorded_by_id": user.id,
        })


def test_comment_lifecycle(storage, task, user):
    comment = storage.add_comment({"task_id": task.id, "user_id": user.id, "content": "First!"})
    assert comment.created_at == comment.updated_at
    assert storage.get_comment(comment.id) == comment

    edited = storage.update_comment(comment.id, {"content": "Edited"})
    assert edited.content == "Edited"
    assert edited.created_at == comment.created_at
    assert edited.updated_at >= comment.updated_at

    assert storage.delete_comment(comment.id) is True
    assert storage.get_comment(comment.id) is None
    assert storage.delete_comment(comment.id) is False
    assert storage.update_comment(comment.id, {"content": "x"}) is None


def test_children_require_existing_task(storage, user):
    with pytest.raises(IntegrityViolation):
        storage.add_comment({"task_id": 999, "user_id": user.id, "content": "orphan"})


def test_delete_task_cascades(storage, task, user):
    storage.assign_user_to_task(task.id, user.id)
    attachment = storage.add_task_attachment({
        "task_id": task.id, "file_name": "a.png", "file_type": "image/png",
        "file_size": 10, "file_url": "/uploads/a.png", "uploaded_by_id": user.id,
    })
    note = storage.add_voice_note({
        "task_id": task.id, "file_name": "n.mp3", "duration": 5,
        "file_url": "/uploads/n.mp3", "recorded_by_id": user.id,
    })
    comment = storage.add_comment({"task_id": task.id, "user_id": user.id, "content": "bye"})

    assert storage.delete_task(task.id) is True

    assert storage.get_task_assignees(task.id) == []
    assert storage.get_task_attachment(attachment.id) is None
    assert storage.get_voice_note(note.id) is None
    assert storage.get_comment(comment.id) is None
    # l'utilisateur et le workspace restent
    assert storage.get_user(user.id) is not None
    assert storage.get_workspace(task.workspace_id) is not None
