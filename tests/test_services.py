import pytest
from datetime import datetime, timedelta

from taskboard.services.dashboard_service import (
    compute_dashboard_stats,
    compute_status_counts,
    compute_workspace_breakdown,
)
from taskboard.services.relation_service import (
    attach_comment_authors,
    get_task_with_relations,
    get_tasks_with_relations,
)
from taskboard.services.task_service import (
    get_overdue_tasks,
    get_today_tasks,
    get_upcoming_tasks,
    today_window,
    upcoming_window,
)

NOW = datetime(2026, 10, 18, 11, 30)
MIDNIGHT = datetime(2026, 10, 18)


def make_task(storage, user, workspace, **fields):
    return storage.create_task({
        "title": fields.pop("title", "Task"),
        "workspace_id": workspace.id,
        "created_by_id": user.id,
        **fields,
    })


# ============ TESTS task_service.py ============

def test_windows():
    """TEST 1: bornes des fenêtres aujourd'hui / à venir"""
    assert today_window(NOW) == (MIDNIGHT, MIDNIGHT + timedelta(days=1))
    assert upcoming_window(NOW) == (MIDNIGHT + timedelta(days=1), MIDNIGHT + timedelta(days=8))


def test_today_tasks(storage, user, workspace):
    """TEST 2: get_today_tasks() ne garde que [00:00, demain 00:00)"""
    morning = make_task(storage, user, workspace, title="morning", start_date=MIDNIGHT)
    evening = make_task(storage, user, workspace, title="evening", start_date=MIDNIGHT + timedelta(hours=23, minutes=59))
    make_task(storage, user, workspace, title="yesterday", start_date=MIDNIGHT - timedelta(seconds=1))
    make_task(storage, user, workspace, title="tomorrow", start_date=MIDNIGHT + timedelta(days=1))
    make_task(storage, user, workspace, title="undated")

    today_ids = {t.id for t in get_today_tasks(storage, now=NOW)}
    assert today_ids == {morning.id, evening.id}


def test_upcoming_tasks(storage, user, workspace):
    """TEST 3: get_upcoming_tasks() = (demain 00:00, aujourd'hui + 8 jours]"""
    make_task(storage, user, workspace, title="today", start_date=NOW)
    make_task(storage, user, workspace, title="tomorrow midnight", start_date=MIDNIGHT + timedelta(days=1))
    tomorrow = make_task(storage, user, workspace, title="tomorrow", start_date=MIDNIGHT + timedelta(days=1, hours=9))
    last = make_task(storage, user, workspace, title="day 8", start_date=MIDNIGHT + timedelta(days=8))
    make_task(storage, user, workspace, title="too far", start_date=MIDNIGHT + timedelta(days=8, seconds=1))
    make_task(storage, user, workspace, title="undated")

    upcoming_ids = {t.id for t in get_upcoming_tasks(storage, now=NOW)}
    assert upcoming_ids == {tomorrow.id, last.id}


def test_today_and_upcoming_never_overlap(storage, user, workspace):
    for hours in range(0, 24 * 9, 5):
        make_task(storage, user, workspace, start_date=MIDNIGHT + timedelta(hours=hours))

    today_ids = {t.id for t in get_today_tasks(storage, now=NOW)}
    upcoming_ids = {t.id for t in get_upcoming_tasks(storage, now=NOW)}
    assert today_ids
    assert upcoming_ids
    assert today_ids.isdisjoint(upcoming_ids)


def test_overdue_tasks(storage, user, workspace):
    """TEST 4: get_overdue_tasks() ignore les tâches terminées/annulées"""
    late = make_task(storage, user, workspace, title="late", end_date=MIDNIGHT - timedelta(days=2))
    make_task(storage, user, workspace, title="done", status="completed", end_date=MIDNIGHT - timedelta(days=2))
    make_task(storage, user, workspace, title="cancelled", status="cancelled", end_date=MIDNIGHT - timedelta(days=1))
    make_task(storage, user, workspace, title="ends today", end_date=MIDNIGHT + timedelta(hours=2))

    assert [t.id for t in get_overdue_tasks(storage, now=NOW)] == [late.id]


# ============ TESTS relation_service.py ============

def test_task_with_relations_empty_collections(storage, task, user, workspace):
    """TEST 5: tâche sans relations -> listes vides, pas de None"""
    aggregate = get_task_with_relations(storage, task.id)

    assert aggregate is not None
    assert aggregate.id == task.id
    assert aggregate.assignees == []
    assert aggregate.attachments == []
    assert aggregate.voice_notes == []
    assert aggregate.comments == []
    assert aggregate.workspace == workspace
    assert aggregate.created_by == user


def test_task_with_relations_missing_task(storage):
    assert get_task_with_relations(storage, 404) is None


def test_task_with_relations_joins_comment_authors(storage, task, user):
    bob = storage.create_user({"username": "bob", "password": "pw", "full_name": "Bob", "email": "bob@example.com"})
    storage.assign_user_to_task(task.id, bob.id)
    storage.add_comment({"task_id": task.id, "user_id": user.id, "content": "one"})
    storage.add_comment({"task_id": task.id, "user_id": bob.id, "content": "two"})
    storage.add_comment({"task_id": task.id, "user_id": user.id, "content": "three"})

    aggregate = get_task_with_relations(storage, task.id)

    assert [u.id for u in aggregate.assignees] == [bob.id]
    assert [c.content for c in aggregate.comments] == ["three", "two", "one"]
    assert [c.user.username for c in aggregate.comments] == ["alice", "bob", "alice"]


class CountingStorage:
    """Proxy qui compte les appels get_user"""

    def __init__(self, storage):
        self._storage = storage
        self.user_lookups = []

    def get_user(self, user_id):
        self.user_lookups.append(user_id)
        return self._storage.get_user(user_id)

    def __getattr__(self, name):
        return getattr(self._storage, name)


def test_comment_authors_fetched_once(storage, task, user):
    bob = storage.create_user({"username": "bob", "password": "pw", "full_name": "Bob", "email": "bob@example.com"})
    for author in (user, bob, user, bob, user):
        storage.add_comment({"task_id": task.id, "user_id": author.id, "content": "hi"})

    counting = CountingStorage(storage)
    comments = attach_comment_authors(counting, storage.get_comments(task.id))

    assert len(comments) == 5
    assert sorted(counting.user_lookups) == sorted([user.id, bob.id])


def test_tasks_with_relations_share_user_cache(storage, user, workspace):
    tasks = [make_task(storage, user, workspace, title=f"T{i}") for i in range(3)]
    for t in tasks:
        storage.add_comment({"task_id": t.id, "user_id": user.id, "content": "ok"})

    counting = CountingStorage(storage)
    aggregates = get_tasks_with_relations(counting, tasks)

    assert [a.id for a in aggregates] == [t.id for t in tasks]
    assert counting.user_lookups == [user.id]
    assert all(a.created_by == user for a in aggregates)


# ============ TESTS dashboard_service.py ============

def test_dashboard_budget_totals(storage, user, workspace):
    """TEST 6: budgets [100, 200] / payés [50, 200] -> 300 / 250"""
    make_task(storage, user, workspace, total_budget=100, paid_amount=50)
    make_task(storage, user, workspace, total_budget=200, paid_amount=200, status="completed")

    stats = compute_dashboard_stats(storage.get_tasks())

    assert stats.budget.total == 300
    assert stats.budget.paid == 250
    assert stats.budget.percent == pytest.approx(83.33)
    assert stats.tasks.completed == 1
    assert stats.tasks.total == 2
    assert stats.tasks.percent == 50.0
    assert stats.hours.tracked == 32.5
    assert stats.hours.total == 40


def test_dashboard_empty():
    stats = compute_dashboard_stats([])
    assert stats.tasks.total == 0
    assert stats.tasks.percent == 0.0
    assert stats.budget.total == 0
    assert stats.budget.percent == 0.0


def test_workspace_breakdown_and_status_counts(storage, user, workspace):
    other = storage.create_workspace({"name": "Sales", "color": "#fdab3d"})
    make_task(storage, user, workspace, total_budget=10, paid_amount=5, status="completed")
    make_task(storage, user, workspace, total_budget=20)
    make_task(storage, user, other, status="on-hold")

    breakdown = {s.workspace_id: s for s in compute_workspace_breakdown(storage.get_tasks(), storage.get_workspaces())}
    assert breakdown[workspace.id].total_tasks == 2
    assert breakdown[workspace.id].completed_tasks == 1
    assert breakdown[workspace.id].total_budget == 30
    assert breakdown[workspace.id].paid_amount == 5
    assert breakdown[other.id].total_tasks == 1

    counts = compute_status_counts(storage.get_tasks())
    assert counts.total == 3
    assert counts.counts == {"to-do": 1, "in-progress": 0, "completed": 1, "on-hold": 1, "cancelled": 0}
