"""Demo and synthetic data.

``seed_demo_data`` writes the fixed demonstration rows every reference store
starts with. ``seed_synthetic_data`` adds reproducible random tasks for
trying the dashboard against a larger data set.
"""

import logging
import random
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from taskboard.storage.base import Storage

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "password123"

DEMO_USERS = [
    {
        "username": "sarahchen",
        "full_name": "Sarah Chen",
        "email": "sarah@workflow.com",
        "avatar_url": "https://images.unsplash.com/photo-1534528741775-53994a69daeb?ixlib=rb-4.0.3&ixid=M3wxMjA3fDB8MHxwaG90by1wYWdlfHx8fGVufDB8fHx8fA%3D%3D&auto=format&fit=crop&w=64&h=64&q=80",
    },
    {
        "username": "michaeltaylor",
        "full_name": "Michael Taylor",
        "email": "michael@workflow.com",
        "avatar_url": "https://images.unsplash.com/photo-1500648767791-00dcc994a43e?ixlib=rb-4.0.3&ixid=M3wxMjA3fDB8MHxwaG90by1wYWdlfHx8fGVufDB8fHx8fA%3D%3D&auto=format&fit=crop&w=64&h=64&q=80",
    },
]

DEMO_WORKSPACES = [
    {"name": "Marketing", "color": "#0073ea"},
    {"name": "Development", "color": "#00c875"},
    {"name": "Sales", "color": "#fdab3d"},
]


def _at(day: datetime, hour: int, minute: int = 0) -> datetime:
    return day.replace(hour=hour, minute=minute, second=0, microsecond=0)


def seed_demo_data(storage: Storage, now: Optional[datetime] = None) -> Dict[str, List[int]]:
    """Write the demonstration rows and return the ids created per family.

    Two users, three workspaces, five tasks (four today, one tomorrow),
    nine assignee links, two attachments, one voice note and two comments.
    """
    now = now or datetime.now()
    tomorrow = now + timedelta(days=1)

    sarah, michael = [storage.create_user({**user, "password": DEMO_PASSWORD}) for user in DEMO_USERS]
    marketing, development, sales = [storage.create_workspace(w) for w in DEMO_WORKSPACES]

    client_meeting = storage.create_task({
        "title": "Client meeting for website redesign",
        "description": "Review the website redesign proposal with the client team. "
                       "Prepare mockups and technical specification documents.",
        "status": "in-progress",
        "priority": "high",
        "start_date": _at(now, 14),
        "end_date": _at(now, 15, 30),
        "workspace_id": marketing.id,
        "created_by_id": sarah.id,
        "total_budget": 2500,
        "paid_amount": 1500,
    })
    budget_proposal = storage.create_task({
        "title": "Prepare Q4 budget proposal",
        "description": "Compile financial data and prepare budget proposal for Q4.",
        "status": "in-progress",
        "priority": "medium",
        "start_date": _at(now, 9),
        "end_date": _at(now, 12),
        "workspace_id": sales.id,
        "created_by_id": sarah.id,
        "total_budget": 1000,
        "paid_amount": 0,
    })
    stand_up = storage.create_task({
        "title": "Team stand-up meeting",
        "description": "Daily team stand-up to discuss progress and roadblocks.",
        "status": "in-progress",
        "priority": "medium",
        "start_date": _at(now, 16, 30),
        "end_date": _at(now, 17),
        "workspace_id": development.id,
        "created_by_id": michael.id,
        "total_budget": 0,
        "paid_amount": 0,
    })
    contract = storage.create_task({
        "title": "Submit client contract for review",
        "description": "Finalize and submit client contract to legal team for review.",
        "status": "in-progress",
        "priority": "high",
        "start_date": _at(now, 17),
        "end_date": _at(now, 17),
        "workspace_id": sales.id,
        "created_by_id": michael.id,
        "total_budget": 500,
        "paid_amount": 0,
    })
    roadmap = storage.create_task({
        "title": "Product roadmap review",
        "description": "Review product roadmap and prioritize features for next release.",
        "status": "to-do",
        "priority": "high",
        "start_date": _at(tomorrow, 9),
        "end_date": _at(tomorrow, 10, 30),
        "workspace_id": development.id,
        "created_by_id": sarah.id,
        "total_budget": 0,
        "paid_amount": 0,
    })

    assignments = [
        (client_meeting, sarah), (client_meeting, michael),
        (budget_proposal, sarah),
        (stand_up, sarah), (stand_up, michael),
        (contract, michael), (contract, sarah),
        (roadmap, sarah), (roadmap, michael),
    ]
    for task, user in assignments:
        storage.assign_user_to_task(task.id, user.id)

    attachments = [
        storage.add_task_attachment({
            "task_id": client_meeting.id,
            "file_name": "redesign_proposal_v2.pdf",
            "file_type": "application/pdf",
            "file_size": 4200000,
            "file_url": "/uploads/redesign_proposal_v2.pdf",
            "uploaded_by_id": sarah.id,
        }),
        storage.add_task_attachment({
            "task_id": client_meeting.id,
            "file_name": "mockup_homepage.png",
            "file_type": "image/png",
            "file_size": 2800000,
            "file_url": "/uploads/mockup_homepage.png",
            "uploaded_by_id": michael.id,
        }),
    ]

    voice_note = storage.add_voice_note({
        "task_id": client_meeting.id,
        "title": "Initial client feedback",
        "file_name": "initial_client_feedback.mp3",
        "duration": 45,
        "file_url": "/uploads/initial_client_feedback.mp3",
        "recorded_by_id": sarah.id,
    })

    comments = [
        storage.add_comment({
            "task_id": client_meeting.id,
            "user_id": sarah.id,
            "content": "I've prepared all the mockups. Let's review them once more before the meeting.",
        }),
        storage.add_comment({
            "task_id": client_meeting.id,
            "user_id": michael.id,
            "content": "The client mentioned they want to see more vibrant color options. "
                       "I've updated the palette in the document.",
        }),
    ]

    logger.info(f"Seeded demo data into {storage.name} storage")
    return {
        "users": [sarah.id, michael.id],
        "workspaces": [marketing.id, development.id, sales.id],
        "tasks": [client_meeting.id, budget_proposal.id, stand_up.id, contract.id, roadmap.id],
        "attachments": [a.id for a in attachments],
        "voice_notes": [voice_note.id],
        "comments": [c.id for c in comments],
    }


# ---- synthetic data ----

_VERBS = ["Review", "Prepare", "Draft", "Finalize", "Plan", "Audit", "Update", "Present", "Organize", "Test"]
_SUBJECTS = [
    "landing page", "quarterly report", "client onboarding", "release notes", "pricing model",
    "design system", "sales pipeline", "API documentation", "support backlog", "hiring plan",
]
_STATUSES = ["to-do", "in-progress", "completed", "on-hold", "cancelled"]
_PRIORITIES = ["low", "medium", "high", "urgent"]


def seed_synthetic_data(
    storage: Storage,
    count: int,
    seed: int = 123,
    now: Optional[datetime] = None,
) -> List[int]:
    """Create ``count`` random tasks spread over the existing workspaces and users.

    Start dates fall within 30 days either side of ``now`` and each task
    lasts one to four hours. The same ``seed`` always yields the same tasks.
    """
    workspaces = storage.get_workspaces()
    users = storage.get_users()
    if not workspaces or not users:
        raise ValueError("synthetic seeding needs at least one workspace and one user")

    rng = random.Random(seed)
    now = now or datetime.now()
    window_start = now - timedelta(days=30)
    window_seconds = int(timedelta(days=60).total_seconds())

    task_ids = []
    for _ in range(count):
        start = window_start + timedelta(seconds=rng.randrange(window_seconds))
        end = start + timedelta(hours=rng.randint(1, 4))
        total_budget = float(round(rng.random() * 10000))
        paid_amount = float(round(rng.random() * total_budget))
        status = rng.choice(_STATUSES)
        creator = rng.choice(users)

        task = storage.create_task({
            "title": f"{rng.choice(_VERBS)} {rng.choice(_SUBJECTS)}",
            "description": None,
            "status": status,
            "priority": rng.choice(_PRIORITIES),
            "start_date": start,
            "end_date": end,
            "workspace_id": rng.choice(workspaces).id,
            "created_by_id": creator.id,
            "total_budget": total_budget,
            "paid_amount": paid_amount,
        })
        if status == "completed":
            storage.update_task(task.id, {"completed_at": end})
        for user in rng.sample(users, k=rng.randint(1, min(3, len(users)))):
            storage.assign_user_to_task(task.id, user.id)
        task_ids.append(task.id)

    logger.info(f"Seeded {count} synthetic tasks into {storage.name} storage")
    return task_ids
