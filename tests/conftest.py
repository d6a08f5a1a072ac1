import os
import sys
from pathlib import Path

# Ajoute la racine du projet au PYTHONPATH EN PREMIER
sys.path.insert(0, str(Path(__file__).parent.parent))

# bcrypt rapide pour les tests, AVANT d'importer taskboard
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient

from taskboard.core.config import Settings
from taskboard.main import create_app
from taskboard.storage.memory import MemStorage
from taskboard.storage.sql import SqlStorage


def make_sql_storage():
    """SqlStorage sur une base SQLite en mémoire, schéma créé"""
    storage = SqlStorage.from_url("sqlite://")
    storage.create_schema()
    return storage


@pytest.fixture(params=["memory", "database"])
def storage(request):
    """Store vide, rejoué sur les deux backends"""
    if request.param == "memory":
        store = MemStorage(seed=False)
    else:
        store = make_sql_storage()
    yield store
    store.close()


@pytest.fixture
def mem_storage():
    return MemStorage(seed=False)


@pytest.fixture
def sql_storage():
    store = make_sql_storage()
    yield store
    store.close()


@pytest.fixture
def demo_storage():
    """MemStorage avec les données de démo"""
    return MemStorage(seed=True)


@pytest.fixture
def client(demo_storage):
    """Client de test FastAPI"""
    app = create_app(settings=Settings(DEMO_USER_ID=1), storage=demo_storage)
    return TestClient(app)


@pytest.fixture
def user(storage):
    return storage.create_user({
        "username": "alice",
        "password": "secret123",
        "full_name": "Alice Martin",
        "email": "alice@example.com",
    })


@pytest.fixture
def workspace(storage):
    return storage.create_workspace({"name": "Eng", "color": "#000"})


@pytest.fixture
def task(storage, user, workspace):
    return storage.create_task({
        "title": "T1",
        "workspace_id": workspace.id,
        "created_by_id": user.id,
    })
