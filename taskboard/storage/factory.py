import logging

from taskboard.core.config import Settings
from taskboard.storage.base import Storage
from taskboard.storage.memory import MemStorage
from taskboard.storage.seed import seed_demo_data, seed_synthetic_data
from taskboard.storage.sql import SqlStorage

logger = logging.getLogger(__name__)

BACKENDS = ("memory", "database")


def _seed_synthetic(storage: Storage, count: int) -> None:
    if not storage.get_users() or not storage.get_workspaces():
        logger.warning(f"Skipping {count} synthetic tasks: no users or workspaces to attach them to")
        return
    seed_synthetic_data(storage, count)


def create_storage(settings: Settings) -> Storage:
    """Build the storage backend named by ``settings.STORAGE_BACKEND``.

    Called once at application start; the instance lives as long as the app.
    A database is seeded only when it starts empty, so restarts add nothing.
    """
    backend = settings.STORAGE_BACKEND.strip().lower()

    if backend == "memory":
        storage = MemStorage(seed=settings.SEED_DATA)
        empty = True
    elif backend == "database":
        storage = SqlStorage.from_url(settings.DATABASE_URL)
        storage.create_schema()
        # on ne seed qu'une base vide
        empty = not storage.get_users()
        if settings.SEED_DATA and empty:
            seed_demo_data(storage)
    else:
        raise ValueError(f"Unknown storage backend '{settings.STORAGE_BACKEND}', expected one of {BACKENDS}")

    if settings.SEED_SYNTHETIC_TASKS > 0 and empty:
        _seed_synthetic(storage, settings.SEED_SYNTHETIC_TASKS)

    logger.info(f"Using {storage.name} storage backend")
    return storage
