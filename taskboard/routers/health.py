from fastapi import APIRouter, Depends

from taskboard.routers.deps import get_storage
from taskboard.storage.base import Storage

router = APIRouter()


@router.get("/z")
def healthz(storage: Storage = Depends(get_storage)):
    # Check si l'API est up et quel backend tourne
    return {"status": "ok", "storage": storage.name}
