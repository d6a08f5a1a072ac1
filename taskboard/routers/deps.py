from fastapi import Request

from taskboard.storage.base import Storage


def get_storage(request: Request) -> Storage:
    """Dépendance: le store construit au démarrage de l'app"""
    return request.app.state.storage
