from os import getenv


def _as_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    STORAGE_BACKEND = getenv("STORAGE_BACKEND", "memory")  # "memory" ou "database"
    DATABASE_URL = getenv("DATABASE_URL", "postgresql+psycopg://taskboard:taskboard@db:5432/taskboard")
    SEED_DATA = _as_bool(getenv("SEED_DATA", "true"))
    SEED_SYNTHETIC_TASKS = int(getenv("SEED_SYNTHETIC_TASKS", "0"))
    BCRYPT_ROUNDS = int(getenv("BCRYPT_ROUNDS", "12"))
    LOG_LEVEL = getenv("LOG_LEVEL", "INFO")
    DEMO_USER_ID = int(getenv("DEMO_USER_ID", "1"))  # pas d'auth: /api/me renvoie cet utilisateur

    def __init__(self, **overrides):
        for key, value in overrides.items():
            if not hasattr(Settings, key):
                raise AttributeError(f"Unknown setting: {key}")
            setattr(self, key, value)


settings = Settings()
