import bcrypt

from taskboard.core.config import settings


def hash_password(password: str) -> str:
    # coût réglable via BCRYPT_ROUNDS (les tests le baissent)
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode(), salt).decode()
