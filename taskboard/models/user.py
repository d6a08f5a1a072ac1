from sqlalchemy import Column, Integer, String, DateTime
from datetime import datetime
from taskboard.core.database import Base


class User(Base):
    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column("password", String, nullable=False)  # hash bcrypt
    full_name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    avatar_url = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.now, nullable=False)
