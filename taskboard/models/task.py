"""Task model"""

from sqlalchemy import Column, Integer, String, DateTime, Float, ForeignKey
from datetime import datetime
from taskboard.core.database import Base


class Task(Base):
    __tablename__ = "tasks"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    status = Column(String, nullable=False, default="to-do", index=True)
    priority = Column(String, nullable=False, default="medium")
    start_date = Column(DateTime, nullable=True, index=True)
    end_date = Column(DateTime, nullable=True)

    total_budget = Column(Float, nullable=False, default=0)
    paid_amount = Column(Float, nullable=False, default=0)

    # pas de cascade: un workspace ou un user supprimé ne touche pas aux tâches
    workspace_id = Column(Integer, ForeignKey("workspaces.id"), nullable=False, index=True)
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.now, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, nullable=False)
    completed_at = Column(DateTime, nullable=True)
