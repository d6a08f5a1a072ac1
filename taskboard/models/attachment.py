from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from datetime import datetime
from taskboard.core.database import Base


class TaskAttachment(Base):
    __tablename__ = "task_attachments"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    file_name = Column(String, nullable=False)
    file_type = Column(String, nullable=False)
    file_size = Column(Integer, nullable=False)
    file_url = Column(String, nullable=False)
    uploaded_by_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    uploaded_at = Column(DateTime, default=datetime.now, nullable=False)


class VoiceNote(Base):
    __tablename__ = "voice_notes"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=True)
    file_name = Column(String, nullable=False)
    file_size = Column(Integer, nullable=False, default=0)
    duration = Column(Integer, nullable=False)  # secondes
    file_url = Column(String, nullable=False)
    recorded_by_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    recorded_at = Column(DateTime, default=datetime.now, nullable=False)
