from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional


class TaskAttachmentCreate(BaseModel):
    task_id: int
    file_name: str = Field(min_length=1)
    file_type: str = Field(min_length=1)  # type MIME
    file_size: int = Field(ge=0)  # octets
    file_url: str = Field(min_length=1)
    uploaded_by_id: int


class TaskAttachmentResponse(BaseModel):
    id: int
    task_id: int
    file_name: str
    file_type: str
    file_size: int
    file_url: str
    uploaded_by_id: int
    uploaded_at: datetime

    model_config = ConfigDict(from_attributes=True)


class VoiceNoteCreate(BaseModel):
    task_id: int
    title: Optional[str] = None
    file_name: str = Field(min_length=1)
    file_size: int = Field(default=0, ge=0)
    duration: int = Field(ge=0)  # secondes
    file_url: str = Field(min_length=1)
    recorded_by_id: int


class VoiceNoteResponse(BaseModel):
    id: int
    task_id: int
    title: Optional[str] = None
    file_name: str
    file_size: int
    duration: int
    file_url: str
    recorded_by_id: int
    recorded_at: datetime

    model_config = ConfigDict(from_attributes=True)
