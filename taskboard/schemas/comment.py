from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import ClassVar, Optional, Tuple

from taskboard.schemas.base import PartialUpdate
from taskboard.schemas.user import UserResponse


class CommentCreate(BaseModel):
    task_id: int
    user_id: int
    content: str = Field(min_length=1)


class CommentUpdate(PartialUpdate):
    non_nullable: ClassVar[Tuple[str, ...]] = ("content",)

    content: Optional[str] = Field(default=None, min_length=1)


class CommentResponse(BaseModel):
    id: int
    task_id: int
    user_id: int
    content: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CommentWithUser(CommentResponse):
    user: UserResponse
