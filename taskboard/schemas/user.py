from pydantic import BaseModel, EmailStr, ConfigDict, Field
from datetime import datetime
from typing import ClassVar, Optional, Tuple

from taskboard.schemas.base import PartialUpdate


class UserCreate(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
    full_name: str = Field(min_length=1)
    email: EmailStr
    avatar_url: Optional[str] = None


class UserUpdate(PartialUpdate):
    non_nullable: ClassVar[Tuple[str, ...]] = ("username", "password", "full_name", "email")

    username: Optional[str] = Field(default=None, min_length=1)
    password: Optional[str] = Field(default=None, min_length=1)
    full_name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = None
    avatar_url: Optional[str] = None


class UserResponse(BaseModel):
    # le mot de passe ne sort jamais du store
    id: int
    username: str
    full_name: str
    email: str
    avatar_url: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
