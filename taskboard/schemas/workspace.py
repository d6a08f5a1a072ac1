from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import ClassVar, Optional, Tuple

from taskboard.schemas.base import PartialUpdate


class WorkspaceCreate(BaseModel):
    name: str = Field(min_length=1)
    color: str = Field(min_length=1)  # indication d'affichage, ex: "#0073ea"
    description: Optional[str] = None


class WorkspaceUpdate(PartialUpdate):
    non_nullable: ClassVar[Tuple[str, ...]] = ("name", "color")

    name: Optional[str] = Field(default=None, min_length=1)
    color: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None


class WorkspaceResponse(BaseModel):
    id: int
    name: str
    color: str
    description: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
