"""Shared helpers for partial-update schemas."""

from datetime import datetime
from typing import Any, ClassVar, Dict, Optional, Tuple

from pydantic import BaseModel, model_validator


def to_naive_local(value: Optional[datetime]) -> Optional[datetime]:
    """Ramène un datetime avec fuseau à l'heure locale naïve."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


class PartialUpdate(BaseModel):
    """Base for update payloads: every field optional, merge semantics.

    Only fields the caller actually sent are applied. Fields listed in
    ``non_nullable`` may be omitted but not explicitly set to ``None``.
    """

    non_nullable: ClassVar[Tuple[str, ...]] = ()

    @model_validator(mode="after")
    def reject_null_required(self):
        for field in self.non_nullable:
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)
