"""
Pydantic schemas for area endpoints.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from ticketdesk.schemas.base import CamelModel


class AreaCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=120, description="Unique area name")

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be blank")
        return v


class AreaUpdate(AreaCreate):
    pass


class AreaResponse(CamelModel):
    id: int
    name: str
    created_at: Optional[datetime] = None
