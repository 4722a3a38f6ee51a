"""Pydantic schemas for the cat list endpoint."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class CatResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    color: str
    age: Optional[int] = None
    is_indoor: bool = True
    created_at: Optional[datetime] = None
