from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class LocationCodeCreate(BaseModel):
    code: str = Field(..., pattern=r"^[A-Za-z0-9]{3}$")
    location_name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    is_active: bool = True


class LocationCodeOut(BaseModel):
    id: int
    code: str
    location_name: str
    description: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True
    }
