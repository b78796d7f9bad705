from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from mocards.core.config import settings
from mocards.schemas.card_schema import CardOut


class BatchCreate(BaseModel):
    total_cards: int = Field(..., ge=1, le=settings.MAX_CARDS_PER_BATCH)
    location_code: str = Field(..., pattern=r"^[A-Za-z0-9]{3}$")
    batch_number: Optional[str] = Field(None, min_length=1, max_length=32, pattern=r"^[A-Za-z0-9-]+$")
    notes: Optional[str] = None


class BatchOut(BaseModel):
    id: int
    batch_number: str
    total_cards: int
    cards_assigned: int
    status: str
    created_by: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True
    }


class BatchGenerationOut(BaseModel):
    batch: BatchOut
    cards: list[CardOut]
    perkless_card_ids: list[int]


class BatchStatsOut(BaseModel):
    batch_id: int
    batch_number: str
    total: int
    by_status: dict[str, int]


class DashboardStatsOut(BaseModel):
    total_clinics: int
    total_batches: int
    total_cards: int
    cards_by_status: dict[str, int]
