# mocards/schemas/card_schema.py

from decimal import Decimal
from datetime import datetime
from typing import Optional, Any
from pydantic import BaseModel, Field

from mocards.db.models.card_perk_model import PerkType


class PerkOut(BaseModel):
    id: int
    card_id: int
    perk_type: str
    perk_value: Decimal
    claimed: bool
    claimed_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True
    }


class CardOut(BaseModel):
    id: int
    batch_id: int
    clinic_id: Optional[int] = None
    control_number: str
    control_number_v2: Optional[str] = None
    passcode: str
    location_code: str
    status: str
    generation_method: str
    assigned_at: Optional[datetime] = None
    activated_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True
    }


class CardDetailOut(CardOut):
    clinic_name: Optional[str] = None
    batch_number: Optional[str] = None
    perks: list[PerkOut] = []


class CardLookupIn(BaseModel):
    control_number: str = Field(..., min_length=1, max_length=64)
    passcode: str = Field(..., min_length=1, max_length=16)


class AssignCardsIn(BaseModel):
    card_ids: list[int] = Field(..., min_length=1)
    clinic_id: int


class AssignCardsOut(BaseModel):
    requested: int
    assigned: list[CardOut]
    skipped_card_ids: list[int]


class ReassignCardIn(BaseModel):
    clinic_id: int


class ActivateCardIn(BaseModel):
    location_number: Optional[str] = Field(None, pattern=r"^[0-9]{2}$")
    patient_name: Optional[str] = None


class SuspendCardIn(BaseModel):
    reason: Optional[str] = None


class ClaimPerkIn(BaseModel):
    perk_type: PerkType


class CardTransactionOut(BaseModel):
    id: int
    card_id: int
    transaction_type: str
    performed_by: str
    performed_by_id: Optional[str] = None
    details: dict[str, Any] = {}
    created_at: datetime

    model_config = {
        "from_attributes": True
    }
