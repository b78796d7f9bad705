# mocards/schemas/clinic_schema.py

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, EmailStr


class ClinicCreate(BaseModel):
    clinic_code: str = Field(..., min_length=3, max_length=20, pattern=r"^[A-Za-z0-9]+$")
    clinic_name: str = Field(..., min_length=1, max_length=150)
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = None
    address: Optional[str] = None
    password: str = Field(..., min_length=8)


class ClinicOut(BaseModel):
    """Clinic as returned by the API; the password hash never leaves the service."""
    id: int
    clinic_code: str
    clinic_name: str
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    address: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True
    }
