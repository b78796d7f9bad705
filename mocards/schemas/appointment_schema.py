from datetime import date, time, datetime
from typing import Optional
from pydantic import BaseModel, Field, EmailStr

from mocards.db.models.appointment_model import AppointmentStatus


class AppointmentRequest(BaseModel):
    control_number: str = Field(..., min_length=1, max_length=64)
    passcode: str = Field(..., min_length=1, max_length=16)
    patient_name: str = Field(..., min_length=1, max_length=100)
    patient_phone: Optional[str] = None
    patient_email: Optional[EmailStr] = None
    appointment_date: date
    appointment_time: time
    service_type: str = Field(..., min_length=1, max_length=50)
    notes: Optional[str] = None


class AppointmentStatusIn(BaseModel):
    status: AppointmentStatus


class AppointmentOut(BaseModel):
    id: int
    card_id: int
    clinic_id: int
    patient_name: str
    patient_phone: Optional[str] = None
    patient_email: Optional[str] = None
    appointment_date: date
    appointment_time: time
    service_type: str
    status: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True
    }
