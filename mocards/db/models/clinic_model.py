from sqlalchemy import Column, Integer, String, DateTime, Text, Enum, func
from sqlalchemy.orm import relationship
from mocards.db.base import Base
import enum


class ClinicStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class Clinic(Base):
    __tablename__ = "clinics"

    id = Column(Integer, primary_key=True, index=True)
    clinic_code = Column(String(20), unique=True, nullable=False, index=True)
    clinic_name = Column(String(150), nullable=False)
    contact_email = Column(String(120), nullable=True)
    contact_phone = Column(String(30), nullable=True)
    address = Column(Text, nullable=True)
    status = Column(
        Enum(ClinicStatus, name="clinicstatus", values_callable=lambda e: [m.value for m in e]),
        default=ClinicStatus.ACTIVE,
        server_default=ClinicStatus.ACTIVE.value,
        nullable=False,
    )
    password_hash = Column(String(255), nullable=False)
    last_password_change = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    cards = relationship("Card", back_populates="clinic")
