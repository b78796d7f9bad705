from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Enum, func
from sqlalchemy.orm import relationship
from mocards.db.base import Base
import enum


class CardStatus(str, enum.Enum):
    UNASSIGNED = "unassigned"
    ASSIGNED = "assigned"
    ACTIVATED = "activated"
    EXPIRED = "expired"
    SUSPENDED = "suspended"


class GenerationMethod(str, enum.Enum):
    AUTO = "auto"
    MANUAL = "manual"
    RANGE = "range"


class Card(Base):
    __tablename__ = "cards"

    id = Column(Integer, primary_key=True, index=True)
    batch_id = Column(Integer, ForeignKey("card_batches.id", ondelete="CASCADE"), nullable=False, index=True)
    clinic_id = Column(Integer, ForeignKey("clinics.id"), nullable=True, index=True)
    control_number = Column(String(64), unique=True, nullable=False, index=True)
    control_number_v2 = Column(String(20), unique=True, nullable=True)
    passcode = Column(String(16), unique=True, nullable=False)
    location_code = Column(String(3), nullable=False)
    status = Column(
        Enum(CardStatus, name="cardstatus", values_callable=lambda e: [m.value for m in e]),
        default=CardStatus.UNASSIGNED,
        server_default=CardStatus.UNASSIGNED.value,
        nullable=False,
        index=True,
    )
    generation_method = Column(
        Enum(GenerationMethod, name="generationmethod", values_callable=lambda e: [m.value for m in e]),
        default=GenerationMethod.AUTO,
        server_default=GenerationMethod.AUTO.value,
        nullable=False,
    )
    assigned_at = Column(DateTime(timezone=True), nullable=True)
    activated_at = Column(DateTime(timezone=True), nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    batch = relationship("CardBatch", back_populates="cards")
    clinic = relationship("Clinic", back_populates="cards")
    perks = relationship("CardPerk", back_populates="card", cascade="all, delete-orphan")
    transactions = relationship("CardTransaction", back_populates="card", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Card(control_number={self.control_number}, status={self.status})>"
