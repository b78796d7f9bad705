from sqlalchemy import (
    Column, Integer, ForeignKey, Numeric, Boolean, DateTime, Enum, UniqueConstraint, func
)
from sqlalchemy.orm import relationship
from mocards.db.base import Base
import enum


class PerkType(str, enum.Enum):
    CONSULTATION = "consultation"
    CLEANING = "cleaning"
    XRAY = "xray"
    EXTRACTION = "extraction"
    FILLING = "filling"


class CardPerk(Base):
    __tablename__ = "card_perks"
    __table_args__ = (UniqueConstraint("card_id", "perk_type", name="uq_card_perks_card_type"),)

    id = Column(Integer, primary_key=True, index=True)
    card_id = Column(Integer, ForeignKey("cards.id", ondelete="CASCADE"), nullable=False, index=True)
    perk_type = Column(
        Enum(PerkType, name="perktype", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    perk_value = Column(Numeric(10, 2), nullable=False, doc="Value in pesos")
    claimed = Column(Boolean, default=False, server_default="false", nullable=False)
    claimed_at = Column(DateTime(timezone=True), nullable=True)
    claimed_by_clinic_id = Column(Integer, ForeignKey("clinics.id"), nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    card = relationship("Card", back_populates="perks")
