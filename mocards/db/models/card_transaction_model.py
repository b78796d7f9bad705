from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Enum, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from mocards.db.base import Base
import enum


class TransactionType(str, enum.Enum):
    CREATED = "created"
    ASSIGNED = "assigned"
    REASSIGNED = "reassigned"
    ACTIVATED = "activated"
    SUSPENDED = "suspended"
    EXPIRED = "expired"
    PERK_CLAIMED = "perk_claimed"


class PerformedBy(str, enum.Enum):
    ADMIN = "admin"
    CLINIC = "clinic"
    SYSTEM = "system"


class CardTransaction(Base):
    __tablename__ = "card_transactions"

    id = Column(Integer, primary_key=True, index=True)
    card_id = Column(Integer, ForeignKey("cards.id", ondelete="CASCADE"), nullable=False, index=True)
    transaction_type = Column(
        Enum(TransactionType, name="cardtransactiontype", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    performed_by = Column(
        Enum(PerformedBy, name="performedby", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    performed_by_id = Column(String(64), nullable=True)
    details = Column(JSONB, nullable=False, server_default="{}")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    card = relationship("Card", back_populates="transactions")
