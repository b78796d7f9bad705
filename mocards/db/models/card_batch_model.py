from sqlalchemy import Column, Integer, String, DateTime, Text, Enum, func
from sqlalchemy.orm import relationship
from mocards.db.base import Base
import enum


class BatchStatus(str, enum.Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class CardBatch(Base):
    __tablename__ = "card_batches"

    id = Column(Integer, primary_key=True, index=True)
    batch_number = Column(String(32), unique=True, nullable=False, index=True)
    total_cards = Column(Integer, nullable=False)
    cards_assigned = Column(Integer, nullable=False, default=0, server_default="0")
    status = Column(
        Enum(BatchStatus, name="batchstatus", values_callable=lambda e: [m.value for m in e]),
        default=BatchStatus.ACTIVE,
        server_default=BatchStatus.ACTIVE.value,
        nullable=False,
    )
    created_by = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    cards = relationship("Card", back_populates="batch")

    def __repr__(self):
        return f"<CardBatch(number={self.batch_number}, total={self.total_cards})>"
