from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, func
from mocards.db.base import Base


class LocationCode(Base):
    __tablename__ = "location_codes"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(3), unique=True, nullable=False, index=True)
    location_name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, server_default="true", nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
