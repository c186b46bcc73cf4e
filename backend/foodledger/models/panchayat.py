"""Region (panchayat) model"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.sql import func
from foodledger.database import Base


class Panchayat(Base):
    """Delivery region used to filter reports"""
    __tablename__ = "panchayats"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
