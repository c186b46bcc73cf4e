"""Cook model"""
from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from foodledger.database import Base


class Cook(Base):
    """Cook / kitchen that prepares orders"""
    __tablename__ = "cooks"

    id = Column(Integer, primary_key=True, index=True)
    kitchen_name = Column(String, nullable=False)
    rating = Column(Float, nullable=True)
    total_orders = Column(Integer, nullable=False, default=0)
    panchayat_id = Column(Integer, ForeignKey("panchayats.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    orders = relationship("Order", back_populates="assigned_cook")
