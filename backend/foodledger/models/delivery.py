"""Delivery staff models"""
from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from foodledger.database import Base


class DeliveryStaff(Base):
    """Delivery staff member"""
    __tablename__ = "delivery_staff"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    mobile_number = Column(String, nullable=True)
    total_deliveries = Column(Integer, nullable=True, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    wallet = relationship("DeliveryWallet", back_populates="staff", uselist=False, cascade="all, delete-orphan")


class DeliveryWallet(Base):
    """Cash collected and earnings owed to a delivery staff member"""
    __tablename__ = "delivery_wallets"

    id = Column(Integer, primary_key=True, index=True)
    delivery_staff_id = Column(Integer, ForeignKey("delivery_staff.id"), unique=True, nullable=False)
    collected_amount = Column(Float, nullable=False, default=0.0)
    job_earnings = Column(Float, nullable=False, default=0.0)
    total_settled = Column(Float, nullable=False, default=0.0)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    staff = relationship("DeliveryStaff", back_populates="wallet")
