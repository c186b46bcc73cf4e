"""Indoor event vehicle model"""
from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from foodledger.database import Base


class IndoorEventVehicle(Base):
    """Vehicle hired for an indoor event; its rent is a delivery cost"""
    __tablename__ = "indoor_event_vehicles"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    vehicle_number = Column(String, nullable=False)
    vehicle_type = Column(String, nullable=True)
    driver_name = Column(String, nullable=True)
    driver_mobile = Column(String, nullable=False)
    rent_amount = Column(Float, nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    # Relationships
    order = relationship("Order", back_populates="vehicles")
