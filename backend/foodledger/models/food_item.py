"""Food item model"""
from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, Enum
from sqlalchemy.sql import func
from foodledger.database import Base
from foodledger.models.enums import MarginType, ServiceType


class FoodItem(Base):
    """Menu item with the cook's base price and the platform margin policy"""
    __tablename__ = "food_items"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    service_type = Column(Enum(ServiceType), nullable=True, index=True)
    price = Column(Float, nullable=True)  # cook's base price
    platform_margin_type = Column(Enum(MarginType), nullable=True)  # unset means percent
    platform_margin_value = Column(Float, nullable=True)  # unset means 0
    is_available = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
