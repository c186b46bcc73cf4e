"""Order models"""
from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, Enum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from foodledger.database import Base
from foodledger.models.enums import OrderStatus, ServiceType


class Order(Base):
    """Customer order"""
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    order_number = Column(String, unique=True, nullable=False, index=True)
    customer_id = Column(Integer, nullable=True)
    panchayat_id = Column(Integer, ForeignKey("panchayats.id"), nullable=True, index=True)
    ward_number = Column(Integer, nullable=True)
    service_type = Column(Enum(ServiceType), nullable=False, index=True)
    status = Column(Enum(OrderStatus), default=OrderStatus.PENDING, nullable=False, index=True)
    total_amount = Column(Float, nullable=True)
    delivery_earnings = Column(Float, nullable=True)
    assigned_cook_id = Column(Integer, ForeignKey("cooks.id"), nullable=True, index=True)
    cook_status = Column(String, nullable=True)  # pending / accepted / preparing / cooked / rejected
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    # Relationships
    panchayat = relationship("Panchayat")
    assigned_cook = relationship("Cook", back_populates="orders")
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")
    vehicles = relationship("IndoorEventVehicle", back_populates="order", cascade="all, delete-orphan")


class OrderItem(Base):
    """Line item of an order"""
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    food_item_id = Column(Integer, ForeignKey("food_items.id"), nullable=True)  # null for deleted/legacy items
    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Float, nullable=True)
    total_price = Column(Float, nullable=True)

    # Relationships
    order = relationship("Order", back_populates="items")
    food_item = relationship("FoodItem")
