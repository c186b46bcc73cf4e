"""Shared enums

Kept free of database imports so the reporting engine can use them
without creating an engine.
"""
import enum


class ServiceType(str, enum.Enum):
    """Business line an order belongs to"""
    INDOOR_EVENTS = "indoor_events"
    CLOUD_KITCHEN = "cloud_kitchen"
    HOMEMADE = "homemade"


class OrderStatus(str, enum.Enum):
    """Order lifecycle status"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class MarginType(str, enum.Enum):
    """How the platform margin on a food item is expressed"""
    PERCENT = "percent"  # percentage of the cook's base price
    FIXED = "fixed"  # flat amount per unit


class ReferralStatus(str, enum.Enum):
    """Referral commission status"""
    PENDING = "pending"
    APPROVED = "approved"
    PAID = "paid"
    REJECTED = "rejected"


# cook_status values that count as an accepted order
COOK_ACCEPTED_STATUSES = ("accepted", "preparing", "cooked")
COOK_REJECTED_STATUS = "rejected"
