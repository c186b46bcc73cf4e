"""Load a small demo data set for the reports"""
from datetime import datetime, timezone
from foodledger.database import SessionLocal, init_db
from foodledger.models.cook import Cook
from foodledger.models.delivery import DeliveryStaff, DeliveryWallet
from foodledger.models.enums import MarginType, OrderStatus, ServiceType
from foodledger.models.food_item import FoodItem
from foodledger.models.order import Order, OrderItem
from foodledger.models.panchayat import Panchayat
from foodledger.models.referral import Profile, Referral, ReferralCode
from foodledger.models.vehicle import IndoorEventVehicle


def seed_demo_data():
    """Create tables and insert demo rows when the store is empty"""
    init_db()
    db = SessionLocal()
    try:
        existing = db.query(Order).first()
        if existing:
            print("Orders already exist, skipping demo data")
            return

        north = Panchayat(name="North Ward")
        south = Panchayat(name="South Ward")
        db.add_all([north, south])
        db.flush()

        cook = Cook(kitchen_name="Amma's Kitchen", rating=4.6, total_orders=3, panchayat_id=north.id)
        db.add(cook)

        biryani = FoodItem(
            name="Chicken Biryani", service_type=ServiceType.HOMEMADE, price=100.0,
            platform_margin_type=MarginType.PERCENT, platform_margin_value=10.0,
        )
        meals = FoodItem(
            name="Veg Meals", service_type=ServiceType.CLOUD_KITCHEN, price=80.0,
            platform_margin_type=MarginType.FIXED, platform_margin_value=15.0,
        )
        db.add_all([biryani, meals])
        db.flush()

        day = datetime(2026, 1, 10, 12, 0, tzinfo=timezone.utc)
        homemade = Order(
            order_number="ORD-1001", panchayat_id=north.id, ward_number=3,
            service_type=ServiceType.HOMEMADE, status=OrderStatus.DELIVERED,
            total_amount=240.0, delivery_earnings=30.0, assigned_cook_id=cook.id,
            cook_status="cooked", created_at=day,
        )
        homemade.items.append(OrderItem(food_item_id=biryani.id, quantity=2, unit_price=110.0, total_price=220.0))

        cloud = Order(
            order_number="ORD-1002", panchayat_id=south.id, ward_number=7,
            service_type=ServiceType.CLOUD_KITCHEN, status=OrderStatus.DELIVERED,
            total_amount=95.0, delivery_earnings=20.0, assigned_cook_id=cook.id,
            cook_status="accepted", created_at=day,
        )
        cloud.items.append(OrderItem(food_item_id=meals.id, quantity=1, unit_price=95.0, total_price=95.0))
        # Legacy line whose food item was deleted
        cloud.items.append(OrderItem(food_item_id=None, quantity=1, unit_price=30.0, total_price=30.0))

        event = Order(
            order_number="ORD-1003", panchayat_id=north.id, ward_number=1,
            service_type=ServiceType.INDOOR_EVENTS, status=OrderStatus.DELIVERED,
            total_amount=5000.0, delivery_earnings=0.0,
            created_at=datetime(2026, 1, 11, 9, 30, tzinfo=timezone.utc),
        )
        event.items.append(OrderItem(food_item_id=biryani.id, quantity=40, unit_price=110.0, total_price=4400.0))
        event.vehicles.append(IndoorEventVehicle(
            vehicle_number="KL-07-1234", driver_name="Ravi", driver_mobile="9000000001",
            rent_amount=500.0, created_at=datetime(2026, 1, 11, 8, 0, tzinfo=timezone.utc),
        ))

        pending = Order(
            order_number="ORD-1004", panchayat_id=south.id, ward_number=2,
            service_type=ServiceType.HOMEMADE, status=OrderStatus.PENDING,
            total_amount=120.0, assigned_cook_id=cook.id, cook_status="rejected",
            created_at=datetime(2026, 1, 12, 18, 0, tzinfo=timezone.utc),
        )
        db.add_all([homemade, cloud, event, pending])
        db.flush()

        db.add_all([
            ReferralCode(user_id=501, code="ANNA10", total_referrals=2, total_earnings=500.0),
            Profile(user_id=501, name="Anna"),
            Referral(referrer_id=501, order_id=homemade.id, commission_amount=300.0, status="pending"),
            Referral(referrer_id=501, order_id=cloud.id, commission_amount=200.0, status="paid"),
        ])

        staff = DeliveryStaff(name="Suresh", total_deliveries=2)
        staff.wallet = DeliveryWallet(collected_amount=335.0, job_earnings=50.0, total_settled=300.0)
        db.add(staff)

        db.commit()
        print("=" * 50)
        print("Demo data loaded")
        print("=" * 50)
    except Exception as e:
        db.rollback()
        print(f"Loading demo data failed: {e}")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed_demo_data()
