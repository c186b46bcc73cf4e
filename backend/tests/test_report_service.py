"""Unit tests for the report query layer"""
import threading
import unittest
from datetime import datetime, timezone
from decimal import Decimal
from foodledger.models.enums import MarginType, OrderStatus, ServiceType
from foodledger.services.errors import InvalidOrderRecord, UpstreamSourceUnavailable
from foodledger.services.profit_loss_types import (
    FoodItemMarginInfo,
    LedgerOrder,
    LedgerOrderItem,
    ReferralCommission,
    VehicleRent,
    WithMargin,
)
from foodledger.services.report_filters import ReportFilters
from foodledger.services.report_service import (
    ReportService,
    build_cook_performance,
    build_delivery_settlement,
    build_referral_report,
    summarize_sales,
)
from foodledger.utils.thread_pool import ThreadPoolManager

DAY = datetime(2026, 1, 10, 12, 0, tzinfo=timezone.utc)


class FakeDataSource:
    """In-memory data source recording the calls made to it"""

    def __init__(self):
        self.orders = [
            LedgerOrder(
                id=1, total_amount=240, service_type=ServiceType.HOMEMADE, delivery_earnings=30,
                created_at=DAY,
                items=(LedgerOrderItem(
                    id=1, order_id=1, quantity=2, unit_price=110, total_price=220, food_item_id=9,
                    margin=WithMargin(FoodItemMarginInfo(9, 100, MarginType.PERCENT, 10)),
                ),),
            ),
        ]
        self.rents = [VehicleRent(order_id=1, rent_amount=50)]
        self.commissions = [
            ReferralCommission(referrer_id=501, commission_amount=300, status="pending"),
            ReferralCommission(referrer_id=501, commission_amount=5, status="paid"),
        ]
        self.calls = []

    def list_delivered_orders(self, filters):
        self.calls.append(("orders", filters))
        return self.orders

    def list_vehicle_rents(self, order_ids):
        self.calls.append(("vehicle_rents", list(order_ids)))
        return self.rents

    def list_referral_commissions(self):
        self.calls.append(("referrals", None))
        return self.commissions

    def list_sales_orders(self, filters):
        return [
            {"id": 1, "order_number": "A", "status": "delivered", "total_amount": 100.0,
             "service_type": "homemade", "panchayat_name": "North"},
            {"id": 2, "order_number": "B", "status": "cancelled", "total_amount": 50.0,
             "service_type": "homemade", "panchayat_name": "North"},
            {"id": 3, "order_number": "C", "status": "pending", "total_amount": None,
             "service_type": "cloud_kitchen", "panchayat_name": None},
        ]

    def list_cooks(self):
        return [{"id": 1, "kitchen_name": "Amma's Kitchen", "rating": 4.5}]

    def list_cook_orders(self, filters):
        return [
            {"assigned_cook_id": 1, "status": "delivered", "total_amount": 120.0, "cook_status": "cooked"},
            {"assigned_cook_id": 1, "status": "pending", "total_amount": 80.0, "cook_status": "rejected"},
        ]

    def list_delivery_staff(self):
        return [{"id": 1, "name": "Suresh", "total_deliveries": 4, "wallet": None}]

    def list_referral_codes(self):
        return [{"id": 1, "user_id": 501, "code": "ANNA10"}]

    def list_referrals(self):
        return [{"referrer_id": 501, "commission_amount": 300, "status": "pending"}]

    def list_profiles(self):
        return [{"user_id": 501, "name": "Anna"}]

    def list_vehicle_rent_rows(self, filters):
        return [
            {"id": 1, "order_id": 1, "vehicle_number": "KL-1", "rent_amount": 500.0},
            {"id": 2, "order_id": 2, "vehicle_number": "KL-2", "rent_amount": 250.5},
        ]

    def list_panchayats(self):
        return [{"id": 1, "name": "North"}]


class TestReportService(unittest.TestCase):
    """Test cases for ReportService"""

    def setUp(self):
        """Fresh data source and fetch pool per test"""
        self.source = FakeDataSource()
        self.pool = ThreadPoolManager()
        self.service = ReportService(self.source, pool_manager=self.pool)
        self.filters = ReportFilters()

    def tearDown(self):
        self.pool.shutdown_all(wait=True)

    def test_profit_loss(self):
        """Orders, rents and referrals are joined into one report"""
        report = self.service.fetch_profit_loss(self.filters)

        self.assertEqual(report.summary.platform_margin_revenue, Decimal("20"))
        self.assertEqual(report.summary.delivery_payouts, Decimal("80"))
        self.assertEqual(report.summary.referral_commissions, Decimal("5"))
        self.assertEqual(report.summary.net_profit, Decimal("-65"))
        self.assertIn(("vehicle_rents", [1]), self.source.calls)

    def test_rents_skipped_without_orders(self):
        """No delivered orders means no vehicle rent read"""
        self.source.orders = []
        report = self.service.fetch_profit_loss(self.filters)
        self.assertEqual(report.summary.order_count, 0)
        self.assertNotIn("vehicle_rents", [name for name, _ in self.source.calls])

    def test_failed_fetch_aborts_report(self):
        """A failing read surfaces as UpstreamSourceUnavailable"""
        def broken(filters):
            raise RuntimeError("connection reset")
        self.source.list_delivered_orders = broken

        with self.assertRaises(UpstreamSourceUnavailable) as ctx:
            self.service.fetch_profit_loss(self.filters)
        self.assertEqual(ctx.exception.source, "orders")

    def test_failed_rent_fetch_aborts_report(self):
        """A failing vehicle rent read names its source"""
        def broken(order_ids):
            raise RuntimeError("timeout reading vehicles")
        self.source.list_vehicle_rents = broken

        with self.assertRaises(UpstreamSourceUnavailable) as ctx:
            self.service.fetch_profit_loss(self.filters)
        self.assertEqual(ctx.exception.source, "vehicle_rents")
        self.assertIsInstance(ctx.exception.__cause__, RuntimeError)

    def test_missing_result_aborts_report(self):
        """A read returning nothing is not counted as zero"""
        self.source.list_referral_commissions = lambda: None

        with self.assertRaises(UpstreamSourceUnavailable) as ctx:
            self.service.fetch_profit_loss(self.filters)
        self.assertEqual(ctx.exception.source, "referrals")

    def test_invalid_order_passes_through(self):
        """Engine errors are not wrapped"""
        self.source.orders = [
            LedgerOrder(id=7, total_amount=10, service_type="homemade", delivery_earnings=0, created_at=None)
        ]
        with self.assertRaises(InvalidOrderRecord):
            self.service.fetch_profit_loss(self.filters)

    def test_fetch_timeout(self):
        """A read that never completes times out the report"""
        release = threading.Event()

        def slow():
            release.wait(5)
            return []
        self.source.list_referral_commissions = slow
        service = ReportService(self.source, pool_manager=self.pool, fetch_timeout=0.05)

        try:
            with self.assertRaises(UpstreamSourceUnavailable) as ctx:
                service.fetch_profit_loss(self.filters)
            self.assertEqual(ctx.exception.source, "report_fetch")
        finally:
            release.set()

    def test_sales_report(self):
        """Sales are grouped per region"""
        report = self.service.fetch_sales_report(self.filters)
        self.assertEqual(report["totals"]["orders"], 3)
        self.assertEqual(report["totals"]["sales"], Decimal("150.0"))
        north = report["by_panchayat"][0]
        self.assertEqual(north["panchayat_name"], "North")
        self.assertEqual(north["delivered_orders"], 1)
        self.assertEqual(report["by_panchayat"][1]["panchayat_name"], "Unknown")

    def test_vehicle_rent_report(self):
        """Vehicle rents are totalled"""
        report = self.service.fetch_vehicle_rent_report(self.filters)
        self.assertEqual(len(report["vehicles"]), 2)
        self.assertEqual(report["total_rent"], Decimal("750.5"))

    def test_panchayats(self):
        """Regions are passed through"""
        self.assertEqual(self.service.list_panchayats(), [{"id": 1, "name": "North"}])


class TestReportBuilders(unittest.TestCase):
    """Test cases for the simple report builders"""

    def test_summarize_sales_empty(self):
        """No orders gives zero totals"""
        report = summarize_sales([])
        self.assertEqual(report["totals"], {"orders": 0, "sales": Decimal("0"), "delivered": 0, "cancelled": 0})
        self.assertEqual(report["by_panchayat"], [])

    def test_cook_performance(self):
        """Counts accepted, rejected and completed orders per cook"""
        cooks = [{"id": 1, "kitchen_name": "A", "rating": 4.5}, {"id": 2, "kitchen_name": "B", "rating": None}]
        orders = [
            {"assigned_cook_id": 1, "status": OrderStatus.DELIVERED, "total_amount": 120.0, "cook_status": "cooked"},
            {"assigned_cook_id": 1, "status": "preparing", "total_amount": 60.0, "cook_status": "accepted"},
            {"assigned_cook_id": 1, "status": "cancelled", "total_amount": 80.0, "cook_status": "rejected"},
        ]
        rows = build_cook_performance(cooks, orders)

        self.assertEqual(rows[0]["total_orders"], 3)
        self.assertEqual(rows[0]["accepted_orders"], 2)
        self.assertEqual(rows[0]["rejected_orders"], 1)
        self.assertEqual(rows[0]["completed_orders"], 1)
        self.assertEqual(rows[0]["total_earnings"], Decimal("120.0"))
        self.assertEqual(rows[1]["total_orders"], 0)
        self.assertEqual(rows[1]["average_rating"], Decimal("0"))

    def test_delivery_settlement(self):
        """Pending settlement = collected + job earnings - settled"""
        rows = build_delivery_settlement([
            {"id": 1, "name": "Suresh", "total_deliveries": 2,
             "wallet": {"collected_amount": 335.0, "job_earnings": 50.0, "total_settled": 300.0}},
            {"id": 2, "name": "Ravi", "total_deliveries": None, "wallet": None},
        ])
        self.assertEqual(rows[0]["pending_settlement"], Decimal("85.0"))
        self.assertEqual(rows[1]["pending_settlement"], Decimal("0"))
        self.assertEqual(rows[1]["total_deliveries"], 0)

    def test_referral_report(self):
        """Commissions are split by status per referral code"""
        rows = build_referral_report(
            [{"user_id": 501, "code": "ANNA10"}, {"user_id": 502, "code": "BOB5"}],
            [
                {"referrer_id": 501, "commission_amount": 300, "status": "pending"},
                {"referrer_id": 501, "commission_amount": 200, "status": "paid"},
                {"referrer_id": 501, "commission_amount": 50, "status": "rejected"},
            ],
            [{"user_id": 501, "name": "Anna"}],
        )
        anna, bob = rows
        self.assertEqual(anna["referrer_name"], "Anna")
        self.assertEqual(anna["total_referrals"], 3)
        self.assertEqual(anna["total_commission"], Decimal("550"))
        self.assertEqual(anna["pending_commission"], Decimal("300"))
        self.assertEqual(anna["paid_commission"], Decimal("200"))
        self.assertEqual(bob["referrer_name"], "Unknown")
        self.assertEqual(bob["total_commission"], Decimal("0"))


if __name__ == "__main__":
    unittest.main()
