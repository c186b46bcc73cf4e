"""API tests for the reports router"""
import unittest
from datetime import datetime, timezone
from decimal import Decimal
from fastapi.testclient import TestClient
from foodledger.main import app
from foodledger.models.enums import MarginType, ServiceType
from foodledger.routers.reports import get_report_service
from foodledger.services.errors import InvalidOrderRecord, InvalidPayoutRecord, UpstreamSourceUnavailable
from foodledger.services.profit_loss_engine import build_profit_loss_report
from foodledger.services.profit_loss_types import (
    FoodItemMarginInfo,
    LedgerOrder,
    LedgerOrderItem,
    ReferralCommission,
    VehicleRent,
    WithMargin,
)

DAY = datetime(2026, 1, 10, 12, 0, tzinfo=timezone.utc)


class StubReportService:
    """Report service returning canned reports and recording filters"""

    def __init__(self, error=None):
        self.error = error
        self.filters = None

    def _check(self, filters=None):
        self.filters = filters
        if self.error is not None:
            raise self.error

    def fetch_profit_loss(self, filters):
        self._check(filters)
        order = LedgerOrder(
            id=1, total_amount=240, service_type=ServiceType.HOMEMADE, delivery_earnings=30, created_at=DAY,
            items=(LedgerOrderItem(
                id=1, order_id=1, quantity=2, unit_price=110, total_price=220, food_item_id=9,
                margin=WithMargin(FoodItemMarginInfo(9, 100, MarginType.PERCENT, 10)),
            ),),
        )
        return build_profit_loss_report(
            [order],
            [VehicleRent(order_id=1, rent_amount=5)],
            [ReferralCommission(referrer_id=1, commission_amount=3, status="paid")],
        )

    def fetch_sales_report(self, filters):
        self._check(filters)
        return {
            "orders": [{
                "id": 1, "order_number": "ORD-1", "status": "delivered", "total_amount": 240.0,
                "service_type": "homemade", "panchayat_id": 1, "panchayat_name": "North",
                "ward_number": 3, "created_at": DAY,
            }],
            "by_panchayat": [{
                "panchayat_name": "North", "total_orders": 1, "total_sales": Decimal("240.0"),
                "delivered_orders": 1, "cancelled_orders": 0, "pending_orders": 0,
            }],
            "totals": {"orders": 1, "sales": Decimal("240.0"), "delivered": 1, "cancelled": 0},
        }

    def fetch_cook_performance(self, filters):
        self._check(filters)
        return [{
            "cook_id": 1, "kitchen_name": "Amma's Kitchen", "total_orders": 2, "accepted_orders": 1,
            "rejected_orders": 1, "completed_orders": 1, "average_rating": Decimal("4.5"),
            "total_earnings": Decimal("120.0"),
        }]

    def fetch_delivery_settlement(self):
        self._check()
        return [{
            "staff_id": 1, "staff_name": "Suresh", "total_deliveries": 2, "collected_amount": Decimal("335"),
            "job_earnings": Decimal("50"), "total_settled": Decimal("300"), "pending_settlement": Decimal("85"),
        }]

    def fetch_referral_report(self):
        self._check()
        return [{
            "referrer_id": 501, "referrer_name": "Anna", "referral_code": "ANNA10", "total_referrals": 2,
            "total_commission": Decimal("500"), "pending_commission": Decimal("300"),
            "paid_commission": Decimal("200"),
        }]

    def fetch_vehicle_rent_report(self, filters):
        self._check(filters)
        return {
            "vehicles": [{
                "id": 1, "order_id": 1, "order_number": "ORD-1", "order_status": "delivered",
                "panchayat_name": "North", "vehicle_number": "KL-1", "driver_name": "Ravi",
                "driver_mobile": "9000000001", "rent_amount": 500.0, "created_at": DAY,
            }],
            "total_rent": Decimal("500.0"),
        }

    def list_panchayats(self):
        self._check()
        return [{"id": 1, "name": "North"}]


class TestReportsApi(unittest.TestCase):
    """Test cases for /api/reports"""

    def setUp(self):
        """Route the reports to a stub service"""
        self.service = StubReportService()
        app.dependency_overrides[get_report_service] = lambda: self.service
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()

    def test_profit_loss(self):
        """Profit & loss JSON carries summary and both groupings"""
        response = self.client.get("/api/reports/profit-loss", params={"start_date": "2026-01-01"})
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertAlmostEqual(data["summary"]["platform_margin_revenue"], 20.0)
        self.assertAlmostEqual(data["summary"]["delivery_payouts"], 35.0)
        self.assertAlmostEqual(data["summary"]["net_profit"], -18.0)
        self.assertEqual(data["by_service"][0]["service_type"], "homemade")
        self.assertEqual(data["by_date"][0]["date"], "2026-01-10")
        self.assertEqual(self.service.filters.start_date, datetime(2026, 1, 1, tzinfo=timezone.utc))

    def test_filters_passed_to_service(self):
        """Service type and region filters are parsed"""
        response = self.client.get(
            "/api/reports/sales", params={"service_type": "homemade", "panchayat_id": "4"}
        )
        self.assertEqual(response.status_code, 200)
        self.assertIs(self.service.filters.service_type, ServiceType.HOMEMADE)
        self.assertEqual(self.service.filters.panchayat_id, 4)

    def test_invalid_filter_is_bad_request(self):
        """Unparseable filters give 400"""
        response = self.client.get("/api/reports/profit-loss", params={"start_date": "not-a-date"})
        self.assertEqual(response.status_code, 400)
        response = self.client.get("/api/reports/sales", params={"service_type": "catering"})
        self.assertEqual(response.status_code, 400)

    def test_upstream_failure_is_unavailable(self):
        """A failed read gives 503"""
        self.service.error = UpstreamSourceUnavailable("orders")
        response = self.client.get("/api/reports/profit-loss")
        self.assertEqual(response.status_code, 503)
        self.assertIn("orders", response.json()["detail"])

    def test_invalid_order_is_unprocessable(self):
        """Unusable order data gives 422"""
        self.service.error = InvalidOrderRecord("Order 7 has no created_at", order_id=7)
        response = self.client.get("/api/reports/profit-loss")
        self.assertEqual(response.status_code, 422)

    def test_invalid_payout_is_unprocessable(self):
        """Unusable rent or commission data gives 422"""
        self.service.error = InvalidPayoutRecord("Vehicle rent of order 3 must be >= 0, got -5")
        response = self.client.get("/api/reports/profit-loss")
        self.assertEqual(response.status_code, 422)

    def test_sales_report(self):
        """Sales report response"""
        data = self.client.get("/api/reports/sales").json()
        self.assertEqual(data["totals"]["orders"], 1)
        self.assertAlmostEqual(data["totals"]["sales"], 240.0)
        self.assertEqual(data["orders"][0]["order_number"], "ORD-1")

    def test_simple_reports(self):
        """Cook, delivery, referral, vehicle and region endpoints"""
        cooks = self.client.get("/api/reports/cook-performance").json()
        self.assertAlmostEqual(cooks[0]["average_rating"], 4.5)

        staff = self.client.get("/api/reports/delivery-settlement").json()
        self.assertAlmostEqual(staff[0]["pending_settlement"], 85.0)

        referrals = self.client.get("/api/reports/referrals").json()
        self.assertEqual(referrals[0]["referral_code"], "ANNA10")

        vehicles = self.client.get("/api/reports/vehicle-rents").json()
        self.assertAlmostEqual(vehicles["total_rent"], 500.0)

        regions = self.client.get("/api/reports/panchayats").json()
        self.assertEqual(regions, [{"id": 1, "name": "North"}])

    def test_export_csv(self):
        """Reports download as CSV attachments"""
        response = self.client.get("/api/reports/export/profit-loss-by-date")
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.headers["content-type"].startswith("text/csv"))
        self.assertIn("profit-loss-by-date_", response.headers["content-disposition"])
        lines = response.content.decode("utf-8-sig").splitlines()
        self.assertEqual(lines[0], "Date,Orders,Revenue,Platform Margin,Net Profit")
        self.assertEqual(lines[1], "2026-01-10,1,240,20,20")

    def test_export_unknown_report(self):
        """Unknown export names give 400"""
        response = self.client.get("/api/reports/export/payroll")
        self.assertEqual(response.status_code, 400)

    def test_health(self):
        """Health endpoint"""
        self.assertEqual(self.client.get("/health").json(), {"status": "healthy"})


if __name__ == "__main__":
    unittest.main()
