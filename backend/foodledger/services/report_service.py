"""Report query layer: fetch filtered records, feed the engine, build simple reports"""
from __future__ import annotations

import logging
from collections import defaultdict
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Tuple

from foodledger.config import config
from foodledger.models.enums import (
    COOK_ACCEPTED_STATUSES,
    COOK_REJECTED_STATUS,
    OrderStatus,
    ReferralStatus,
)
from foodledger.services.errors import ReportingError, UpstreamSourceUnavailable
from foodledger.services.margin_calculator import to_decimal
from foodledger.services.profit_loss_engine import build_profit_loss_report
from foodledger.services.profit_loss_types import (
    ZERO,
    LedgerOrder,
    ProfitLossReport,
    ReferralCommission,
    VehicleRent,
)
from foodledger.services.report_data_source import ReportDataSource, Row
from foodledger.services.report_filters import ReportFilters
from foodledger.utils.thread_pool import (
    REPORT_FETCH_POOL,
    FetchTimeout,
    ThreadPoolManager,
    thread_pool_manager,
)

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"


def _money(value) -> Decimal:
    return to_decimal(value)


# --- Pure builders for the simple reports ---

def summarize_sales(orders: List[Row]) -> Dict[str, Any]:
    """Per-region summary and overall totals of a sales listing"""
    by_region: Dict[str, Dict[str, Any]] = {}
    for order in orders:
        name = order.get("panchayat_name") or UNKNOWN
        if name not in by_region:
            by_region[name] = {
                "panchayat_name": name,
                "total_orders": 0,
                "total_sales": ZERO,
                "delivered_orders": 0,
                "cancelled_orders": 0,
                "pending_orders": 0,
            }
        group = by_region[name]
        group["total_orders"] += 1
        group["total_sales"] += _money(order.get("total_amount"))
        status = order.get("status")
        if status == OrderStatus.DELIVERED:
            group["delivered_orders"] += 1
        elif status == OrderStatus.CANCELLED:
            group["cancelled_orders"] += 1
        elif status == OrderStatus.PENDING:
            group["pending_orders"] += 1

    totals = {
        "orders": len(orders),
        "sales": sum((_money(o.get("total_amount")) for o in orders), ZERO),
        "delivered": sum(1 for o in orders if o.get("status") == OrderStatus.DELIVERED),
        "cancelled": sum(1 for o in orders if o.get("status") == OrderStatus.CANCELLED),
    }
    return {"orders": orders, "by_panchayat": list(by_region.values()), "totals": totals}


def build_cook_performance(cooks: List[Row], orders: List[Row]) -> List[Row]:
    """Order counts and delivered earnings per cook"""
    orders_by_cook: Dict[Any, List[Row]] = defaultdict(list)
    for order in orders:
        orders_by_cook[order.get("assigned_cook_id")].append(order)

    results = []
    for cook in cooks:
        cook_orders = orders_by_cook.get(cook["id"], [])
        delivered = [o for o in cook_orders if o.get("status") == OrderStatus.DELIVERED]
        results.append({
            "cook_id": cook["id"],
            "kitchen_name": cook.get("kitchen_name"),
            "total_orders": len(cook_orders),
            "accepted_orders": sum(1 for o in cook_orders if o.get("cook_status") in COOK_ACCEPTED_STATUSES),
            "rejected_orders": sum(1 for o in cook_orders if o.get("cook_status") == COOK_REJECTED_STATUS),
            "completed_orders": len(delivered),
            "average_rating": _money(cook.get("rating")),
            "total_earnings": sum((_money(o.get("total_amount")) for o in delivered), ZERO),
        })
    return results


def build_delivery_settlement(staff: List[Row]) -> List[Row]:
    """Wallet figures and pending settlement per delivery staff member"""
    results = []
    for member in staff:
        wallet = member.get("wallet") or {}
        collected = _money(wallet.get("collected_amount"))
        job_earnings = _money(wallet.get("job_earnings"))
        settled = _money(wallet.get("total_settled"))
        results.append({
            "staff_id": member["id"],
            "staff_name": member.get("name"),
            "total_deliveries": member.get("total_deliveries") or 0,
            "collected_amount": collected,
            "job_earnings": job_earnings,
            "total_settled": settled,
            "pending_settlement": collected + job_earnings - settled,
        })
    return results


def build_referral_report(codes: List[Row], referrals: List[Row], profiles: List[Row]) -> List[Row]:
    """Commission totals per referral code"""
    referrals_by_user: Dict[Any, List[Row]] = defaultdict(list)
    for referral in referrals:
        referrals_by_user[referral.get("referrer_id")].append(referral)
    names = {p["user_id"]: p.get("name") for p in profiles}

    def total(rows: List[Row]) -> Decimal:
        return sum((_money(r.get("commission_amount")) for r in rows), ZERO)

    results = []
    for code in codes:
        user_referrals = referrals_by_user.get(code["user_id"], [])
        results.append({
            "referrer_id": code["user_id"],
            "referrer_name": names.get(code["user_id"]) or UNKNOWN,
            "referral_code": code.get("code"),
            "total_referrals": len(user_referrals),
            "total_commission": total(user_referrals),
            "pending_commission": total([r for r in user_referrals if r.get("status") == ReferralStatus.PENDING]),
            "paid_commission": total([r for r in user_referrals if r.get("status") == ReferralStatus.PAID]),
        })
    return results


class ReportService:
    """
    Report query layer.

    Fetches filtered records through a ReportDataSource and hands them to the
    profit & loss engine, or groups/counts them for the simple reports. Any
    fetch failure aborts the report with UpstreamSourceUnavailable; nothing
    is retried here.
    """

    def __init__(
        self,
        data_source: ReportDataSource,
        pool_manager: Optional[ThreadPoolManager] = None,
        fetch_timeout: Optional[float] = None,
    ):
        self._data_source = data_source
        self._pool_manager = pool_manager or thread_pool_manager
        self._fetch_timeout = fetch_timeout if fetch_timeout is not None else config.REPORT_FETCH_TIMEOUT

    def _fetch(self, source: str, fn: Callable, *args) -> Any:
        """Run one read, turning any store failure into UpstreamSourceUnavailable"""
        try:
            result = fn(*args)
        except ReportingError:
            raise
        except Exception as e:
            logger.error(f"Fetching {source} failed: {e}")
            raise UpstreamSourceUnavailable(source, f"Fetching {source} failed: {e}") from e
        if result is None:
            logger.error(f"Fetching {source} returned nothing")
            raise UpstreamSourceUnavailable(source)
        return result

    def _fetch_orders_and_rents(
        self, filters: ReportFilters
    ) -> Tuple[List[LedgerOrder], List[VehicleRent]]:
        orders = self._fetch("orders", self._data_source.list_delivered_orders, filters)
        order_ids = [order.id for order in orders]
        if not order_ids:
            return orders, []
        rents = self._fetch("vehicle_rents", self._data_source.list_vehicle_rents, order_ids)
        return orders, rents

    def _fetch_referrals(self) -> List[ReferralCommission]:
        return self._fetch("referrals", self._data_source.list_referral_commissions)

    def fetch_profit_loss(self, filters: ReportFilters) -> ProfitLossReport:
        """
        Profit & loss report for the filters.

        The orders -> vehicle rents chain and the referral fetch run concurrently;
        the engine only runs once both have completed.
        """
        pool = self._pool_manager
        futures = [
            pool.submit(REPORT_FETCH_POOL, self._fetch_orders_and_rents, filters),
            pool.submit(REPORT_FETCH_POOL, self._fetch_referrals),
        ]
        try:
            (orders, rents), referrals = pool.wait_for_completion(futures, timeout=self._fetch_timeout)
        except FetchTimeout as e:
            logger.error(f"Profit & loss fetch timed out: {e}")
            raise UpstreamSourceUnavailable("report_fetch", str(e)) from e

        # Referral commissions are not date-filtered (known inconsistency, kept as is)
        report = build_profit_loss_report(orders, rents, referrals)
        logger.info(
            f"Profit & loss report built: filters={filters.describe()}, "
            f"orders={len(orders)}, vehicle_rents={len(rents)}, referrals={len(referrals)}, "
            f"net_profit={report.summary.net_profit}"
        )
        return report

    def fetch_sales_report(self, filters: ReportFilters) -> Dict[str, Any]:
        """Every order matching the filters, with per-region summary and totals"""
        orders = self._fetch("orders", self._data_source.list_sales_orders, filters)
        logger.info(f"Sales report built: filters={filters.describe()}, orders={len(orders)}")
        return summarize_sales(orders)

    def fetch_cook_performance(self, filters: ReportFilters) -> List[Row]:
        """Per-cook order counts; only the date range applies"""
        cooks = self._fetch("cooks", self._data_source.list_cooks)
        orders = self._fetch("orders", self._data_source.list_cook_orders, filters)
        logger.info(f"Cook performance report built: cooks={len(cooks)}, orders={len(orders)}")
        return build_cook_performance(cooks, orders)

    def fetch_delivery_settlement(self) -> List[Row]:
        """Pending settlement per delivery staff member"""
        staff = self._fetch("delivery_staff", self._data_source.list_delivery_staff)
        logger.info(f"Delivery settlement report built: staff={len(staff)}")
        return build_delivery_settlement(staff)

    def fetch_referral_report(self) -> List[Row]:
        """Commission totals per referral code"""
        codes = self._fetch("referral_codes", self._data_source.list_referral_codes)
        referrals = self._fetch("referrals", self._data_source.list_referrals)
        profiles = self._fetch("profiles", self._data_source.list_profiles)
        logger.info(f"Referral report built: codes={len(codes)}, referrals={len(referrals)}")
        return build_referral_report(codes, referrals, profiles)

    def fetch_vehicle_rent_report(self, filters: ReportFilters) -> Dict[str, Any]:
        """Vehicles with a positive rent, newest first, with the rent total"""
        vehicles = self._fetch("vehicle_rents", self._data_source.list_vehicle_rent_rows, filters)
        total_rent = sum((_money(v.get("rent_amount")) for v in vehicles), ZERO)
        logger.info(f"Vehicle rent report built: filters={filters.describe()}, vehicles={len(vehicles)}")
        return {"vehicles": vehicles, "total_rent": total_rent}

    def list_panchayats(self) -> List[Row]:
        """Active regions ordered by name"""
        return self._fetch("panchayats", self._data_source.list_panchayats)
