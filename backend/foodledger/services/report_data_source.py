"""Read-only access to the record store for the report query layer"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol

from sqlalchemy import func
from sqlalchemy.orm import Query, Session, joinedload, selectinload
from sqlalchemy.sql.elements import ColumnElement

from foodledger.models.cook import Cook
from foodledger.models.delivery import DeliveryStaff
from foodledger.models.enums import OrderStatus
from foodledger.models.order import Order, OrderItem
from foodledger.models.panchayat import Panchayat
from foodledger.models.referral import Profile, Referral, ReferralCode
from foodledger.models.vehicle import IndoorEventVehicle
from foodledger.services.profit_loss_types import (
    FoodItemMarginInfo,
    LedgerOrder,
    LedgerOrderItem,
    ReferralCommission,
    VehicleRent,
    WithMargin,
    WithoutMargin,
)
from foodledger.services.report_filters import ReportFilters

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


class ReportDataSource(Protocol):
    """Every read the report query layer performs"""

    def list_delivered_orders(self, filters: ReportFilters) -> List[LedgerOrder]: ...

    def list_vehicle_rents(self, order_ids: Iterable[Any]) -> List[VehicleRent]: ...

    def list_referral_commissions(self) -> List[ReferralCommission]: ...

    def list_sales_orders(self, filters: ReportFilters) -> List[Row]: ...

    def list_cooks(self) -> List[Row]: ...

    def list_cook_orders(self, filters: ReportFilters) -> List[Row]: ...

    def list_delivery_staff(self) -> List[Row]: ...

    def list_referral_codes(self) -> List[Row]: ...

    def list_referrals(self) -> List[Row]: ...

    def list_profiles(self) -> List[Row]: ...

    def list_vehicle_rent_rows(self, filters: ReportFilters) -> List[Row]: ...

    def list_panchayats(self) -> List[Row]: ...


def _enum_value(value):
    return getattr(value, "value", value)


SQLITE_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%f"


def _is_sqlite(query: Query) -> bool:
    return query.session.get_bind().dialect.name == "sqlite"


def _sqlite_bound(value: datetime) -> str:
    # Same layout as strftime("%f"): seconds with milliseconds
    return value.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]


def apply_date_bounds(query: Query, column: ColumnElement, filters: ReportFilters) -> Query:
    """
    Apply the inclusive start/end bounds to a timestamp column.

    SQLite keeps timestamps as text, with or without fractional seconds depending
    on who wrote the row (ORM or CURRENT_TIMESTAMP), so both sides are compared
    in one normalised layout there (millisecond precision).
    """
    if filters.start_date is None and filters.end_date is None:
        return query
    if _is_sqlite(query):
        column = func.strftime(SQLITE_TIMESTAMP_FORMAT, column)
        start = _sqlite_bound(filters.start_date) if filters.start_date is not None else None
        end = _sqlite_bound(filters.end_date) if filters.end_date is not None else None
    else:
        start, end = filters.start_date, filters.end_date
    if start is not None:
        query = query.filter(column >= start)
    if end is not None:
        query = query.filter(column <= end)
    return query


def apply_order_filters(query: Query, filters: ReportFilters, dates_only: bool = False) -> Query:
    """Apply the shared filter contract to an Order query"""
    query = apply_date_bounds(query, Order.created_at, filters)
    if dates_only:
        return query
    if filters.service_type is not None:
        query = query.filter(Order.service_type == filters.service_type)
    if filters.panchayat_id is not None:
        query = query.filter(Order.panchayat_id == filters.panchayat_id)
    return query


def to_ledger_item(item: OrderItem) -> LedgerOrderItem:
    """Map an order item row to the reducer's record"""
    food_item = item.food_item
    if food_item is not None:
        margin = WithMargin(
            FoodItemMarginInfo(
                food_item_id=food_item.id,
                price=food_item.price,
                margin_type=food_item.platform_margin_type,
                margin_value=food_item.platform_margin_value,
            )
        )
    else:
        margin = WithoutMargin(food_item_id=item.food_item_id)
    return LedgerOrderItem(
        id=item.id,
        order_id=item.order_id,
        quantity=item.quantity or 0,
        unit_price=item.unit_price,
        total_price=item.total_price,
        food_item_id=item.food_item_id,
        margin=margin,
    )


def to_ledger_order(order: Order) -> LedgerOrder:
    """Map an order row (items loaded) to the reducer's record"""
    return LedgerOrder(
        id=order.id,
        total_amount=order.total_amount,
        service_type=order.service_type,
        delivery_earnings=order.delivery_earnings,
        created_at=order.created_at,
        status=order.status,
        items=tuple(to_ledger_item(item) for item in order.items),
    )


class SqlAlchemyReportDataSource:
    """
    ReportDataSource over SQLAlchemy.

    Every call opens its own short-lived session from the factory, so calls can
    run concurrently on the report fetch pool.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def list_delivered_orders(self, filters: ReportFilters) -> List[LedgerOrder]:
        with self._session_factory() as db:
            query = db.query(Order).options(
                selectinload(Order.items).joinedload(OrderItem.food_item)
            ).filter(Order.status == OrderStatus.DELIVERED)
            query = apply_order_filters(query, filters)
            orders = query.order_by(Order.created_at, Order.id).all()
            return [to_ledger_order(order) for order in orders]

    def list_vehicle_rents(self, order_ids: Iterable[Any]) -> List[VehicleRent]:
        ids = list(order_ids)
        if not ids:
            return []
        with self._session_factory() as db:
            rows = db.query(
                IndoorEventVehicle.order_id,
                IndoorEventVehicle.rent_amount,
            ).filter(IndoorEventVehicle.order_id.in_(ids)).all()
            return [VehicleRent(order_id=order_id, rent_amount=rent) for order_id, rent in rows]

    def list_referral_commissions(self) -> List[ReferralCommission]:
        with self._session_factory() as db:
            rows = db.query(
                Referral.referrer_id,
                Referral.commission_amount,
                Referral.status,
            ).all()
            return [
                ReferralCommission(referrer_id=referrer_id, commission_amount=amount, status=status)
                for referrer_id, amount, status in rows
            ]

    def list_sales_orders(self, filters: ReportFilters) -> List[Row]:
        with self._session_factory() as db:
            query = db.query(Order).options(joinedload(Order.panchayat))
            query = apply_order_filters(query, filters)
            orders = query.order_by(Order.created_at.desc(), Order.id.desc()).all()
            return [
                {
                    "id": o.id,
                    "order_number": o.order_number,
                    "status": _enum_value(o.status),
                    "total_amount": o.total_amount,
                    "service_type": _enum_value(o.service_type),
                    "panchayat_id": o.panchayat_id,
                    "panchayat_name": o.panchayat.name if o.panchayat else None,
                    "ward_number": o.ward_number,
                    "created_at": o.created_at,
                }
                for o in orders
            ]

    def list_cooks(self) -> List[Row]:
        with self._session_factory() as db:
            cooks = db.query(Cook).order_by(Cook.id).all()
            return [
                {
                    "id": c.id,
                    "kitchen_name": c.kitchen_name,
                    "rating": c.rating,
                    "total_orders": c.total_orders,
                    "panchayat_id": c.panchayat_id,
                }
                for c in cooks
            ]

    def list_cook_orders(self, filters: ReportFilters) -> List[Row]:
        with self._session_factory() as db:
            query = db.query(
                Order.assigned_cook_id,
                Order.status,
                Order.total_amount,
                Order.cook_status,
            )
            # Cook performance only honours the date range
            query = apply_order_filters(query, filters, dates_only=True)
            return [
                {
                    "assigned_cook_id": cook_id,
                    "status": _enum_value(status),
                    "total_amount": total,
                    "cook_status": cook_status,
                }
                for cook_id, status, total, cook_status in query.all()
            ]

    def list_delivery_staff(self) -> List[Row]:
        with self._session_factory() as db:
            staff = db.query(DeliveryStaff).options(
                joinedload(DeliveryStaff.wallet)
            ).order_by(DeliveryStaff.id).all()
            rows = []
            for s in staff:
                wallet = s.wallet
                rows.append({
                    "id": s.id,
                    "name": s.name,
                    "total_deliveries": s.total_deliveries,
                    "wallet": None if wallet is None else {
                        "collected_amount": wallet.collected_amount,
                        "job_earnings": wallet.job_earnings,
                        "total_settled": wallet.total_settled,
                    },
                })
            return rows

    def list_referral_codes(self) -> List[Row]:
        with self._session_factory() as db:
            codes = db.query(ReferralCode).order_by(ReferralCode.id).all()
            return [
                {
                    "id": rc.id,
                    "user_id": rc.user_id,
                    "code": rc.code,
                    "total_referrals": rc.total_referrals,
                    "total_earnings": rc.total_earnings,
                }
                for rc in codes
            ]

    def list_referrals(self) -> List[Row]:
        with self._session_factory() as db:
            rows = db.query(
                Referral.referrer_id,
                Referral.commission_amount,
                Referral.status,
            ).all()
            return [
                {"referrer_id": referrer_id, "commission_amount": amount, "status": status}
                for referrer_id, amount, status in rows
            ]

    def list_profiles(self) -> List[Row]:
        with self._session_factory() as db:
            rows = db.query(Profile.user_id, Profile.name).all()
            return [{"user_id": user_id, "name": name} for user_id, name in rows]

    def list_vehicle_rent_rows(self, filters: ReportFilters) -> List[Row]:
        with self._session_factory() as db:
            query = db.query(IndoorEventVehicle).options(
                joinedload(IndoorEventVehicle.order).joinedload(Order.panchayat)
            ).filter(
                IndoorEventVehicle.rent_amount.isnot(None),
                IndoorEventVehicle.rent_amount > 0,
            )
            query = apply_date_bounds(query, IndoorEventVehicle.created_at, filters)
            vehicles = query.order_by(
                IndoorEventVehicle.created_at.desc(), IndoorEventVehicle.id.desc()
            ).all()
            rows = []
            for v in vehicles:
                order: Optional[Order] = v.order
                rows.append({
                    "id": v.id,
                    "order_id": v.order_id,
                    "order_number": order.order_number if order else None,
                    "order_status": _enum_value(order.status) if order else None,
                    "panchayat_name": order.panchayat.name if order and order.panchayat else None,
                    "vehicle_number": v.vehicle_number,
                    "driver_name": v.driver_name,
                    "driver_mobile": v.driver_mobile,
                    "rent_amount": v.rent_amount,
                    "created_at": v.created_at,
                })
            return rows

    def list_panchayats(self) -> List[Row]:
        with self._session_factory() as db:
            rows = db.query(Panchayat.id, Panchayat.name).filter(
                Panchayat.is_active.is_(True)
            ).order_by(Panchayat.name).all()
            return [{"id": pid, "name": name} for pid, name in rows]
