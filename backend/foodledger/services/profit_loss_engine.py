"""Profit & loss engine - pure calculation logic without side effects"""
from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from functools import reduce
from types import MappingProxyType
from typing import Dict, Hashable, Iterable, Mapping, Optional, Sequence, Tuple

from foodledger.models.enums import OrderStatus, ReferralStatus, ServiceType
from foodledger.services.errors import (
    InvalidOrderRecord,
    InvalidPayoutRecord,
    UpstreamSourceUnavailable,
)
from foodledger.services.margin_calculator import compute_margin, to_decimal
from foodledger.services.profit_loss_types import (
    ZERO,
    DateLedger,
    LedgerOrder,
    LedgerOrderItem,
    LedgerReduction,
    LedgerTotals,
    OrderSettlement,
    ProfitLossByDate,
    ProfitLossByService,
    ProfitLossReport,
    ProfitLossSummary,
    ReferralCommission,
    VehicleRent,
    WithMargin,
    WithoutMargin,
)

logger = logging.getLogger(__name__)


def utc_date_key(created_at, order_id: Optional[Hashable] = None) -> str:
    """
    Calendar date (YYYY-MM-DD, UTC) of an order timestamp.

    Naive datetimes are taken as UTC. Missing or unparseable values raise
    InvalidOrderRecord so the order is never grouped under an undefined key.
    """
    if created_at is None or created_at == "":
        raise InvalidOrderRecord(f"Order {order_id} has no created_at", order_id=order_id)

    if isinstance(created_at, str):
        try:
            created_at = datetime.fromisoformat(created_at.strip().replace("Z", "+00:00"))
        except ValueError as e:
            raise InvalidOrderRecord(
                f"Order {order_id} has an unparseable created_at: {created_at!r}",
                order_id=order_id,
            ) from e

    if isinstance(created_at, datetime):
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return created_at.astimezone(timezone.utc).date().isoformat()
    if isinstance(created_at, date):
        return created_at.isoformat()

    raise InvalidOrderRecord(
        f"Order {order_id} has an unsupported created_at: {created_at!r}",
        order_id=order_id,
    )


def _is_delivered(status) -> bool:
    return status == OrderStatus.DELIVERED


class OrderLedgerReducer:
    """Folds delivered orders into totals and the by-service / by-date groupings"""

    @staticmethod
    def settle_item(item: LedgerOrderItem) -> Tuple[Decimal, Decimal]:
        """
        Split one order item into (platform_margin, cook_payout).

        WithMargin: base price (food item price, else unit price) times quantity goes
        to the cook and the per-unit margin times quantity to the platform.
        WithoutMargin: the line total goes to the cook, no margin.
        """
        snapshot = item.margin
        if isinstance(snapshot, WithMargin):
            info = snapshot.info
            base_price = to_decimal(info.price if info.price is not None else item.unit_price)
            quantity = to_decimal(item.quantity)
            margin_per_unit = compute_margin(base_price, info.margin_type, info.margin_value)
            return margin_per_unit * quantity, base_price * quantity
        if isinstance(snapshot, WithoutMargin):
            return ZERO, to_decimal(item.total_price, error=InvalidOrderRecord)
        raise TypeError(f"Unknown margin snapshot for order item {item.id}: {snapshot!r}")

    @staticmethod
    def settle_order(order: LedgerOrder) -> OrderSettlement:
        """Ledger entry of a single order"""
        try:
            service_type = ServiceType(order.service_type)
        except ValueError as e:
            raise InvalidOrderRecord(
                f"Order {order.id} has an unknown service type: {order.service_type!r}",
                order_id=order.id,
            ) from e
        date_key = utc_date_key(order.created_at, order.id)

        order_margin = ZERO
        order_cook_payout = ZERO
        fallback_items = 0
        for item in order.items:
            item_margin, item_cook_payout = OrderLedgerReducer.settle_item(item)
            order_margin += item_margin
            order_cook_payout += item_cook_payout
            if isinstance(item.margin, WithoutMargin):
                fallback_items += 1

        return OrderSettlement(
            order_id=order.id,
            service_type=service_type,
            date_key=date_key,
            revenue=to_decimal(order.total_amount, error=InvalidOrderRecord),
            delivery_earnings=to_decimal(order.delivery_earnings, error=InvalidOrderRecord),
            platform_margin=order_margin,
            cook_payout=order_cook_payout,
            fallback_items=fallback_items,
        )

    @staticmethod
    def reduce(orders: Iterable[LedgerOrder]) -> LedgerReduction:
        """
        Fold orders into an immutable LedgerReduction.

        Orders that are not delivered are ignored. A single invalid order fails
        the whole batch (InvalidOrderRecord) so revenue is never undercounted.
        """
        delivered = [order for order in orders if _is_delivered(order.status)]
        settlements = tuple(OrderLedgerReducer.settle_order(order) for order in delivered)

        totals = reduce(LedgerTotals.add, settlements, LedgerTotals())
        fallback_item_count = sum(s.fallback_items for s in settlements)
        if fallback_item_count:
            logger.debug(
                f"{fallback_item_count} order items had no food item margin info; "
                f"credited their total price to cook payouts"
            )

        return LedgerReduction(
            totals=totals,
            by_service=_group_by_service(settlements),
            by_date=_group_by_date(settlements),
            delivered_order_ids=frozenset(s.order_id for s in settlements),
            fallback_item_count=fallback_item_count,
        )


def _group_by_service(
    settlements: Sequence[OrderSettlement],
) -> Mapping[ServiceType, ProfitLossByService]:
    groups: Dict[ServiceType, ProfitLossByService] = {}
    for entry in settlements:
        current = groups.get(entry.service_type) or ProfitLossByService(service_type=entry.service_type)
        groups[entry.service_type] = current.add(entry)
    # Declaration order of ServiceType, only services that occurred
    return MappingProxyType({st: groups[st] for st in ServiceType if st in groups})


def _group_by_date(settlements: Sequence[OrderSettlement]) -> Tuple[DateLedger, ...]:
    groups: Dict[str, DateLedger] = {}
    for entry in settlements:
        current = groups.get(entry.date_key) or DateLedger(date=entry.date_key)
        groups[entry.date_key] = current.add(entry)
    return tuple(groups[key] for key in sorted(groups))


class PayoutReconciler:
    """Merges the vehicle-rent and referral sub-ledgers into the final summary"""

    @staticmethod
    def vehicle_rent_total(
        vehicle_rents: Iterable[VehicleRent],
        delivered_order_ids: Iterable[Hashable],
    ) -> Decimal:
        """Sum of rents attached to the delivered orders only"""
        delivered = frozenset(delivered_order_ids)
        return sum(
            (PayoutReconciler.rent_amount(v) for v in vehicle_rents if v.order_id in delivered),
            ZERO,
        )

    @staticmethod
    def rent_amount(vehicle_rent: VehicleRent) -> Decimal:
        """Rent of one vehicle; null is 0, negative is rejected"""
        rent = to_decimal(vehicle_rent.rent_amount, error=InvalidPayoutRecord)
        if rent < ZERO:
            raise InvalidPayoutRecord(
                f"Vehicle rent of order {vehicle_rent.order_id} must be >= 0, got {rent}"
            )
        return rent

    @staticmethod
    def paid_referral_total(referrals: Iterable[ReferralCommission]) -> Decimal:
        """Sum of paid commissions; other statuses are reported but not charged"""
        return sum(
            (
                to_decimal(r.commission_amount, error=InvalidPayoutRecord)
                for r in referrals
                if r.status == ReferralStatus.PAID
            ),
            ZERO,
        )

    @staticmethod
    def reconcile(
        reduction: LedgerReduction,
        vehicle_rents: Optional[Sequence[VehicleRent]],
        referrals: Optional[Sequence[ReferralCommission]],
    ) -> ProfitLossReport:
        """
        Build the profit & loss report.

        net_profit = platform_margin_revenue - delivery_payouts - paid referral commissions,
        where delivery_payouts includes vehicle rents of the delivered orders.
        A missing sub-ledger (None) raises UpstreamSourceUnavailable instead of counting as zero.
        """
        if vehicle_rents is None:
            raise UpstreamSourceUnavailable("vehicle_rents")
        if referrals is None:
            raise UpstreamSourceUnavailable("referrals")

        totals = reduction.totals
        rent_total = PayoutReconciler.vehicle_rent_total(vehicle_rents, reduction.delivered_order_ids)
        delivery_payouts = totals.delivery_payouts + rent_total
        referral_commissions = PayoutReconciler.paid_referral_total(referrals)
        net_profit = totals.platform_margin_revenue - delivery_payouts - referral_commissions

        summary = ProfitLossSummary(
            total_revenue=totals.total_revenue,
            platform_margin_revenue=totals.platform_margin_revenue,
            cook_payouts=totals.cook_payouts,
            delivery_payouts=delivery_payouts,
            referral_commissions=referral_commissions,
            net_profit=net_profit,
            order_count=totals.order_count,
            delivered_order_count=totals.order_count,
        )

        # Delivery and referral costs are not attributed to dates
        by_date = tuple(
            ProfitLossByDate(
                date=d.date,
                total_revenue=d.total_revenue,
                platform_margin=d.platform_margin,
                net_profit=d.platform_margin,
                order_count=d.order_count,
            )
            for d in reduction.by_date
        )

        return ProfitLossReport(summary=summary, by_service=reduction.by_service, by_date=by_date)


def build_profit_loss_report(
    orders: Iterable[LedgerOrder],
    vehicle_rents: Optional[Sequence[VehicleRent]],
    referrals: Optional[Sequence[ReferralCommission]],
) -> ProfitLossReport:
    """Thin wrapper: reduce the orders, then reconcile the payouts"""
    reduction = OrderLedgerReducer.reduce(orders)
    return PayoutReconciler.reconcile(reduction, vehicle_rents, referrals)
