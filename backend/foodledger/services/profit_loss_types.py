"""Immutable records consumed and produced by the profit & loss engine"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal
from typing import FrozenSet, Hashable, Mapping, Optional, Tuple, Union

from foodledger.models.enums import MarginType, OrderStatus, ServiceType

Number = Union[Decimal, int, float]

ZERO = Decimal("0")


# --- Inputs (read-only snapshot supplied by the data source) ---

@dataclass(frozen=True)
class FoodItemMarginInfo:
    """Margin metadata of the food item behind an order item"""
    food_item_id: Optional[Hashable]
    price: Optional[Number]                       # cook's base price
    margin_type: Optional[Union[MarginType, str]] = None
    margin_value: Optional[Number] = None


@dataclass(frozen=True)
class WithMargin:
    """The order item still has its food item; margin is attributed"""
    info: FoodItemMarginInfo


@dataclass(frozen=True)
class WithoutMargin:
    """Deleted or legacy food item; the whole line goes to the cook"""
    food_item_id: Optional[Hashable] = None


MarginSnapshot = Union[WithMargin, WithoutMargin]


@dataclass(frozen=True)
class LedgerOrderItem:
    """Order item as seen by the reducer"""
    id: Hashable
    order_id: Hashable
    quantity: Number
    unit_price: Optional[Number]
    total_price: Optional[Number]
    food_item_id: Optional[Hashable] = None
    margin: MarginSnapshot = field(default_factory=WithoutMargin)


@dataclass(frozen=True)
class LedgerOrder:
    """Order with its items"""
    id: Hashable
    total_amount: Optional[Number]
    service_type: Union[ServiceType, str]
    delivery_earnings: Optional[Number]
    created_at: Union[datetime, date, str, None]
    status: Union[OrderStatus, str] = OrderStatus.DELIVERED
    items: Tuple[LedgerOrderItem, ...] = ()


@dataclass(frozen=True)
class VehicleRent:
    """Indoor event vehicle rent charged against delivery payouts"""
    order_id: Hashable
    rent_amount: Optional[Number]


@dataclass(frozen=True)
class ReferralCommission:
    """Commission owed to a referrer"""
    referrer_id: Hashable
    commission_amount: Optional[Number]
    status: str


# --- Reducer output ---

@dataclass(frozen=True)
class OrderSettlement:
    """Ledger entry of one delivered order"""
    order_id: Hashable
    service_type: ServiceType
    date_key: str                 # YYYY-MM-DD, UTC
    revenue: Decimal
    delivery_earnings: Decimal
    platform_margin: Decimal
    cook_payout: Decimal
    fallback_items: int = 0       # items settled without margin info


@dataclass(frozen=True)
class LedgerTotals:
    """Running totals of the reducer"""
    total_revenue: Decimal = ZERO
    platform_margin_revenue: Decimal = ZERO
    cook_payouts: Decimal = ZERO
    delivery_payouts: Decimal = ZERO
    order_count: int = 0

    def add(self, entry: OrderSettlement) -> "LedgerTotals":
        return LedgerTotals(
            total_revenue=self.total_revenue + entry.revenue,
            platform_margin_revenue=self.platform_margin_revenue + entry.platform_margin,
            cook_payouts=self.cook_payouts + entry.cook_payout,
            delivery_payouts=self.delivery_payouts + entry.delivery_earnings,
            order_count=self.order_count + 1,
        )


@dataclass(frozen=True)
class ProfitLossByService:
    """Totals of one service type"""
    service_type: ServiceType
    total_revenue: Decimal = ZERO
    platform_margin: Decimal = ZERO
    cook_payouts: Decimal = ZERO
    order_count: int = 0

    def add(self, entry: OrderSettlement) -> "ProfitLossByService":
        return replace(
            self,
            total_revenue=self.total_revenue + entry.revenue,
            platform_margin=self.platform_margin + entry.platform_margin,
            cook_payouts=self.cook_payouts + entry.cook_payout,
            order_count=self.order_count + 1,
        )


@dataclass(frozen=True)
class DateLedger:
    """Totals of one UTC calendar date"""
    date: str
    total_revenue: Decimal = ZERO
    platform_margin: Decimal = ZERO
    order_count: int = 0

    def add(self, entry: OrderSettlement) -> "DateLedger":
        return replace(
            self,
            total_revenue=self.total_revenue + entry.revenue,
            platform_margin=self.platform_margin + entry.platform_margin,
            order_count=self.order_count + 1,
        )


@dataclass(frozen=True)
class LedgerReduction:
    """Result of folding a set of delivered orders"""
    totals: LedgerTotals
    by_service: Mapping[ServiceType, ProfitLossByService]
    by_date: Tuple[DateLedger, ...]
    delivered_order_ids: FrozenSet[Hashable]
    fallback_item_count: int = 0


# --- Reconciler output ---

@dataclass(frozen=True)
class ProfitLossSummary:
    """Profit & loss figures of a report"""
    total_revenue: Decimal
    platform_margin_revenue: Decimal
    cook_payouts: Decimal
    delivery_payouts: Decimal
    referral_commissions: Decimal
    net_profit: Decimal
    order_count: int
    delivered_order_count: int


@dataclass(frozen=True)
class ProfitLossByDate:
    """Per-date figures; net_profit equals platform_margin"""
    date: str
    total_revenue: Decimal
    platform_margin: Decimal
    net_profit: Decimal
    order_count: int


@dataclass(frozen=True)
class ProfitLossReport:
    """Summary plus the two groupings"""
    summary: ProfitLossSummary
    by_service: Mapping[ServiceType, ProfitLossByService]
    by_date: Tuple[ProfitLossByDate, ...]
