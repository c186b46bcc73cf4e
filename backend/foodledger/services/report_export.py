"""CSV export of report rows"""
import csv
import io
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterable, List, Sequence, Tuple

from foodledger.config import config
from foodledger.services.errors import InvalidReportFilter
from foodledger.services.report_filters import ReportFilters
from foodledger.services.report_service import ReportService

# report name -> (header, row key) columns
EXPORT_COLUMNS: Dict[str, Sequence[Tuple[str, str]]] = {
    "profit-loss-by-date": (
        ("Date", "date"),
        ("Orders", "order_count"),
        ("Revenue", "total_revenue"),
        ("Platform Margin", "platform_margin"),
        ("Net Profit", "net_profit"),
    ),
    "profit-loss-by-service": (
        ("Service", "service_type"),
        ("Orders", "order_count"),
        ("Revenue", "total_revenue"),
        ("Platform Margin", "platform_margin"),
        ("Cook Payouts", "cook_payouts"),
    ),
    "sales": (
        ("Order Number", "order_number"),
        ("Status", "status"),
        ("Service", "service_type"),
        ("Panchayat", "panchayat_name"),
        ("Ward", "ward_number"),
        ("Amount", "total_amount"),
        ("Created At", "created_at"),
    ),
    "cook-performance": (
        ("Kitchen", "kitchen_name"),
        ("Total Orders", "total_orders"),
        ("Accepted", "accepted_orders"),
        ("Rejected", "rejected_orders"),
        ("Completed", "completed_orders"),
        ("Rating", "average_rating"),
        ("Earnings", "total_earnings"),
    ),
    "delivery-settlement": (
        ("Staff", "staff_name"),
        ("Deliveries", "total_deliveries"),
        ("Collected", "collected_amount"),
        ("Job Earnings", "job_earnings"),
        ("Settled", "total_settled"),
        ("Pending Settlement", "pending_settlement"),
    ),
    "referrals": (
        ("Referrer", "referrer_name"),
        ("Code", "referral_code"),
        ("Referrals", "total_referrals"),
        ("Total Commission", "total_commission"),
        ("Pending", "pending_commission"),
        ("Paid", "paid_commission"),
    ),
    "vehicle-rents": (
        ("Order Number", "order_number"),
        ("Order Status", "order_status"),
        ("Panchayat", "panchayat_name"),
        ("Vehicle", "vehicle_number"),
        ("Driver", "driver_name"),
        ("Driver Mobile", "driver_mobile"),
        ("Rent", "rent_amount"),
        ("Created At", "created_at"),
    ),
}


def _cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Decimal):
        return format(value, "f")
    return value


def render_csv(columns: Sequence[Tuple[str, str]], rows: Iterable[Dict[str, Any]]) -> bytes:
    """Render rows as CSV bytes (configured encoding, BOM by default for Excel)"""
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow([header for header, _ in columns])
    for row in rows:
        writer.writerow([_cell(row.get(key)) for _, key in columns])
    return output.getvalue().encode(config.EXPORT_CSV_ENCODING)


def collect_export_rows(service: ReportService, report_name: str, filters: ReportFilters) -> List[Dict[str, Any]]:
    """Fetch the rows of a named report"""
    if report_name == "profit-loss-by-date":
        return [vars(d) for d in service.fetch_profit_loss(filters).by_date]
    if report_name == "profit-loss-by-service":
        return [vars(s) for s in service.fetch_profit_loss(filters).by_service.values()]
    if report_name == "sales":
        return service.fetch_sales_report(filters)["orders"]
    if report_name == "cook-performance":
        return service.fetch_cook_performance(filters)
    if report_name == "delivery-settlement":
        return service.fetch_delivery_settlement()
    if report_name == "referrals":
        return service.fetch_referral_report()
    if report_name == "vehicle-rents":
        return service.fetch_vehicle_rent_report(filters)["vehicles"]
    raise InvalidReportFilter(
        f"Unknown report: {report_name!r}. Use one of {sorted(EXPORT_COLUMNS)}."
    )


def export_report_csv(service: ReportService, report_name: str, filters: ReportFilters) -> bytes:
    """CSV bytes of a named report"""
    if report_name not in EXPORT_COLUMNS:
        raise InvalidReportFilter(
            f"Unknown report: {report_name!r}. Use one of {sorted(EXPORT_COLUMNS)}."
        )
    return render_csv(EXPORT_COLUMNS[report_name], collect_export_rows(service, report_name, filters))
