"""Financial reports API"""
from typing import Any, Dict, List, Optional
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel
from foodledger.database import SessionLocal
from foodledger.services.errors import (
    InvalidMarginInput,
    InvalidOrderRecord,
    InvalidPayoutRecord,
    InvalidReportFilter,
    ReportingError,
    UpstreamSourceUnavailable,
)
from foodledger.services.report_data_source import SqlAlchemyReportDataSource
from foodledger.services.report_export import export_report_csv
from foodledger.services.report_filters import ReportFilters
from foodledger.services.report_service import ReportService

router = APIRouter(prefix="/api/reports", tags=["reports"])


class ProfitLossSummaryResponse(BaseModel):
    """Profit & loss summary"""
    total_revenue: float
    platform_margin_revenue: float
    cook_payouts: float
    delivery_payouts: float
    referral_commissions: float
    net_profit: float
    order_count: int
    delivered_order_count: int


class ProfitLossByServiceResponse(BaseModel):
    """Profit & loss of one service type"""
    service_type: str
    total_revenue: float
    platform_margin: float
    cook_payouts: float
    order_count: int


class ProfitLossByDateResponse(BaseModel):
    """Profit & loss of one date"""
    date: str
    total_revenue: float
    platform_margin: float
    net_profit: float
    order_count: int


class ProfitLossResponse(BaseModel):
    """Profit & loss report"""
    summary: ProfitLossSummaryResponse
    by_service: List[ProfitLossByServiceResponse]
    by_date: List[ProfitLossByDateResponse]


class SalesOrderResponse(BaseModel):
    """Order row of the sales report"""
    id: int
    order_number: str
    status: str
    total_amount: Optional[float] = None
    service_type: str
    panchayat_id: Optional[int] = None
    panchayat_name: Optional[str] = None
    ward_number: Optional[int] = None
    created_at: Optional[datetime] = None


class SalesByPanchayatResponse(BaseModel):
    """Sales summary of one region"""
    panchayat_name: str
    total_orders: int
    total_sales: float
    delivered_orders: int
    cancelled_orders: int
    pending_orders: int


class SalesTotalsResponse(BaseModel):
    """Overall sales figures"""
    orders: int
    sales: float
    delivered: int
    cancelled: int


class SalesReportResponse(BaseModel):
    """Sales report"""
    orders: List[SalesOrderResponse]
    by_panchayat: List[SalesByPanchayatResponse]
    totals: SalesTotalsResponse


class CookPerformanceResponse(BaseModel):
    """Cook performance row"""
    cook_id: int
    kitchen_name: Optional[str] = None
    total_orders: int
    accepted_orders: int
    rejected_orders: int
    completed_orders: int
    average_rating: float
    total_earnings: float


class DeliverySettlementResponse(BaseModel):
    """Delivery settlement row"""
    staff_id: int
    staff_name: Optional[str] = None
    total_deliveries: int
    collected_amount: float
    job_earnings: float
    total_settled: float
    pending_settlement: float


class ReferralReportResponse(BaseModel):
    """Referral performance row"""
    referrer_id: int
    referrer_name: str
    referral_code: Optional[str] = None
    total_referrals: int
    total_commission: float
    pending_commission: float
    paid_commission: float


class VehicleRentResponse(BaseModel):
    """Vehicle rent row"""
    id: int
    order_id: int
    order_number: Optional[str] = None
    order_status: Optional[str] = None
    panchayat_name: Optional[str] = None
    vehicle_number: str
    driver_name: Optional[str] = None
    driver_mobile: Optional[str] = None
    rent_amount: float
    created_at: Optional[datetime] = None


class VehicleRentReportResponse(BaseModel):
    """Vehicle rent report"""
    vehicles: List[VehicleRentResponse]
    total_rent: float


class PanchayatResponse(BaseModel):
    """Region filter choice"""
    id: int
    name: str


def get_report_service() -> ReportService:
    """Dependency for the report service over the configured database"""
    return ReportService(SqlAlchemyReportDataSource(SessionLocal))


def to_http_exception(error: ReportingError) -> HTTPException:
    """Translate a reporting error into an HTTP error"""
    if isinstance(error, InvalidReportFilter):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
    if isinstance(error, (InvalidMarginInput, InvalidOrderRecord, InvalidPayoutRecord)):
        return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(error))
    if isinstance(error, UpstreamSourceUnavailable):
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Report data source unavailable: {error.source}",
        )
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))


def parse_filters(
    start_date: Optional[str] = Query(None, description="Inclusive start, ISO date or datetime"),
    end_date: Optional[str] = Query(None, description="Inclusive end, ISO date or datetime"),
    service_type: Optional[str] = Query("all", description="indoor_events, cloud_kitchen, homemade or all"),
    panchayat_id: Optional[str] = Query("all", description="Region id or all"),
) -> ReportFilters:
    """Dependency parsing the shared report filters"""
    try:
        return ReportFilters.from_query(
            start_date=start_date,
            end_date=end_date,
            service_type=service_type,
            panchayat_id=panchayat_id,
        )
    except InvalidReportFilter as e:
        raise to_http_exception(e) from e


def _dump(row: Dict[str, Any]) -> Dict[str, Any]:
    return {key: getattr(value, "value", value) for key, value in row.items()}


@router.get("/profit-loss", response_model=ProfitLossResponse)
def get_profit_loss(
    filters: ReportFilters = Depends(parse_filters),
    service: ReportService = Depends(get_report_service),
):
    """Profit & loss summary grouped by service type and by date"""
    try:
        report = service.fetch_profit_loss(filters)
    except ReportingError as e:
        raise to_http_exception(e) from e

    return ProfitLossResponse(
        summary=ProfitLossSummaryResponse(**vars(report.summary)),
        by_service=[ProfitLossByServiceResponse(**_dump(vars(s))) for s in report.by_service.values()],
        by_date=[ProfitLossByDateResponse(**vars(d)) for d in report.by_date],
    )


@router.get("/sales", response_model=SalesReportResponse)
def get_sales_report(
    filters: ReportFilters = Depends(parse_filters),
    service: ReportService = Depends(get_report_service),
):
    """Orders of every status with per-region summary"""
    try:
        return service.fetch_sales_report(filters)
    except ReportingError as e:
        raise to_http_exception(e) from e


@router.get("/cook-performance", response_model=List[CookPerformanceResponse])
def get_cook_performance(
    filters: ReportFilters = Depends(parse_filters),
    service: ReportService = Depends(get_report_service),
):
    """Order counts and earnings per cook"""
    try:
        return service.fetch_cook_performance(filters)
    except ReportingError as e:
        raise to_http_exception(e) from e


@router.get("/delivery-settlement", response_model=List[DeliverySettlementResponse])
def get_delivery_settlement(service: ReportService = Depends(get_report_service)):
    """Pending settlement per delivery staff member"""
    try:
        return service.fetch_delivery_settlement()
    except ReportingError as e:
        raise to_http_exception(e) from e


@router.get("/referrals", response_model=List[ReferralReportResponse])
def get_referral_report(service: ReportService = Depends(get_report_service)):
    """Commission totals per referral code"""
    try:
        return service.fetch_referral_report()
    except ReportingError as e:
        raise to_http_exception(e) from e


@router.get("/vehicle-rents", response_model=VehicleRentReportResponse)
def get_vehicle_rent_report(
    filters: ReportFilters = Depends(parse_filters),
    service: ReportService = Depends(get_report_service),
):
    """Indoor event vehicle rents, newest first"""
    try:
        return service.fetch_vehicle_rent_report(filters)
    except ReportingError as e:
        raise to_http_exception(e) from e


@router.get("/panchayats", response_model=List[PanchayatResponse])
def get_panchayats(service: ReportService = Depends(get_report_service)):
    """Active regions for the filter"""
    try:
        return service.list_panchayats()
    except ReportingError as e:
        raise to_http_exception(e) from e


@router.get("/export/{report_name}")
def export_report(
    report_name: str,
    filters: ReportFilters = Depends(parse_filters),
    service: ReportService = Depends(get_report_service),
):
    """Export a report as CSV"""
    try:
        csv_bytes = export_report_csv(service, report_name, filters)
    except ReportingError as e:
        raise to_http_exception(e) from e

    return Response(
        content=csv_bytes,
        media_type="text/csv",
        headers={
            "Content-Disposition": f"attachment; filename={report_name}_{datetime.now().strftime('%Y%m%d_%H%M%S')}.csv"
        }
    )
