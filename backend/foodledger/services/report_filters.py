"""Report filter contract shared by every report"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Optional, Union

from foodledger.models.enums import ServiceType
from foodledger.services.errors import InvalidReportFilter

ALL = "all"

DateInput = Union[datetime, date, str, None]


def _is_all(value) -> bool:
    return value is None or (isinstance(value, str) and value.strip().lower() in ("", ALL))


def _to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_bound(value: DateInput, end_of_day: bool, field_name: str) -> Optional[datetime]:
    """
    Parse a date bound into an aware UTC datetime.

    A date without a time covers the whole day: start bounds begin at 00:00,
    end bounds stop at 23:59:59.999999. Empty values mean unbounded.
    """
    if value is None or value == "":
        return None
    if isinstance(value, str):
        text = value.strip()
        try:
            if len(text) == 10:
                value = date.fromisoformat(text)
            else:
                value = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError as e:
            raise InvalidReportFilter(
                f"Invalid {field_name} format: {text!r}. Use ISO format."
            ) from e
    if isinstance(value, datetime):
        return _to_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.max if end_of_day else time.min, tzinfo=timezone.utc)
    raise InvalidReportFilter(f"Unsupported {field_name}: {value!r}")


@dataclass(frozen=True)
class ReportFilters:
    """
    Date range, service type and region filters.

    Both date bounds are inclusive; None means unbounded. service_type and
    panchayat_id of None mean "all".
    """
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    service_type: Optional[ServiceType] = None
    panchayat_id: Optional[int] = None

    @classmethod
    def from_query(
        cls,
        start_date: DateInput = None,
        end_date: DateInput = None,
        service_type: Union[ServiceType, str, None] = None,
        panchayat_id: Union[int, str, None] = None,
    ) -> "ReportFilters":
        """Build filters from raw query-string values"""
        start = parse_bound(start_date, end_of_day=False, field_name="start_date")
        end = parse_bound(end_date, end_of_day=True, field_name="end_date")

        service = None
        if not _is_all(service_type):
            try:
                service = ServiceType(service_type.strip() if isinstance(service_type, str) else service_type)
            except ValueError as e:
                raise InvalidReportFilter(
                    f"Invalid service_type: {service_type!r}. "
                    f"Use one of {[s.value for s in ServiceType]} or 'all'."
                ) from e

        region = None
        if not _is_all(panchayat_id):
            try:
                region = int(panchayat_id)
            except (TypeError, ValueError) as e:
                raise InvalidReportFilter(f"Invalid panchayat_id: {panchayat_id!r}") from e

        return cls(start_date=start, end_date=end, service_type=service, panchayat_id=region)

    def describe(self) -> dict:
        """Filter values for logging"""
        return {
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "service_type": self.service_type.value if self.service_type else ALL,
            "panchayat_id": self.panchayat_id if self.panchayat_id is not None else ALL,
        }
