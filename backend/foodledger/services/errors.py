"""Reporting errors

Every failure the reporting engine and query layer surface is one of these;
the HTTP layer translates them into status codes.
"""
from typing import Optional


class ReportingError(Exception):
    """Base class for reporting failures"""


class InvalidMarginInput(ReportingError, ValueError):
    """Negative base price / margin value, or an unknown margin type"""


class InvalidOrderRecord(ReportingError, ValueError):
    """An order that cannot be placed in the ledger (e.g. no usable created_at)"""

    def __init__(self, message: str, order_id: Optional[object] = None):
        super().__init__(message)
        self.order_id = order_id


class UpstreamSourceUnavailable(ReportingError):
    """A record fetch failed; the whole report is aborted"""

    def __init__(self, source: str, message: Optional[str] = None):
        super().__init__(message or f"Upstream source '{source}' is unavailable")
        self.source = source


class InvalidReportFilter(ReportingError, ValueError):
    """A report filter value could not be parsed"""


class InvalidPayoutRecord(ReportingError, ValueError):
    """A vehicle rent or referral commission that cannot be charged (not a number, negative rent)"""
