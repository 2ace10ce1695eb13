"""
Admin reporting queries.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class RevenueReportQuery:
    """Query for monthly revenue; defaults to the last twelve months."""

    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


@dataclass
class ExportLicensesQuery:
    """Query for the license CSV export, filtered like the license listing."""

    sort_by: Optional[str] = None
    sort_order: Optional[str] = None
    status: Optional[str] = None
    search: Optional[str] = None
    is_free_trial: Optional[bool] = None
