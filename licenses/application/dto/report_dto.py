"""
Admin reporting DTOs.
"""
import csv
import io
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional

from activations.ports.activation_repository import ActivationCounts
from licenses.application.dto.license_dto import LicenseDTO
from licenses.ports.license_repository import LicenseCounts
from licenses.ports.subscription_repository import SubscriptionCounts
from payments.ports.payment_repository import PaymentStatistics, RevenuePeriod


def _iso(value) -> str:
    return value.isoformat() if value else ""


LICENSE_EXPORT_HEADERS = [
    "ID",
    "License Key",
    "Customer Name",
    "Customer Phone",
    "Status",
    "Free Trial",
    "Purchase Date",
    "Initial Price",
    "Location Name",
    "Location Address",
    "End Date",
    "Created At",
    "Updated At",
]


@dataclass
class DashboardStatsDTO:
    """DTO for the admin dashboard."""

    licenses: LicenseCounts
    subscriptions: SubscriptionCounts
    activations: ActivationCounts
    revenue_total: PaymentStatistics
    revenue_month: PaymentStatistics
    revenue_year: PaymentStatistics
    recent_payments: int

    def to_dict(self) -> dict:
        return {
            "licenses": {
                "total": self.licenses.total,
                "active": self.licenses.active,
                "expired": self.licenses.expired,
                "revoked": self.licenses.revoked,
                "suspended": self.licenses.suspended,
                "freeTrial": self.licenses.free_trial,
                "expiringSoon": self.licenses.expiring_soon,
            },
            "revenue": {
                "total": str(self.revenue_total.total_amount),
                "monthly": str(self.revenue_month.total_amount),
                "annual": str(self.revenue_year.total_amount),
                "byType": {
                    "initial": str(self.revenue_total.total_one_off_amount),
                    "subscription": str(self.revenue_total.total_annual_amount),
                },
            },
            "activations": {
                "total": self.activations.total,
                "active": self.activations.active,
                "inactive": self.activations.inactive,
            },
            "subscriptions": {
                "total": self.subscriptions.total,
                "active": self.subscriptions.active,
                "expired": self.subscriptions.expired,
                "gracePeriod": self.subscriptions.grace_period,
                "expiringSoon": self.subscriptions.expiring_soon,
            },
            "recentActivity": {
                "licenses": self.licenses.created_recently,
                "activations": self.activations.created_recently,
                "payments": self.recent_payments,
            },
        }


@dataclass
class RevenueReportDTO:
    """DTO for monthly revenue with a month-over-month trend."""

    periods: List[RevenuePeriod]

    @property
    def trend(self) -> Optional[Decimal]:
        """Percent change of the last month against the one before, if defined."""
        if len(self.periods) < 2:
            return None
        previous, last = self.periods[-2].amount, self.periods[-1].amount
        if previous <= 0:
            return None
        return ((last - previous) / previous * 100).quantize(Decimal("0.01"))

    def to_dict(self) -> dict:
        trend = self.trend
        return {
            "revenueByPeriod": [
                {
                    "period": period.period,
                    "amount": str(period.amount),
                    "count": period.count,
                    "initialPayments": str(period.initial_payments),
                    "subscriptionPayments": str(period.subscription_payments),
                }
                for period in self.periods
            ],
            "summary": {
                "totalRevenue": str(sum((p.amount for p in self.periods), Decimal("0.00"))),
                "totalCount": sum(p.count for p in self.periods),
                "periodCount": len(self.periods),
                "trend": str(trend) if trend is not None else None,
            },
        }


@dataclass
class LicenseExportDTO:
    """DTO rendering licenses as CSV."""

    licenses: List[LicenseDTO]

    def to_csv(self) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(LICENSE_EXPORT_HEADERS)
        for license in self.licenses:
            writer.writerow(
                [
                    str(license.id),
                    license.license_key,
                    license.customer_name or "",
                    license.customer_phone or "",
                    license.status,
                    "yes" if license.is_free_trial else "no",
                    _iso(license.purchase_date),
                    str(license.initial_price),
                    license.location_name or "",
                    license.location_address or "",
                    _iso(license.end_date),
                    _iso(license.created_at),
                    _iso(license.updated_at),
                ]
            )
        return buffer.getvalue()
