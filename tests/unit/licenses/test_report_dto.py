"""
Unit tests for the admin report DTOs.
"""

import csv
import io
from decimal import Decimal

from licenses.application.dto.license_dto import LicenseDTO
from licenses.application.dto.report_dto import (
    LICENSE_EXPORT_HEADERS,
    LicenseExportDTO,
    RevenueReportDTO,
)
from payments.ports.payment_repository import RevenuePeriod


def _period(period, amount):
    return RevenuePeriod(
        period=period,
        amount=Decimal(amount),
        count=1,
        initial_payments=Decimal("0"),
        subscription_payments=Decimal(amount),
    )


class TestRevenueReportDTO:
    """Tests for RevenueReportDTO."""

    def test_trend_against_previous_month(self):
        """Test the trend compares the last two months."""
        report = RevenueReportDTO(
            [_period("2025-01", "80"), _period("2025-02", "100"), _period("2025-03", "75")]
        )
        assert report.trend == Decimal("-25.00")
        assert report.to_dict()["summary"]["trend"] == "-25.00"

    def test_no_trend(self):
        """Test the trend is undefined for one month or a zero previous month."""
        assert RevenueReportDTO([_period("2025-01", "80")]).trend is None
        assert RevenueReportDTO([_period("2025-01", "0"), _period("2025-02", "80")]).trend is None
        assert RevenueReportDTO([]).to_dict()["summary"] == {
            "totalRevenue": "0.00",
            "totalCount": 0,
            "periodCount": 0,
            "trend": None,
        }


class TestLicenseExportDTO:
    """Tests for the CSV rendering."""

    def test_fields_are_quoted(self, build_license):
        """Test commas and quotes in customer data survive the CSV round."""
        license = build_license()
        dto = LicenseDTO.from_entity(license)
        dto.customer_name = 'Cafe "Corner", Ltd'

        rows = list(csv.reader(io.StringIO(LicenseExportDTO([dto]).to_csv())))

        assert rows[0] == LICENSE_EXPORT_HEADERS
        assert rows[1][1] == license.key
        assert rows[1][2] == 'Cafe "Corner", Ltd'
        assert rows[1][5] == "no"
