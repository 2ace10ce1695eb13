"""
GetLicenseStatusQuery.

Query to evaluate a license by key.
"""
from dataclasses import dataclass


@dataclass
class GetLicenseStatusQuery:
    """Query to get the effective status of a license key."""

    license_key: str
