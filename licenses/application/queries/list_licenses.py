"""
License and subscription listing queries.
"""
import uuid
from dataclasses import dataclass
from typing import Optional


@dataclass
class ListLicensesQuery:
    """Query for a page of licenses."""

    page: Optional[int] = None
    page_size: Optional[int] = None
    sort_by: Optional[str] = None
    sort_order: Optional[str] = None
    status: Optional[str] = None
    search: Optional[str] = None
    is_free_trial: Optional[bool] = None


@dataclass
class GetLicenseDetailQuery:
    """Query for one license with its subscriptions."""

    license_id: uuid.UUID


@dataclass
class ListSubscriptionsQuery:
    """Query for a page of subscriptions."""

    page: Optional[int] = None
    page_size: Optional[int] = None
    sort_by: Optional[str] = None
    sort_order: Optional[str] = None
    license_id: Optional[uuid.UUID] = None
    status: Optional[str] = None
    expiring_soon: bool = False
    expired: bool = False


@dataclass
class GetSubscriptionQuery:
    """Query for one subscription."""

    subscription_id: uuid.UUID
