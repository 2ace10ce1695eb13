"""
License DTOs for API responses.

to_dict() renders the camelCase JSON shape used by the HTTP API.
"""
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from licenses.domain.license import License
from licenses.domain.subscription import Subscription


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class SubscriptionDTO:
    """DTO for subscription information."""

    id: uuid.UUID
    license_id: uuid.UUID
    start_date: datetime
    end_date: datetime
    annual_fee: Decimal
    status: str
    grace_period_end: Optional[datetime]

    @classmethod
    def from_entity(cls, subscription: Subscription) -> "SubscriptionDTO":
        return cls(
            id=subscription.id,
            license_id=subscription.license_id,
            start_date=subscription.start_date,
            end_date=subscription.end_date,
            annual_fee=subscription.annual_fee,
            status=subscription.status.value,
            grace_period_end=subscription.grace_period_end,
        )

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "licenseId": str(self.license_id),
            "startDate": _iso(self.start_date),
            "endDate": _iso(self.end_date),
            "annualFee": str(self.annual_fee),
            "status": self.status,
            "gracePeriodEnd": _iso(self.grace_period_end),
        }


@dataclass
class LicenseDTO:
    """DTO for license information."""

    id: uuid.UUID
    license_key: str
    status: str
    customer_name: Optional[str]
    customer_phone: Optional[str]
    location_name: Optional[str]
    location_address: Optional[str]
    purchase_date: datetime
    initial_price: Decimal
    annual_price: Decimal
    price_per_user: Decimal
    is_free_trial: bool
    free_trial_end_date: Optional[datetime]
    start_date: datetime
    end_date: datetime
    user_count: int
    user_limit: int
    created_at: datetime
    updated_at: datetime
    subscriptions: List[SubscriptionDTO] = field(default_factory=list)

    @classmethod
    def from_entity(
        cls, license: License, subscriptions: Optional[List[Subscription]] = None
    ) -> "LicenseDTO":
        return cls(
            id=license.id,
            license_key=license.key,
            status=license.status.value,
            customer_name=license.customer_name,
            customer_phone=license.customer_phone,
            location_name=license.location_name,
            location_address=license.location_address,
            purchase_date=license.purchase_date,
            initial_price=license.initial_price,
            annual_price=license.annual_price,
            price_per_user=license.price_per_user,
            is_free_trial=license.is_free_trial,
            free_trial_end_date=license.free_trial_end_date,
            start_date=license.start_date,
            end_date=license.end_date,
            user_count=license.user_count,
            user_limit=license.user_limit,
            created_at=license.created_at,
            updated_at=license.updated_at,
            subscriptions=[SubscriptionDTO.from_entity(s) for s in subscriptions or []],
        )

    def to_dict(self, include_subscriptions: bool = False) -> dict:
        data = {
            "id": str(self.id),
            "licenseKey": self.license_key,
            "status": self.status,
            "customerName": self.customer_name,
            "customerPhone": self.customer_phone,
            "locationName": self.location_name,
            "locationAddress": self.location_address,
            "purchaseDate": _iso(self.purchase_date),
            "initialPrice": str(self.initial_price),
            "annualPrice": str(self.annual_price),
            "pricePerUser": str(self.price_per_user),
            "isFreeTrial": self.is_free_trial,
            "freeTrialEndDate": _iso(self.free_trial_end_date),
            "startDate": _iso(self.start_date),
            "endDate": _iso(self.end_date),
            "userCount": self.user_count,
            "userLimit": self.user_limit,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }
        if include_subscriptions:
            data["subscriptions"] = [s.to_dict() for s in self.subscriptions]
        return data


@dataclass
class ExpirySweepResultDTO:
    """DTO for the expiry sweep job outcome."""

    updated: int
    grace_period: int
    message: str

    def to_dict(self) -> dict:
        return {
            "updated": self.updated,
            "gracePeriod": self.grace_period,
            "message": self.message,
        }
