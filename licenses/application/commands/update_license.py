"""
UpdateLicenseCommand.

Admin command to edit customer, location, price and date fields.
"""
import uuid
from dataclasses import dataclass, fields
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass
class UpdateLicenseCommand:
    """Command to edit a license; fields left as None are unchanged."""

    license_id: uuid.UUID
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    location_name: Optional[str] = None
    location_address: Optional[str] = None
    initial_price: Optional[Decimal] = None
    annual_price: Optional[Decimal] = None
    price_per_user: Optional[Decimal] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    actor: str = "system"

    def changes(self) -> dict:
        """Edited fields by name."""
        skipped = ("license_id", "actor")
        return {
            field.name: getattr(self, field.name)
            for field in fields(self)
            if field.name not in skipped and getattr(self, field.name) is not None
        }
