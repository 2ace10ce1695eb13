"""
GenerateLicenseCommand.

Command to issue a new license with its first subscription.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass
class GenerateLicenseCommand:
    """
    Command to generate a license.

    Prices and dates left as None fall back to the configured defaults.
    """

    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    location_name: Optional[str] = None
    location_address: Optional[str] = None
    initial_price: Optional[Decimal] = None
    annual_price: Optional[Decimal] = None
    price_per_user: Optional[Decimal] = None
    is_free_trial: bool = False
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
