"""
Seat counter commands.

Public commands identify the license by key; hardware_id is only
logged. Admin commands identify it by ID.
"""
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class UserCountOperation(Enum):
    """Seat counter operations reachable from the POS."""

    CHECK = "check"
    INCREMENT = "increment"
    DECREMENT = "decrement"
    SYNC = "sync"


@dataclass
class UserCountCommand:
    """Command to read or adjust the seat counter of a license."""

    license_key: str
    operation: UserCountOperation
    hardware_id: Optional[str] = None
    actual_user_count: Optional[int] = None


@dataclass
class IncreaseUserLimitCommand:
    """Admin command to add seats to a license."""

    license_id: uuid.UUID
    additional_users: int
