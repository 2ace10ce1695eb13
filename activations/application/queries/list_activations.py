"""
ListActivationsQuery.

Query for a page of activations, optionally scoped to one license.
"""
import uuid
from dataclasses import dataclass
from typing import Optional


@dataclass
class ListActivationsQuery:
    """Query for a page of activations."""

    page: Optional[int] = None
    page_size: Optional[int] = None
    sort_by: Optional[str] = None
    sort_order: Optional[str] = None
    license_id: Optional[uuid.UUID] = None
    is_active: Optional[bool] = None


@dataclass
class GetActivationQuery:
    """Query for one activation."""

    activation_id: uuid.UUID


@dataclass
class ListLicenseActivationsQuery:
    """Query for every activation of one license, newest first."""

    license_id: uuid.UUID
