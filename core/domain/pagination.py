"""
Pagination and sorting contracts for admin listings.

Listings accept a page number, a page size and a sort column taken from
a per-entity allow-list. Allow-lists map the public (camelCase) column
name to the model field used for ordering.
"""
import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generic, List, Mapping, Optional, TypeVar

from core.domain.exceptions import InvalidInputError

T = TypeVar("T")
U = TypeVar("U")

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


class SortOrder(Enum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class PageRequest:
    """A validated page + sort request."""

    page: int
    page_size: int
    sort_by: str
    sort_field: str
    sort_order: SortOrder

    @classmethod
    def create(
        cls,
        sort_fields: Mapping[str, str],
        default_sort: str,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
    ) -> "PageRequest":
        """
        Build a page request, enforcing bounds and the sort allow-list.

        Args:
            sort_fields: Allowed public sort names mapped to model fields
            default_sort: Sort name used when none is given
            page: 1-based page number (default 1)
            page_size: Items per page, 1-100 (default 20)
            sort_by: Public sort column name
            sort_order: "asc" or "desc" (default "desc")

        Raises:
            InvalidInputError: If any parameter is out of range
        """
        page = 1 if page is None else page
        page_size = DEFAULT_PAGE_SIZE if page_size is None else page_size
        if page < 1:
            raise InvalidInputError("page must be greater than or equal to 1")
        if page_size < 1 or page_size > MAX_PAGE_SIZE:
            raise InvalidInputError(f"pageSize must be between 1 and {MAX_PAGE_SIZE}")

        sort_by = sort_by or default_sort
        if sort_by not in sort_fields:
            allowed = ", ".join(sort_fields)
            raise InvalidInputError(f"sortBy must be one of: {allowed}")

        try:
            order = SortOrder((sort_order or SortOrder.DESC.value).lower())
        except ValueError:
            raise InvalidInputError("sortOrder must be 'asc' or 'desc'") from None

        return cls(
            page=page,
            page_size=page_size,
            sort_by=sort_by,
            sort_field=sort_fields[sort_by],
            sort_order=order,
        )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def ordering(self) -> str:
        """Django order_by expression for the sort column."""
        prefix = "-" if self.sort_order == SortOrder.DESC else ""
        return f"{prefix}{self.sort_field}"


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of results plus the metadata clients page with."""

    items: List[T]
    page: int
    page_size: int
    total_items: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_items / self.page_size) if self.total_items else 0

    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous_page(self) -> bool:
        return self.page > 1

    def map(self, func: Callable[[T], U]) -> "Page[U]":
        return Page(
            items=[func(item) for item in self.items],
            page=self.page,
            page_size=self.page_size,
            total_items=self.total_items,
        )

    def pagination(self) -> dict:
        """Pagination block of a listing response."""
        return {
            "page": self.page,
            "pageSize": self.page_size,
            "totalItems": self.total_items,
            "totalPages": self.total_pages,
            "hasNextPage": self.has_next_page,
            "hasPreviousPage": self.has_previous_page,
        }
