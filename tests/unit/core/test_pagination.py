"""
Unit tests for page requests and pages.
"""
import pytest

from core.domain.exceptions import InvalidInputError
from core.domain.pagination import MAX_PAGE_SIZE, Page, PageRequest, SortOrder

SORT_FIELDS = {"createdAt": "created_at", "endDate": "end_date"}


class TestPageRequest:
    """Tests for PageRequest."""

    def test_defaults(self):
        """Test defaults: first page, 20 items, newest first."""
        request = PageRequest.create(SORT_FIELDS, "createdAt")

        assert request.page == 1
        assert request.page_size == 20
        assert request.sort_order == SortOrder.DESC
        assert request.ordering == "-created_at"
        assert request.offset == 0

    def test_ascending_sort(self):
        """Test sort order and column mapping."""
        request = PageRequest.create(SORT_FIELDS, "createdAt", page=3, page_size=10,
                                     sort_by="endDate", sort_order="ASC")

        assert request.ordering == "end_date"
        assert request.offset == 20

    @pytest.mark.parametrize("page,page_size", [(0, 20), (1, 0), (1, MAX_PAGE_SIZE + 1)])
    def test_out_of_range(self, page, page_size):
        """Test page and page size bounds."""
        with pytest.raises(InvalidInputError):
            PageRequest.create(SORT_FIELDS, "createdAt", page=page, page_size=page_size)

    def test_sort_column_not_allowed(self):
        """Test only allow-listed sort columns are accepted."""
        with pytest.raises(InvalidInputError, match="sortBy must be one of"):
            PageRequest.create(SORT_FIELDS, "createdAt", sort_by="password")

    def test_bad_sort_order(self):
        """Test sort order must be asc or desc."""
        with pytest.raises(InvalidInputError, match="sortOrder"):
            PageRequest.create(SORT_FIELDS, "createdAt", sort_order="sideways")


class TestPage:
    """Tests for Page."""

    def test_pagination_block(self):
        """Test the metadata clients page with."""
        page = Page(items=[1, 2], page=2, page_size=2, total_items=5)

        assert page.pagination() == {
            "page": 2,
            "pageSize": 2,
            "totalItems": 5,
            "totalPages": 3,
            "hasNextPage": True,
            "hasPreviousPage": True,
        }

    def test_empty_page(self):
        """Test an empty listing has no pages."""
        page = Page(items=[], page=1, page_size=20, total_items=0)
        assert page.total_pages == 0
        assert page.has_next_page is False

    def test_map(self):
        """Test mapping keeps the metadata."""
        page = Page(items=[1, 2], page=1, page_size=2, total_items=2).map(str)
        assert page.items == ["1", "2"]
        assert page.total_items == 2
