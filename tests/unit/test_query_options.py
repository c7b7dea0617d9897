"""Unit tests for listing options and pagination."""

from sqlalchemy import select

from parley.builders.query_options import QueryOptions, apply_ordering, paginate
from parley.kernel.models.post import Post
from parley.schemas.common import PaginatedData


class TestQueryOptions:
    """Paging arithmetic and option checks."""

    def test_default_page_size_from_settings(self):
        assert QueryOptions().page_size == 10

    def test_missing_or_invalid_page_means_first(self):
        assert QueryOptions(page=None).skip == 0
        assert QueryOptions(page=0).skip == 0
        assert QueryOptions(page=-3).skip == 0

    def test_skip_and_take(self):
        options = QueryOptions(page=3, page_size=20)
        assert options.skip == 40
        assert options.take == 20

    def test_blank_search_is_not_defined(self):
        assert not QueryOptions(search="   ").search_is_defined()
        assert QueryOptions(search="hello").search_is_defined()

    def test_blank_order_by_is_not_defined(self):
        assert not QueryOptions(order_by="").order_by_is_defined()
        assert QueryOptions(order_by="title").order_by_is_defined()


class TestOrdering:
    """Sort key resolution."""

    SORTABLE = {"title": Post.title, "timestamp": Post.created_at}

    def _sql(self, options: QueryOptions) -> str:
        stmt = apply_ordering(
            select(Post.id), options, self.SORTABLE, [Post.created_at.desc(), Post.id.desc()]
        )
        return str(stmt.compile()).upper()

    def test_known_key_ascending(self):
        sql = self._sql(QueryOptions(order_by="Title", is_ascending=True))
        assert "ORDER BY POSTS.TITLE ASC" in sql

    def test_known_key_descending(self):
        sql = self._sql(QueryOptions(order_by="timestamp"))
        assert "ORDER BY POSTS.CREATED_AT DESC" in sql

    def test_unknown_key_falls_back_to_default(self):
        sql = self._sql(QueryOptions(order_by="bogus"))
        assert "ORDER BY POSTS.CREATED_AT DESC, POSTS.ID DESC" in sql

    def test_paginate_applies_offset_and_limit(self):
        stmt = paginate(select(Post.id), QueryOptions(page=3, page_size=5))
        assert stmt._limit == 5
        assert stmt._offset == 10


class TestPaginatedData:
    """Page totals."""

    def test_total_pages_rounds_up(self):
        page = PaginatedData[int].create(range(5), total_records=45, page_size=20)
        assert page.total_pages == 3
        assert len(page.items) == 5

    def test_exact_multiple(self):
        assert PaginatedData[int].create((), 40, 20).total_pages == 2

    def test_empty_listing_has_no_pages(self):
        page = PaginatedData[int].create((), 0, 10)
        assert page.total_pages == 0
        assert page.items == ()

    def test_total_pages_is_serialized(self):
        dumped = PaginatedData[int].create((1, 2), 2, 10).model_dump()
        assert dumped["total_pages"] == 1
