"""
Paging, search and sort options shared by every listing.
"""

from dataclasses import dataclass, field
from typing import Mapping, Optional

from sqlalchemy import ColumnElement, Select

from parley.config import get_settings


def _default_page_size() -> int:
    return get_settings().default_page_size


@dataclass(frozen=True)
class QueryOptions:
    """
    Listing options taken from the query string.

    ``page`` is 1-based; anything below 1 (or missing) means the first page.
    """

    search: Optional[str] = None
    page: Optional[int] = None
    page_size: int = field(default_factory=_default_page_size)
    order_by: Optional[str] = None
    is_ascending: bool = False

    @property
    def skip(self) -> int:
        return (max(self.page or 1, 1) - 1) * self.page_size

    @property
    def take(self) -> int:
        return self.page_size

    def search_is_defined(self) -> bool:
        return self.search is not None and bool(self.search.strip())

    def order_by_is_defined(self) -> bool:
        return self.order_by is not None and bool(self.order_by.strip())


def contains_text(column, search: str) -> ColumnElement[bool]:
    """Case-insensitive substring match. LIKE wildcards in ``search`` match literally."""
    return column.icontains(search.strip(), autoescape=True)


def apply_ordering(
    stmt: Select,
    options: QueryOptions,
    sortable: Mapping[str, ColumnElement],
    default,
) -> Select:
    """
    Order a listing query.

    An ``order_by`` naming a key of ``sortable`` wins; otherwise ``default``
    (a column expression or a sequence of them) applies. Unknown keys fall
    back to the default rather than erroring.
    """
    if options.order_by_is_defined():
        column = sortable.get(options.order_by.strip().lower())
        if column is not None:
            return stmt.order_by(column.asc() if options.is_ascending else column.desc())

    if isinstance(default, (list, tuple)):
        return stmt.order_by(*default)
    return stmt.order_by(default)


def paginate(stmt: Select, options: QueryOptions) -> Select:
    return stmt.offset(options.skip).limit(options.take)
