"""Filter, sort and paginate products held in memory.

Pure functions shared by the in-memory store. None of them mutate the
collection they are given.
"""

import unicodedata
from collections.abc import Iterable, Sequence
from decimal import Decimal
from typing import Any

from storefront.domain.entities import (
    Product,
    ProductFilters,
    SortField,
    SortOrder,
)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100


# ============================================================================
# Normalization
# ============================================================================


def normalize_page(page: int | None) -> int:
    """Clamp a page number to at least 1 (default 1)."""
    if page is None:
        return DEFAULT_PAGE
    return max(1, int(page))


def normalize_limit(limit: int | None) -> int:
    """Clamp a page size into [1, MAX_LIMIT] (default 20)."""
    if limit is None:
        return DEFAULT_LIMIT
    return min(MAX_LIMIT, max(1, int(limit)))


def resolve_sort(sort: SortField | str | None) -> SortField:
    """Map a requested sort key to a known field.

    Unknown or missing keys fall back to ``createdAt``.
    """
    try:
        return SortField(sort)
    except ValueError:
        return SortField.CREATED_AT


def resolve_order(order: SortOrder | str | None) -> SortOrder:
    """Map a requested order to a direction. Anything but ``asc`` is ``desc``."""
    raw = getattr(order, "value", order)
    if isinstance(raw, str) and raw.lower() == SortOrder.ASC.value:
        return SortOrder.ASC
    return SortOrder.DESC


def collation_key(value: str) -> str:
    """Locale-insensitive comparison key: accents stripped, case folded."""
    decomposed = unicodedata.normalize("NFKD", value)
    stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
    return stripped.casefold()


def _as_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


# ============================================================================
# Predicates
# ============================================================================


def matches(product: Product, filters: ProductFilters) -> bool:
    """Check a product against every predicate set on ``filters``."""
    if filters.category:
        if filters.category not in (product.category.slug, product.category.id):
            return False

    if filters.search:
        term = filters.search.lower()
        if term not in product.name.lower() and term not in product.description.lower():
            return False

    if filters.min_price is not None:
        if product.price < _as_decimal(filters.min_price):
            return False

    if filters.max_price is not None:
        if product.price > _as_decimal(filters.max_price):
            return False

    return True


def filter_products(
    products: Iterable[Product], filters: ProductFilters
) -> list[Product]:
    """Return a new list of the products matching ``filters``."""
    return [p for p in products if matches(p, filters)]


def count_matching(products: Iterable[Product], filters: ProductFilters) -> int:
    """Count the products matching ``filters``, ignoring page and limit."""
    return sum(1 for p in products if matches(p, filters))


# ============================================================================
# Sorting and Windowing
# ============================================================================


def _sort_key(sort: SortField):
    if sort is SortField.NAME:
        return lambda p: (collation_key(p.name), p.name)
    if sort is SortField.PRICE:
        return lambda p: p.price
    return lambda p: p.created_at


def sort_products(
    products: Iterable[Product],
    sort: SortField | str | None = None,
    order: SortOrder | str | None = None,
) -> list[Product]:
    """Stable sort. Equal keys keep their source order in both directions."""
    field = resolve_sort(sort)
    direction = resolve_order(order)
    return sorted(
        products,
        key=_sort_key(field),
        reverse=direction is SortOrder.DESC,
    )


def paginate(items: Sequence[Product], page: int | None, limit: int | None) -> list[Product]:
    """Slice one page out of ``items``. Pages past the end are empty."""
    page = normalize_page(page)
    limit = normalize_limit(limit)
    start = (page - 1) * limit
    return list(items[start:start + limit])


def query_products(
    products: Iterable[Product], filters: ProductFilters
) -> list[Product]:
    """Filter, sort and window ``products`` according to ``filters``."""
    filtered = filter_products(products, filters)
    ordered = sort_products(filtered, filters.sort, filters.order)
    return paginate(ordered, filters.page, filters.limit)
