"""
inventory/query.py -- Translate raw list-request parameters into a QuerySpec.

Every incoming value is an untrusted string. Each one is parsed explicitly;
values that fail to parse degrade to "not specified" rather than raising, so a
noisy client can never make the listing endpoint error out. This is the only
place in Stockroom where bad input is ignored instead of rejected.

Accepted parameters:
  search            case-insensitive substring on name
  category          case-insensitive substring on category
  minPrice/maxPrice non-negative number range on price
  minQty/maxQty     non-negative number range on quantity
  sort              one of name, price, quantity, createdAt (else createdAt)
  order             "asc" for ascending, anything else descending
  page              positive integer, default 1
  limit             positive integer, default page size, capped at max

build() never touches the store.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum

# Upper bound on page numbers keeps the computed OFFSET inside the range a
# 64-bit database integer can bind.
_MAX_PAGE = 1_000_000


class SortField(str, Enum):
    name = "name"
    price = "price"
    quantity = "quantity"
    created_at = "createdAt"


class SortDirection(str, Enum):
    asc = "asc"
    desc = "desc"


class TextField(str, Enum):
    name = "name"
    category = "category"


class RangeField(str, Enum):
    price = "price"
    quantity = "quantity"


@dataclass(frozen=True)
class RangeFilter:
    min: float | None = None
    max: float | None = None


@dataclass(frozen=True)
class QuerySpec:
    """Validated, bounded description of one listing request."""

    text_filters: dict[TextField, str] = field(default_factory=dict)
    range_filters: dict[RangeField, RangeFilter] = field(default_factory=dict)
    sort_field: SortField = SortField.created_at
    sort_direction: SortDirection = SortDirection.desc
    page_number: int = 1
    page_size: int = 10

    @property
    def offset(self) -> int:
        return (self.page_number - 1) * self.page_size


# ---------------------------------------------------------------------------
# Parsers -- each returns None for anything it cannot accept
# ---------------------------------------------------------------------------


def _text(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def _non_negative_number(value: object) -> float | None:
    text = _text(value)
    if text is None:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    if not math.isfinite(number) or number < 0:
        return None
    return number


def _integer(value: object) -> int | None:
    text = _text(value)
    if text is None:
        return None
    try:
        return int(text)
    except ValueError:
        return None


def _range(raw: Mapping[str, str], low_key: str, high_key: str) -> RangeFilter | None:
    low = _non_negative_number(raw.get(low_key))
    high = _non_negative_number(raw.get(high_key))
    if low is None and high is None:
        return None
    return RangeFilter(min=low, max=high)


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------


class QueryBuilder:
    """Builds QuerySpecs with a configured default and maximum page size.

    Usage:
        builder = QueryBuilder(default_limit=10, max_limit=100)
        spec = builder.build({"search": "widget", "sort": "price", "order": "asc"})
    """

    def __init__(self, default_limit: int = 10, max_limit: int = 100) -> None:
        if default_limit < 1 or max_limit < default_limit:
            raise ValueError("require 1 <= default_limit <= max_limit")
        self.default_limit = default_limit
        self.max_limit = max_limit

    def build(self, raw: Mapping[str, str]) -> QuerySpec:
        text_filters: dict[TextField, str] = {}
        search = _text(raw.get("search"))
        if search is not None:
            text_filters[TextField.name] = search
        category = _text(raw.get("category"))
        if category is not None:
            text_filters[TextField.category] = category

        range_filters: dict[RangeField, RangeFilter] = {}
        price = _range(raw, "minPrice", "maxPrice")
        if price is not None:
            range_filters[RangeField.price] = price
        quantity = _range(raw, "minQty", "maxQty")
        if quantity is not None:
            range_filters[RangeField.quantity] = quantity

        sort_field = SortField.created_at
        sort = _text(raw.get("sort"))
        # Match against the enum's values only; never let the raw string
        # through as a column name.
        for candidate in SortField:
            if candidate.value == sort:
                sort_field = candidate
                break

        direction = SortDirection.asc if _text(raw.get("order")) == "asc" else SortDirection.desc

        page = _integer(raw.get("page"))
        page = min(max(page if page is not None else 1, 1), _MAX_PAGE)

        limit = _integer(raw.get("limit"))
        if limit is None or limit < 1:
            limit = self.default_limit
        limit = min(limit, self.max_limit)

        return QuerySpec(
            text_filters=text_filters,
            range_filters=range_filters,
            sort_field=sort_field,
            sort_direction=direction,
            page_number=page,
            page_size=limit,
        )
