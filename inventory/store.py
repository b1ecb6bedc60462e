"""
inventory/store.py -- SQLAlchemy Core persistence layer for inventory records.

Uses SQLAlchemy Core (not ORM) so the dataclasses in inventory/models.py remain
the authoritative domain representation. Swapping SQLite for PostgreSQL is a
connection string change.

Pattern: Repository + Data Mapper. ItemStore is the repository; _row_to_item is
the mapper. Services never touch SQL directly.

Security: all queries use bound parameters. Sort columns come from a fixed
SortField -> Column mapping, never from request text.

Schema constraints: quantity and price carry CHECK (>= 0). The service layer
validates first; the constraints are the backstop and surface as
ValidationError via core.db.guarded.

Usage:
    store = ItemStore("sqlite:///:memory:")
    item_id = store.create_item(item)
    rows, total = store.find(spec)
    store.close()
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, Float, Integer, MetaData, String, Table, and_, func, select

from core.db import MAX_INTEGER, guarded, make_engine
from inventory.models import InventoryItem
from inventory.query import QuerySpec, RangeField, SortDirection, SortField, TextField

_DEFAULT_DB_URL = "sqlite:///stockroom_inventory.db"

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_items = Table(
    "items",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False, index=True),
    Column("category", String(255), nullable=False),
    Column("quantity", Integer, nullable=False, index=True),
    Column("price", Float, nullable=False, index=True),
    Column("created_by", Integer, nullable=False),
    Column("created_at", String(32), nullable=False, index=True),
    Column("updated_at", String(32), nullable=False),
    CheckConstraint("quantity >= 0", name="ck_items_quantity_non_negative"),
    CheckConstraint("price >= 0", name="ck_items_price_non_negative"),
)

_SORT_COLUMNS = {
    SortField.name: _items.c.name,
    SortField.price: _items.c.price,
    SortField.quantity: _items.c.quantity,
    SortField.created_at: _items.c.created_at,
}

_TEXT_COLUMNS = {
    TextField.name: _items.c.name,
    TextField.category: _items.c.category,
}

_RANGE_COLUMNS = {
    RangeField.price: _items.c.price,
    RangeField.quantity: _items.c.quantity,
}

# Columns callers may change through update_item().
_MUTABLE_FIELDS = frozenset({"name", "category", "quantity", "price"})


def _storable_id(item_id: int) -> bool:
    # Ids outside the INTEGER range cannot exist and would not bind.
    return 0 < item_id <= MAX_INTEGER


def _now_iso() -> str:
    # Fixed microsecond precision keeps ISO strings lexically sortable.
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def _contains_folded(column, pattern: str, dialect: str):
    """Case-insensitive literal substring match of pattern against column."""
    # autoescape makes % and _ in the pattern literal characters.
    if dialect == "sqlite":
        # casefold() is registered on every SQLite connection by core.db.
        return func.casefold(column, type_=String).contains(pattern.casefold(), autoescape=True)
    return column.icontains(pattern, autoescape=True)


def _conditions(spec: QuerySpec, dialect: str) -> list:
    """AND-able predicates for every filter present in spec."""
    conditions = []
    for text_field, pattern in spec.text_filters.items():
        conditions.append(_contains_folded(_TEXT_COLUMNS[text_field], pattern, dialect))
    for range_field, bounds in spec.range_filters.items():
        column = _RANGE_COLUMNS[range_field]
        if bounds.min is not None:
            conditions.append(column >= bounds.min)
        if bounds.max is not None:
            conditions.append(column <= bounds.max)
    return conditions


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class ItemStore:
    def __init__(self, db_url: str = _DEFAULT_DB_URL) -> None:
        self.engine = make_engine(db_url)
        metadata.create_all(self.engine)

    def create_item(self, item: InventoryItem) -> int:
        """Insert a new record and return its assigned database ID."""
        now = _now_iso()
        with guarded(self.engine) as conn:
            result = conn.execute(
                _items.insert().values(
                    name=item.name,
                    category=item.category,
                    quantity=item.quantity,
                    price=item.price,
                    created_by=item.created_by,
                    created_at=now,
                    updated_at=now,
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_item(self, item_id: int) -> InventoryItem | None:
        """Fetch a single record by ID. Returns None if not found."""
        if not _storable_id(item_id):
            return None
        with guarded(self.engine) as conn:
            row = conn.execute(_items.select().where(_items.c.id == item_id)).fetchone()
        return _row_to_item(row) if row is not None else None

    def update_item(self, item_id: int, **fields) -> bool:
        """Update mutable fields on an existing record and stamp updated_at.

        Accepts any subset of: name, category, quantity, price. Unknown keys
        raise ValueError.

        Returns True if a row was updated, False if item_id was not found.
        """
        unknown = set(fields) - _MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown item fields: {sorted(unknown)!r}")
        if not _storable_id(item_id):
            return False
        with guarded(self.engine) as conn:
            result = conn.execute(
                _items.update().where(_items.c.id == item_id).values(**fields, updated_at=_now_iso())
            )
            conn.commit()
        return result.rowcount > 0

    def delete_item(self, item_id: int) -> bool:
        """Permanently delete a record. Returns True if deleted, False if not found."""
        if not _storable_id(item_id):
            return False
        with guarded(self.engine) as conn:
            result = conn.execute(_items.delete().where(_items.c.id == item_id))
            conn.commit()
        return result.rowcount > 0

    def find(self, spec: QuerySpec) -> tuple[list[InventoryItem], int]:
        """Return (page of records, total matching records) for spec.

        The total ignores pagination. Ordering is spec's sort column, then id
        in the same direction, so pages are stable across ties.
        """
        conditions = _conditions(spec, self.engine.dialect.name)
        where = and_(*conditions) if conditions else None
        sort_column = _SORT_COLUMNS[spec.sort_field]
        if spec.sort_direction is SortDirection.asc:
            order_by = (sort_column.asc(), _items.c.id.asc())
        else:
            order_by = (sort_column.desc(), _items.c.id.desc())

        page_query = _items.select().order_by(*order_by).offset(spec.offset).limit(spec.page_size)
        count_query = select(func.count()).select_from(_items)
        if where is not None:
            page_query = page_query.where(where)
            count_query = count_query.where(where)

        with guarded(self.engine) as conn:
            rows = conn.execute(page_query).fetchall()
            total = conn.execute(count_query).scalar() or 0
        return [_row_to_item(r) for r in rows], total

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_item(row) -> InventoryItem:
    return InventoryItem(
        id=row.id,
        name=row.name,
        category=row.category,
        quantity=row.quantity,
        price=row.price,
        created_by=row.created_by,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
