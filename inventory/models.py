"""
inventory/models.py -- Domain dataclasses for inventory records.

Pure data containers. Validation of numeric ranges lives in
inventory/service.py (and, as a backstop, in the CHECK constraints of
inventory/store.py).
"""

from __future__ import annotations

from dataclasses import dataclass, field

from auth.models import Creator


@dataclass
class InventoryItem:
    """A tracked stock line.

    created_by references a credential record id. creator is filled in by
    InventoryService when listing; it stays None when the referenced account
    no longer exists.

    id is None before the record is written to the database.
    """

    name: str
    category: str
    quantity: int
    price: float
    created_by: int
    id: int | None = None
    created_at: str = ""  # ISO 8601, set by store on insert
    updated_at: str = ""  # ISO 8601, set by store on insert/update
    creator: Creator | None = None


@dataclass(frozen=True)
class ItemPage:
    """One page of a filtered, sorted listing."""

    items: list[InventoryItem] = field(default_factory=list)
    total_items: int = 0
    current_page: int = 1
    total_pages: int = 0
