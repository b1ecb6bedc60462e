"""
inventory/service.py -- Listing and admin mutations over the inventory store.

list() runs a QuerySpec against the item store and attaches the creator's
display identity to every record. Creator lookup is a bulk fetch against the
user store (the two stores may live in different databases). A record whose
creator no longer exists is still returned, with creator=None.

create/update/delete each call require_role(principal, Role.admin) before
touching the store, even though the HTTP layer already gated the request.

Layer rule: imports core/ and auth/ only.
"""

from __future__ import annotations

import logging
import math

from auth.guard import require_role
from auth.models import Creator, Principal, Role
from auth.store import UserStore
from core.db import MAX_INTEGER
from core.errors import NotFound, ValidationError
from inventory.models import InventoryItem, ItemPage
from inventory.query import QuerySpec
from inventory.store import ItemStore

logger = logging.getLogger("stockroom.inventory")

_EDITABLE_FIELDS = frozenset({"name", "category", "quantity", "price"})


def _validate_fields(fields: dict) -> None:
    for key in ("name", "category"):
        if key in fields and not str(fields[key] or "").strip():
            raise ValidationError(f"{key} must not be empty.")
    for key in ("quantity", "price"):
        if key in fields:
            value = fields[key]
            if value is None or (isinstance(value, float) and not math.isfinite(value)) or value < 0:
                raise ValidationError(f"{key} must be a non-negative number.")
    if "quantity" in fields and fields["quantity"] > MAX_INTEGER:
        raise ValidationError(f"quantity must be at most {MAX_INTEGER}.")


class InventoryService:
    def __init__(self, item_store: ItemStore, user_store: UserStore) -> None:
        self._items = item_store
        self._users = user_store

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list(self, spec: QuerySpec) -> ItemPage:
        """Return one page of records matching spec, with creators attached."""
        items, total = self._items.find(spec)
        self._attach_creators(items)
        return ItemPage(
            items=items,
            total_items=total,
            current_page=spec.page_number,
            total_pages=math.ceil(total / spec.page_size),
        )

    def get(self, item_id: int) -> InventoryItem:
        item = self._items.get_item(item_id)
        if item is None:
            raise NotFound("Item not found.")
        self._attach_creators([item])
        return item

    def _attach_creators(self, items: list[InventoryItem]) -> None:
        users = self._users.get_many({item.created_by for item in items})
        for item in items:
            user = users.get(item.created_by)
            item.creator = Creator(name=user.name, email=user.email) if user is not None else None

    # ------------------------------------------------------------------
    # Mutations (admin only)
    # ------------------------------------------------------------------

    def create(self, principal: Principal, name: str, category: str, quantity: int, price: float) -> InventoryItem:
        require_role(principal, Role.admin)
        fields = {"name": name, "category": category, "quantity": quantity, "price": price}
        _validate_fields(fields)
        item = InventoryItem(
            name=name.strip(),
            category=category.strip(),
            quantity=quantity,
            price=price,
            created_by=principal.id,
        )
        item_id = self._items.create_item(item)
        logger.info("Item id=%d created by user id=%d", item_id, principal.id)
        return self.get(item_id)

    def update(self, principal: Principal, item_id: int, **fields) -> InventoryItem:
        """Apply a partial update. Raises ValidationError when fields is empty."""
        require_role(principal, Role.admin)
        if not fields:
            raise ValidationError("No fields to update.")
        unknown = set(fields) - _EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown fields: {', '.join(sorted(unknown))}.")
        _validate_fields(fields)
        for key in ("name", "category"):
            if key in fields:
                fields[key] = fields[key].strip()
        if not self._items.update_item(item_id, **fields):
            raise NotFound("Item not found.")
        logger.info("Item id=%d updated by user id=%d (%s)", item_id, principal.id, ", ".join(sorted(fields)))
        return self.get(item_id)

    def delete(self, principal: Principal, item_id: int) -> None:
        require_role(principal, Role.admin)
        if not self._items.delete_item(item_id):
            raise NotFound("Item not found.")
        logger.info("Item id=%d deleted by user id=%d", item_id, principal.id)
