"""
api/routes/v1/items.py -- Inventory REST endpoints.

Routes:
  GET    /items             -- filtered, sorted, paginated listing (any authenticated user)
  GET    /items/{item_id}   -- single record (any authenticated user)
  POST   /items             -- create (admin only)
  PUT    /items/{item_id}   -- partial update (admin only)
  DELETE /items/{item_id}   -- delete (admin only)

Listing parameters are read straight from the query string as raw strings and
handed to the QueryBuilder, which owns all parsing and defaulting. See
inventory/query.py for the accepted keys.
"""

from fastapi import APIRouter, Depends, Request

from api.models import ItemCreate, ItemDeletedResponse, ItemMutationResponse, ItemPageResponse, ItemResponse, ItemUpdate
from auth.dependencies import get_current_principal, require_admin
from auth.models import Principal
from inventory.query import QueryBuilder
from inventory.service import InventoryService

router = APIRouter()


@router.get("/items", response_model=ItemPageResponse)
def list_items(request: Request, principal: Principal = Depends(get_current_principal)) -> ItemPageResponse:
    """Return one page of inventory records matching the query string filters."""
    builder: QueryBuilder = request.app.state.query_builder
    service: InventoryService = request.app.state.inventory
    spec = builder.build(request.query_params)
    return ItemPageResponse.from_page(service.list(spec))


@router.get("/items/{item_id}", response_model=ItemResponse)
def get_item(request: Request, item_id: int, principal: Principal = Depends(get_current_principal)) -> ItemResponse:
    service: InventoryService = request.app.state.inventory
    return ItemResponse.from_item(service.get(item_id))


@router.post("/items", response_model=ItemMutationResponse)
def create_item(
    request: Request,
    body: ItemCreate,
    principal: Principal = Depends(require_admin),
) -> ItemMutationResponse:
    service: InventoryService = request.app.state.inventory
    item = service.create(principal, body.name, body.category, body.quantity, body.price)
    return ItemMutationResponse(message="Item created successfully.", item=ItemResponse.from_item(item))


@router.put("/items/{item_id}", response_model=ItemMutationResponse)
def update_item(
    request: Request,
    item_id: int,
    body: ItemUpdate,
    principal: Principal = Depends(require_admin),
) -> ItemMutationResponse:
    """Update any subset of name, category, quantity, price. An empty body is a 400."""
    service: InventoryService = request.app.state.inventory
    item = service.update(principal, item_id, **body.model_dump(exclude_unset=True))
    return ItemMutationResponse(message="Item updated successfully.", item=ItemResponse.from_item(item))


@router.delete("/items/{item_id}", response_model=ItemDeletedResponse)
def delete_item(
    request: Request,
    item_id: int,
    principal: Principal = Depends(require_admin),
) -> ItemDeletedResponse:
    service: InventoryService = request.app.state.inventory
    service.delete(principal, item_id)
    return ItemDeletedResponse(message="Item deleted successfully.", id=item_id)
