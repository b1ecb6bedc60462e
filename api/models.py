"""
API request and response models for Stockroom REST endpoints.

These Pydantic v2 models define the HTTP transport contract. They are kept
separate from the dataclasses in auth/models.py and inventory/models.py, which
own the internal domain representation. Route handlers map between the two.

Response keys are camelCase on the wire (totalItems, createdAt, ...) while the
Python field names stay snake_case; the alias generator does the translation.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from auth.models import AccountSummary, Principal, Role
from core.db import MAX_INTEGER
from inventory.models import InventoryItem, ItemPage

_WIRE = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Auth -- requests
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /api/v1/auth/register.

    Emptiness, whitespace trimming of name and email, and the password byte
    limit are handled by the Authenticator so the same rules apply to every
    caller, not just HTTP ones. The password is never trimmed.
    """

    name: str = Field(max_length=255)
    email: str = Field(max_length=255)
    password: str = Field(max_length=72)
    role: Optional[Role] = None


class LoginRequest(BaseModel):
    """Request body for POST /api/v1/auth/login."""

    email: str = Field(max_length=255)
    password: str = Field(max_length=72)


# ---------------------------------------------------------------------------
# Auth -- responses
# ---------------------------------------------------------------------------


class PrincipalResponse(BaseModel):
    model_config = _WIRE

    id: int
    name: str
    role: Role

    @classmethod
    def from_principal(cls, principal: Principal) -> "PrincipalResponse":
        return cls(id=principal.id, name=principal.name, role=principal.role)


class LoginResponse(BaseModel):
    model_config = _WIRE

    token: str
    token_type: str = "bearer"
    expires_in: int
    user: PrincipalResponse


class AccountResponse(BaseModel):
    model_config = _WIRE

    id: int
    name: str
    email: str
    role: Role

    @classmethod
    def from_summary(cls, summary: AccountSummary) -> "AccountResponse":
        return cls(id=summary.id, name=summary.name, email=summary.email, role=summary.role)


# ---------------------------------------------------------------------------
# Inventory -- requests
# ---------------------------------------------------------------------------


class ItemCreate(BaseModel):
    """Request body for POST /api/v1/items."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)
    category: str = Field(min_length=1, max_length=255)
    quantity: int = Field(ge=0, le=MAX_INTEGER)
    price: float = Field(ge=0, allow_inf_nan=False)


class ItemUpdate(BaseModel):
    """Request body for PUT /api/v1/items/{id}. Every field is optional."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    category: Optional[str] = Field(default=None, min_length=1, max_length=255)
    quantity: Optional[int] = Field(default=None, ge=0, le=MAX_INTEGER)
    price: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)


# ---------------------------------------------------------------------------
# Inventory -- responses
# ---------------------------------------------------------------------------


class CreatorResponse(BaseModel):
    model_config = _WIRE

    name: str
    email: str


class ItemResponse(BaseModel):
    model_config = _WIRE

    id: int
    name: str
    category: str
    quantity: int
    price: float
    created_by: int
    creator: Optional[CreatorResponse] = None
    created_at: str
    updated_at: str

    @classmethod
    def from_item(cls, item: InventoryItem) -> "ItemResponse":
        """Factory Method -- the mapping lives with the output model, not in route handlers."""
        creator = None
        if item.creator is not None:
            creator = CreatorResponse(name=item.creator.name, email=item.creator.email)
        return cls(
            id=item.id,
            name=item.name,
            category=item.category,
            quantity=item.quantity,
            price=item.price,
            created_by=item.created_by,
            creator=creator,
            created_at=item.created_at,
            updated_at=item.updated_at,
        )


class ItemPageResponse(BaseModel):
    """Response body for GET /api/v1/items."""

    model_config = _WIRE

    items: list[ItemResponse]
    total_items: int
    current_page: int
    total_pages: int

    @classmethod
    def from_page(cls, page: ItemPage) -> "ItemPageResponse":
        return cls(
            items=[ItemResponse.from_item(i) for i in page.items],
            total_items=page.total_items,
            current_page=page.current_page,
            total_pages=page.total_pages,
        )


class ItemMutationResponse(BaseModel):
    model_config = _WIRE

    message: str
    item: ItemResponse


class ItemDeletedResponse(BaseModel):
    model_config = _WIRE

    message: str
    id: int


# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str
