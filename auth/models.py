"""
auth/models.py -- Domain types for authentication entities.

Pattern: Data class (pure data container, zero logic). Stores and services do
the work; these types only own shape.

Role is a closed two-member enumeration. Code compares roles by identity
(`role is Role.admin`), never against bare strings, so a new call site that
forgets a role shows up in review rather than silently matching nothing.

Layer rule: no imports from api/ or inventory/.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    admin = "admin"
    staff = "staff"


@dataclass(frozen=True)
class Principal:
    """The authenticated identity attached to a request.

    Rebuilt from the session token on every request and never mutated.
    """

    id: int
    name: str
    role: Role


@dataclass
class User:
    """A credential record as held by the user store.

    email is the unique, case-sensitive identity key used at login.
    hashed_password never leaves the auth package -- callers outside it
    receive an AccountSummary or a Principal instead.
    """

    name: str
    email: str
    hashed_password: str
    role: Role = Role.staff
    id: int | None = None
    created_at: str | None = None


@dataclass(frozen=True)
class AccountSummary:
    """Public fields of a credential record, returned by registration."""

    id: int
    name: str
    email: str
    role: Role

    @classmethod
    def from_user(cls, user: User) -> AccountSummary:
        return cls(id=user.id, name=user.name, email=user.email, role=user.role)


@dataclass(frozen=True)
class Creator:
    """Display-friendly identity of the account that created an inventory record."""

    name: str
    email: str
