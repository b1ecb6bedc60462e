"""
auth/guard.py -- Framework-free authorization checks.

Two composable gates:
  require_authenticated(token, codec) -> Principal, or AuthError (401)
  require_role(principal, role)       -> None, or Forbidden (403)

require_authenticated always runs first, so a caller without a valid session
gets 401 even on an endpoint they would also be forbidden from. Handlers that
mutate state apply require_role on top; read-only listing needs only the
first gate.

auth/dependencies.py adapts these to FastAPI; inventory/service.py calls
require_role again before every mutation.
"""

from __future__ import annotations

from auth.models import Principal, Role
from auth.tokens import TokenCodec
from core.errors import AuthError, Forbidden


def bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an `Authorization: Bearer <token>` header value."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


def require_authenticated(token: str | None, codec: TokenCodec) -> Principal:
    if not token:
        raise AuthError("No token provided.")
    return codec.verify(token)


def require_role(principal: Principal, role: Role) -> None:
    if principal.role is not role:
        raise Forbidden(f"Access denied. {role.value.capitalize()}s only.")
