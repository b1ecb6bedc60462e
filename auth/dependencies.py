"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Tokens travel in the `Authorization: Bearer <token>` header only.

get_current_principal() verifies the token and then re-resolves its subject
against the user store. A token whose account has been deleted, or whose
role claim no longer matches the stored role, is rejected as InvalidToken.
This closes the window where a demoted admin keeps admin rights until the
token expires, without keeping any server-side session state.

require_admin() wraps get_current_principal() and adds the role gate, so a
401 always wins over a 403.

require_admin_or_bootstrap() is the registration gate: open while the user
store is empty (first-run setup), admin-only afterwards.

Errors raised here are domain errors from core.errors; api/main.py renders
them.

Layer rule: may import from fastapi (Request) because this module is part of
the FastAPI dependency injection system. No imports from api/ or inventory/.
"""

from __future__ import annotations

import logging

from fastapi import Request

from auth.guard import bearer_token, require_authenticated, require_role
from auth.models import Principal, Role
from auth.store import UserStore
from core.errors import Forbidden, InvalidToken

logger = logging.getLogger("stockroom.auth")


def get_current_principal(request: Request) -> Principal:
    """Require authentication. Raises a 401-class AuthError if unauthenticated.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(principal: Principal = Depends(get_current_principal)): ...
    """
    token = bearer_token(request.headers.get("Authorization"))
    principal = require_authenticated(token, request.app.state.token_codec)

    user_store: UserStore = request.app.state.user_store
    user = user_store.get_by_id(principal.id)
    if user is None or user.role is not principal.role:
        logger.info("Rejected stale token for user id=%d", principal.id)
        raise InvalidToken("Session is no longer valid. Please log in again.")
    return principal


def require_admin(request: Request) -> Principal:
    """Require admin role. 401 if unauthenticated, 403 if authenticated as staff."""
    principal = get_current_principal(request)
    try:
        require_role(principal, Role.admin)
    except Forbidden:
        logger.warning("Forbidden: user id=%d attempted %s %s", principal.id, request.method, request.url.path)
        raise
    return principal


def require_admin_or_bootstrap(request: Request) -> Principal | None:
    """Allow registration without a token only while no accounts exist.

    Returns None during first-run setup, otherwise the admin Principal.
    """
    user_store: UserStore = request.app.state.user_store
    if not user_store.has_users():
        return None
    return require_admin(request)
