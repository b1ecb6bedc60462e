"""
api/routes/v1/auth.py -- Authentication REST endpoints.

Routes:
  POST /api/v1/auth/register  -- create an account (admin only; open during first-run setup)
  POST /api/v1/auth/login     -- email/password login; returns a bearer token
  GET  /api/v1/auth/me        -- current principal (requires auth)

First-run setup: while no accounts exist, /register accepts requests without
a token and always creates an admin, so a fresh install can bootstrap its
first administrator. After that, only admins may register accounts.

Login responses carry Cache-Control: no-store so tokens are never cached by
intermediaries.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.models import AccountResponse, LoginRequest, LoginResponse, PrincipalResponse, RegisterRequest
from auth.authenticator import Authenticator
from auth.dependencies import get_current_principal, require_admin_or_bootstrap
from auth.models import Principal, Role

logger = logging.getLogger("stockroom.api")

# Auth policy:
# - POST /api/v1/auth/register: require_admin_or_bootstrap
# - POST /api/v1/auth/login:    public -- login endpoint must be unauthenticated
# - GET  /api/v1/auth/me:       requires auth (get_current_principal)
router = APIRouter()


@router.post("/auth/register", response_model=AccountResponse)
def register(
    request: Request,
    body: RegisterRequest,
    caller: Optional[Principal] = Depends(require_admin_or_bootstrap),
) -> AccountResponse:
    """Create a new account. Role defaults to staff."""
    authenticator: Authenticator = request.app.state.authenticator
    role = body.role
    if caller is None:
        logger.info("First-run setup: creating initial admin account")
        role = Role.admin
    summary = authenticator.register(body.name, body.email, body.password, role)
    return AccountResponse.from_summary(summary)


@router.post("/auth/login", response_model=LoginResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with email and password; return a bearer token and the principal."""
    authenticator: Authenticator = request.app.state.authenticator
    token, principal = authenticator.login(body.email, body.password)
    resp = JSONResponse(
        status_code=200,
        content=LoginResponse(
            token=token,
            expires_in=request.app.state.token_codec.expire_seconds,
            user=PrincipalResponse.from_principal(principal),
        ).model_dump(mode="json", by_alias=True),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.get("/auth/me", response_model=PrincipalResponse)
def me(principal: Principal = Depends(get_current_principal)) -> PrincipalResponse:
    """Return identity information for the currently authenticated principal."""
    return PrincipalResponse.from_principal(principal)
