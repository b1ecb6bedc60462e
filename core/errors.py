"""
core/errors.py -- Error taxonomy shared by every Stockroom layer.

Every component-level failure is raised as exactly one of these kinds. Each
class carries the HTTP status it maps to and a stable machine-readable code,
so api/main.py can render all of them through one exception handler without
a lookup table.

  ValidationError      400  missing/malformed required field
  DuplicateIdentity    409  email already registered
  NotFound             404  unknown email, unknown item id
  AuthError            401  caller has no valid session
    InvalidCredentials        wrong password
    InvalidToken              bad signature, malformed, or stale subject
    ExpiredToken              signature valid but past expiry
  Forbidden            403  authenticated but insufficient role
  StoreFailure         500  persistence collaborator unavailable

The 401/403 split is load-bearing: clients route 401 to a login prompt and
403 to an access-denied message.

Layer rule: core/ is the kernel. No imports from api/, auth/, or inventory/.
"""

from __future__ import annotations


class StockroomError(Exception):
    """Base class for all domain errors."""

    status_code: int = 500
    code: str = "internal_error"
    default_message: str = "An unexpected error occurred."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(StockroomError):
    status_code = 400
    code = "validation_error"
    default_message = "Request validation failed."


class DuplicateIdentity(StockroomError):
    status_code = 409
    code = "duplicate_identity"
    default_message = "A user with that email already exists."


class NotFound(StockroomError):
    status_code = 404
    code = "not_found"
    default_message = "Resource not found."


class AuthError(StockroomError):
    status_code = 401
    code = "unauthorized"
    default_message = "Authentication required."


class InvalidCredentials(AuthError):
    code = "bad_credentials"
    default_message = "Invalid email or password."


class InvalidToken(AuthError):
    code = "invalid_token"
    default_message = "Invalid session token."


class ExpiredToken(AuthError):
    code = "expired_token"
    default_message = "Session token has expired."


class Forbidden(StockroomError):
    status_code = 403
    code = "forbidden"
    default_message = "Admin access required."


class StoreFailure(StockroomError):
    status_code = 500
    code = "store_failure"
    default_message = "The data store is unavailable."
