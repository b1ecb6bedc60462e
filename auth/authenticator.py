"""
auth/authenticator.py -- Login and account registration.

register() is the only code path that creates credential records. It is not
itself gated: who may call it (an admin, or anyone during first-run setup) is
decided by the authorization layer in auth/dependencies.py, so the two
concerns stay separable.

login() distinguishes an unknown email (NotFound) from a wrong password
(InvalidCredentials) because clients render the two differently.

Layer rule: no imports from api/ or inventory/.
"""

from __future__ import annotations

import logging

from auth.models import AccountSummary, Principal, Role, User
from auth.store import UserStore
from auth.tokens import MAX_PASSWORD_BYTES, TokenCodec, hash_password, verify_password
from core.errors import DuplicateIdentity, InvalidCredentials, NotFound, ValidationError

logger = logging.getLogger("stockroom.auth")


class Authenticator:
    def __init__(self, user_store: UserStore, codec: TokenCodec, bcrypt_rounds: int = 12) -> None:
        self._users = user_store
        self._codec = codec
        self._bcrypt_rounds = bcrypt_rounds

    def register(self, name: str, email: str, password: str, role: Role | None = None) -> AccountSummary:
        """Create a credential record and return its public fields.

        Raises ValidationError if any field is empty, DuplicateIdentity if the
        email is already registered. Role defaults to staff.

        Name and email are stripped of surrounding whitespace; the password is
        hashed exactly as given.
        """
        name = (name or "").strip()
        email = (email or "").strip()
        missing = [field for field, value in (("name", name), ("email", email), ("password", password)) if not value]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}.")
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes.")

        if self._users.get_by_email(email) is not None:
            logger.info("Registration rejected: email already registered")
            raise DuplicateIdentity()

        user = User(
            name=name,
            email=email,
            hashed_password=hash_password(password, rounds=self._bcrypt_rounds),
            role=role or Role.staff,
        )
        user.id = self._users.create_user(user)
        logger.info("Registered user id=%d role=%s", user.id, user.role.value)
        return AccountSummary.from_user(user)

    def login(self, email: str, password: str) -> tuple[str, Principal]:
        """Verify credentials and mint a session token.

        Returns (token, principal). The principal never carries the hash.
        """
        user = self._users.get_by_email((email or "").strip())
        if user is None:
            logger.info("Login failed: unknown email")
            raise NotFound("User not found.")
        if not verify_password(password, user.hashed_password):
            logger.info("Login failed: bad password for user id=%d", user.id)
            raise InvalidCredentials()

        token = self._codec.issue(user.id, user.name, user.role)
        return token, Principal(id=user.id, name=user.name, role=user.role)
