"""
auth/tokens.py -- Session tokens and password hashing.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with the server secret and
       carry the subject id, display name, role, issue time, and an expiry
       exactly token_expire_seconds after issue (24h by default). Nothing is
       stored server-side. TokenCodec.verify raises InvalidToken on any
       signature/format problem and ExpiredToken when a correctly signed token
       is past its expiry -- both are 401s for the route layer.

       jose checks the signature before the claims, so a token that is both
       tampered and expired reports InvalidToken.

  Passwords: bcrypt used directly (no passlib wrapper). Cost factor comes from
       Settings.bcrypt_rounds and is never below 10. bcrypt.checkpw compares
       in constant time.

The codec is constructed with its secret rather than reading configuration
itself, so tests can sign with a fixed key and a fake clock.

Layer rule: no imports from api/ or inventory/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt
from jose.utils import base64url_decode, base64url_encode

from auth.models import Principal, Role
from core.errors import ExpiredToken, InvalidToken

logger = logging.getLogger("stockroom.auth")

_ALGORITHM = "HS256"
_MIN_BCRYPT_ROUNDS = 10

# bcrypt only reads the first 72 bytes of a password; bcrypt 5 refuses longer input.
MAX_PASSWORD_BYTES = 72

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------


def hash_password(plain: str, rounds: int = 12) -> str:
    """Return a salted bcrypt hash of the given plaintext password.

    Raises ValueError for a cost factor below the floor or a password longer
    than MAX_PASSWORD_BYTES once UTF-8 encoded. Authenticator.register checks
    the length first and reports it as a ValidationError.
    """
    if rounds < _MIN_BCRYPT_ROUNDS:
        raise ValueError(f"bcrypt cost factor must be at least {_MIN_BCRYPT_ROUNDS}")
    encoded = plain.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
    return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash."""
    encoded = plain.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        # Could never have been hashed, so it cannot match.
        return False
    try:
        return bcrypt.checkpw(encoded, hashed.encode("utf-8"))
    except ValueError:
        # Malformed stored hash -- treat as a mismatch, never as a match.
        logger.warning("Stored password hash could not be parsed")
        return False


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenCodec:
    """Issues and verifies signed, time-limited session tokens.

    Usage:
        codec = TokenCodec(settings.secret_key, settings.token_expire_seconds)
        token = codec.issue(user.id, user.name, user.role)
        principal = codec.verify(token)
    """

    def __init__(
        self,
        secret_key: str,
        expire_seconds: int = 86400,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if not secret_key:
            raise ValueError("secret_key must not be empty")
        self._secret_key = secret_key
        self._ttl = timedelta(seconds=expire_seconds)
        self._clock = clock

    @property
    def expire_seconds(self) -> int:
        return int(self._ttl.total_seconds())

    def issue(self, subject_id: int, name: str, role: Role) -> str:
        """Encode a signed JWT for the subject. Expiry is issue time plus the TTL."""
        issued_at = self._clock()
        payload = {
            "sub": str(subject_id),
            "name": name,
            "role": role.value,
            "iat": issued_at,
            "exp": issued_at + self._ttl,
        }
        return jwt.encode(payload, self._secret_key, algorithm=_ALGORITHM)

    def verify(self, token: str) -> Principal:
        """Decode and verify a JWT into a Principal.

        Raises ExpiredToken if the signature is valid but the token is past
        its expiry, InvalidToken for every other failure (bad signature,
        malformed token, missing or unknown claims).

        Expiry is checked against the codec's own clock: a token is valid
        while now < exp.
        """
        if not _has_canonical_signature(token):
            raise InvalidToken()
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[_ALGORITHM],
                options={"verify_exp": False},
            )
        except JWTError as exc:
            raise InvalidToken() from exc

        exp = payload.get("exp")
        if isinstance(exp, bool) or not isinstance(exp, (int, float)):
            raise InvalidToken()
        if self._clock().timestamp() >= exp:
            raise ExpiredToken()

        try:
            return Principal(
                id=int(payload["sub"]),
                name=str(payload.get("name", "")),
                role=Role(payload["role"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidToken() from exc


def _has_canonical_signature(token: str) -> bool:
    """True if the signature segment is the canonical base64url form of its bytes.

    jose decodes base64 leniently, so a final character that differs only in
    its unused padding bits would still decode to the valid signature.
    """
    signature = token.rsplit(".", 1)[-1]
    try:
        encoded = signature.encode("ascii")
        return base64url_encode(base64url_decode(encoded)) == encoded
    except ValueError:
        return False
