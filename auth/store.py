"""
auth/store.py -- SQLAlchemy Core persistence layer for credential records.

Pattern: Repository + Data Mapper (same as inventory/store.py).
UserStore is the repository; _row_to_user is the mapper.
Route, service and dependency code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

  email carries a UNIQUE constraint. The Authenticator checks for an existing
  record before inserting; the constraint is the backstop for two concurrent
  registrations racing past that check, and surfaces as DuplicateIdentity.

Layer rule: no imports from api/ or inventory/.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, func, select
from sqlalchemy.exc import IntegrityError

from auth.models import Role, User
from core.db import guarded, make_engine
from core.errors import DuplicateIdentity

_DEFAULT_DB_URL = "sqlite:///stockroom_auth.db"

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
    Column("email", String(255), nullable=False, unique=True),
    Column("hashed_password", Text, nullable=False),
    Column("role", String(10), nullable=False, server_default=Role.staff.value),
    Column("created_at", String(32), nullable=False),
)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for credential records.

    Usage:
        store = UserStore("sqlite:///:memory:")
        uid = store.create_user(User(name="Ada", email="ada@example.com", hashed_password=h, role=Role.admin))
        user = store.get_by_email("ada@example.com")
        store.close()
    """

    def __init__(self, db_url: str = _DEFAULT_DB_URL) -> None:
        self.engine = make_engine(db_url)
        _metadata.create_all(self.engine)

    def has_users(self) -> bool:
        """Return True if at least one credential record exists.

        Drives first-run registration: while this is False, the register
        endpoint is open and creates an admin.
        """
        with guarded(self.engine) as conn:
            result = conn.execute(select(func.count()).select_from(_users)).scalar()
        return (result or 0) > 0

    def create_user(self, user: User) -> int:
        """Insert a new credential record and return its assigned ID.

        Raises DuplicateIdentity if the email is already taken.
        """
        with guarded(self.engine) as conn:
            try:
                result = conn.execute(
                    _users.insert().values(
                        name=user.name,
                        email=user.email,
                        hashed_password=user.hashed_password,
                        role=user.role.value,
                        created_at=_now_iso(),
                    )
                )
                conn.commit()
            except IntegrityError as exc:
                raise DuplicateIdentity() from exc
            return result.inserted_primary_key[0]

    def get_by_email(self, email: str) -> User | None:
        """Look up a user by exact email (case-sensitive). Returns None if not found."""
        with guarded(self.engine) as conn:
            row = conn.execute(_users.select().where(_users.c.email == email)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_id(self, user_id: int) -> User | None:
        """Look up a user by primary key. Returns None if not found."""
        with guarded(self.engine) as conn:
            row = conn.execute(_users.select().where(_users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_many(self, user_ids: set[int]) -> dict[int, User]:
        """Bulk lookup by primary key. Unknown ids are simply absent from the result."""
        if not user_ids:
            return {}
        with guarded(self.engine) as conn:
            rows = conn.execute(_users.select().where(_users.c.id.in_(sorted(user_ids)))).fetchall()
        return {row.id: _row_to_user(row) for row in rows}

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        name=row.name,
        email=row.email,
        hashed_password=row.hashed_password,
        role=Role(row.role),
        created_at=row.created_at,
    )
