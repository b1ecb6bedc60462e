"""Unit tests for auth/authenticator.py and auth/store.py.

Covers:
- register() validates required fields, enforces unique email, defaults role
- register() never returns the password hash
- login() distinguishes unknown email (NotFound) from bad password (InvalidCredentials)
- login() token verifies back to the registered subject and role
"""

import pytest

from auth.authenticator import Authenticator
from auth.models import AccountSummary, Role
from auth.store import UserStore
from auth.tokens import TokenCodec
from core.errors import DuplicateIdentity, InvalidCredentials, NotFound, ValidationError


class TestRegister:
    def test_defaults_to_staff(self, authenticator: Authenticator) -> None:
        summary = authenticator.register("Sam", "sam@example.com", "pw")
        assert summary.role is Role.staff
        assert summary.email == "sam@example.com"
        assert isinstance(summary.id, int)

    def test_explicit_admin_role(self, authenticator: Authenticator) -> None:
        summary = authenticator.register("Ada", "ada@example.com", "pw", Role.admin)
        assert summary.role is Role.admin

    def test_summary_has_no_hash(self, authenticator: Authenticator) -> None:
        summary = authenticator.register("Sam", "sam@example.com", "pw")
        assert isinstance(summary, AccountSummary)
        assert not hasattr(summary, "hashed_password")

    def test_password_stored_hashed(self, authenticator: Authenticator, user_store: UserStore) -> None:
        authenticator.register("Sam", "sam@example.com", "plaintext")
        stored = user_store.get_by_email("sam@example.com")
        assert stored is not None
        assert stored.hashed_password != "plaintext"
        assert stored.hashed_password.startswith("$2")

    @pytest.mark.parametrize(
        "name,email,password",
        [("", "a@example.com", "pw"), ("A", "", "pw"), ("A", "a@example.com", ""), ("   ", "a@example.com", "pw")],
    )
    def test_missing_fields_rejected(self, authenticator: Authenticator, name: str, email: str, password: str) -> None:
        with pytest.raises(ValidationError):
            authenticator.register(name, email, password)

    def test_password_byte_limit(self, authenticator: Authenticator, user_store: UserStore) -> None:
        with pytest.raises(ValidationError):
            authenticator.register("Sam", "sam@example.com", "\u00e9" * 72)
        assert user_store.get_by_email("sam@example.com") is None
        assert authenticator.register("Sam", "sam@example.com", "\u00e9" * 36).email == "sam@example.com"

    def test_duplicate_email_rejected(self, authenticator: Authenticator, user_store: UserStore) -> None:
        authenticator.register("Sam", "sam@example.com", "pw")
        with pytest.raises(DuplicateIdentity):
            authenticator.register("Other Sam", "sam@example.com", "pw2")
        assert user_store.get_by_email("sam@example.com").name == "Sam"

    def test_email_is_case_sensitive(self, authenticator: Authenticator) -> None:
        authenticator.register("Sam", "sam@example.com", "pw")
        summary = authenticator.register("Sam Upper", "SAM@example.com", "pw")
        assert summary.email == "SAM@example.com"


class TestLogin:
    def test_success_returns_verifiable_token(self, authenticator: Authenticator, codec: TokenCodec) -> None:
        registered = authenticator.register("Ada", "ada@example.com", "secret", Role.admin)
        token, principal = authenticator.login("ada@example.com", "secret")
        assert principal.id == registered.id
        assert principal.role is Role.admin
        assert principal.name == "Ada"
        verified = codec.verify(token)
        assert verified.id == registered.id
        assert verified.role is registered.role

    def test_unknown_email(self, authenticator: Authenticator) -> None:
        with pytest.raises(NotFound):
            authenticator.login("nobody@example.com", "pw")

    def test_wrong_password(self, authenticator: Authenticator) -> None:
        authenticator.register("Sam", "sam@example.com", "right")
        with pytest.raises(InvalidCredentials):
            authenticator.login("sam@example.com", "wrong")

    def test_password_whitespace_is_significant(self, authenticator: Authenticator) -> None:
        authenticator.register("Sam", "sam@example.com", "  pass word  ")
        _, principal = authenticator.login("sam@example.com", "  pass word  ")
        assert principal.name == "Sam"
        with pytest.raises(InvalidCredentials):
            authenticator.login("sam@example.com", "pass word")

    def test_email_trimmed_like_register(self, authenticator: Authenticator) -> None:
        authenticator.register("Sam", "  sam@example.com ", "pw")
        _, principal = authenticator.login(" sam@example.com  ", "pw")
        assert principal.name == "Sam"


class TestUserStore:
    def test_has_users(self, authenticator: Authenticator, user_store: UserStore) -> None:
        assert not user_store.has_users()
        authenticator.register("Sam", "sam@example.com", "pw")
        assert user_store.has_users()

    def test_get_many_skips_unknown_ids(self, authenticator: Authenticator, user_store: UserStore) -> None:
        sam = authenticator.register("Sam", "sam@example.com", "pw")
        found = user_store.get_many({sam.id, 9999})
        assert set(found) == {sam.id}
        assert user_store.get_many(set()) == {}
