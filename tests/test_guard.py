"""Unit tests for auth/guard.py -- the framework-free authorization gates."""

import pytest

from auth.guard import bearer_token, require_authenticated, require_role
from auth.models import Principal, Role
from auth.tokens import TokenCodec
from core.errors import AuthError, Forbidden, InvalidToken


class TestBearerToken:
    @pytest.mark.parametrize(
        "header,expected",
        [
            ("Bearer abc.def.ghi", "abc.def.ghi"),
            ("bearer abc", "abc"),
            ("Bearer ", None),
            ("Basic dXNlcjpwdw==", None),
            ("", None),
            (None, None),
        ],
    )
    def test_extraction(self, header, expected) -> None:
        assert bearer_token(header) == expected


class TestRequireAuthenticated:
    def test_missing_token(self, codec: TokenCodec) -> None:
        with pytest.raises(AuthError):
            require_authenticated(None, codec)

    def test_invalid_token(self, codec: TokenCodec) -> None:
        with pytest.raises(InvalidToken):
            require_authenticated("junk", codec)

    def test_valid_token(self, codec: TokenCodec) -> None:
        principal = require_authenticated(codec.issue(3, "Sam", Role.staff), codec)
        assert principal == Principal(id=3, name="Sam", role=Role.staff)


class TestRequireRole:
    def test_admin_passes(self) -> None:
        require_role(Principal(id=1, name="Ada", role=Role.admin), Role.admin)

    def test_staff_forbidden(self) -> None:
        with pytest.raises(Forbidden) as excinfo:
            require_role(Principal(id=2, name="Sam", role=Role.staff), Role.admin)
        assert excinfo.value.status_code == 403

    def test_forbidden_is_not_an_auth_error(self) -> None:
        assert not issubclass(Forbidden, AuthError)
