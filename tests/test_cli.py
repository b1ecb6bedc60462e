"""Tests for main.py -- the operator CLI."""

from pathlib import Path

import pytest

import main
from auth.models import Role
from auth.store import UserStore


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'auth.db'}"


def test_create_admin(db_url: str, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
    monkeypatch.setenv("BCRYPT_ROUNDS", "10")
    main.get_settings.cache_clear()
    try:
        code = main.main(
            ["create-admin", "--name", "Ada", "--email", "ada@example.com", "--password", "pw", "--db-url", db_url]
        )
    finally:
        main.get_settings.cache_clear()
    assert code == 0
    assert "ada@example.com" in capsys.readouterr().out

    store = UserStore(db_url)
    try:
        user = store.get_by_email("ada@example.com")
        assert user is not None
        assert user.role is Role.admin
    finally:
        store.close()


def test_create_admin_duplicate(db_url: str, capsys: pytest.CaptureFixture) -> None:
    args = ["create-admin", "--name", "Ada", "--email", "ada@example.com", "--password", "pw", "--db-url", db_url]
    assert main.main(args) == 0
    assert main.main(args) == 1
    assert "already exists" in capsys.readouterr().err


def test_command_required() -> None:
    with pytest.raises(SystemExit):
        main.main([])
