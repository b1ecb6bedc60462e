#!/usr/bin/env python3
"""
Stockroom -- operator command line.

Usage:
  python main.py create-admin --name "Ada Admin" --email ada@example.com
  python main.py create-admin --name "Ada Admin" --email ada@example.com --password s3cret
  python main.py serve
  python main.py serve --host 0.0.0.0 --port 8000 --reload

create-admin seeds an administrator directly in the credential store. It is
the offline alternative to first-run registration through the API. The
password is prompted for when --password is omitted.

Environment variables are read through core.config (SECRET_KEY, DEBUG,
AUTH_DB_URL, BCRYPT_ROUNDS, ...). See .env for local overrides.
"""

import argparse
import getpass
import sys
from typing import Optional

from auth.authenticator import Authenticator
from auth.models import Role
from auth.store import UserStore
from auth.tokens import TokenCodec
from core.config import get_settings
from core.errors import StockroomError


def _create_admin(args: argparse.Namespace) -> int:
    settings = get_settings()
    password = args.password or getpass.getpass("Password: ")
    store = UserStore(args.db_url or settings.auth_db_url)
    try:
        authenticator = Authenticator(
            store,
            TokenCodec(settings.secret_key, settings.token_expire_seconds),
            bcrypt_rounds=settings.bcrypt_rounds,
        )
        summary = authenticator.register(args.name, args.email, password, Role.admin)
    except StockroomError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1
    finally:
        store.close()
    print(f"Created admin {summary.email} (id={summary.id})")
    return 0


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("api.main:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stockroom",
        description="Stockroom inventory tracker -- operator tools.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    admin = sub.add_parser("create-admin", help="Create an administrator account")
    admin.add_argument("--name", required=True, help="Display name")
    admin.add_argument("--email", required=True, help="Login email (unique, case-sensitive)")
    admin.add_argument("--password", help="Password (prompted if omitted)")
    admin.add_argument("--db-url", help="Override AUTH_DB_URL for this command")
    admin.set_defaults(func=_create_admin)

    serve = sub.add_parser("serve", help="Run the HTTP API with uvicorn")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true", help="Reload on code changes (development)")
    serve.set_defaults(func=_serve)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
