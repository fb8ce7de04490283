"""CLI entry point for local administration of users and session tokens.

Default-scope secrets live only as long as the process, so a token issued
by one ``tokenauth issue`` run only verifies in a later run when it was
issued with ``--scope kubeconfig``.
"""

from __future__ import annotations

import argparse
import logging
import sys

from dotenv import load_dotenv

from tokenauth.auth.admin import build_service, update_session_timeout
from tokenauth.auth.service import TokenService
from tokenauth.config import is_dev_mode
from tokenauth.db.engine import SessionLocal, get_engine, init_db
from tokenauth.errors import (
    InvalidDurationError,
    InvalidTokenError,
    SecretGenerationError,
    StoreError,
    TokenIssueError,
)
from tokenauth.models import Scope, TokenData, UserRole
from tokenauth.storage.settings import SqlSettingsStore
from tokenauth.storage.users import SqlUserStore

logger = logging.getLogger(__name__)


def _stores() -> tuple[SqlSettingsStore, SqlUserStore]:
    engine = get_engine()
    if is_dev_mode():
        init_db(engine)
    return SqlSettingsStore(SessionLocal), SqlUserStore(SessionLocal)


def _service(settings_store: SqlSettingsStore, user_store: SqlUserStore) -> TokenService:
    try:
        return build_service(settings_store, user_store)
    except (InvalidDurationError, SecretGenerationError, StoreError) as exc:
        logger.error("Token service unavailable: %s", exc)
        print("Error: authentication system unavailable")
        sys.exit(1)


def cmd_init_db(args: argparse.Namespace) -> None:
    init_db(get_engine())
    print("Database initialized")


def cmd_add_user(args: argparse.Namespace) -> None:
    _, users = _stores()
    try:
        user = users.create(args.username, role=UserRole[args.role.upper()], user_id=args.id)
    except StoreError as exc:
        print(f"Error: {exc}")
        sys.exit(1)
    print(f"Created user {user.username} (id={user.id}, role={user.role.name.lower()})")


def cmd_issue(args: argparse.Namespace) -> None:
    settings_store, users = _stores()
    service = _service(settings_store, users)

    try:
        user = users.read_by_id(args.user_id)
    except StoreError as exc:
        print(f"Error: {exc}")
        sys.exit(1)

    data = TokenData(
        id=user.id,
        username=user.username,
        role=int(user.role),
        force_change_password=args.force_change_password,
    )
    scope = Scope(args.scope)
    try:
        if args.no_expiry:
            token, expires_at = service.issue_scoped_token(data, scope, None)
        elif scope is Scope.DEFAULT:
            token, expires_at = service.issue_token(data)
        else:
            token, expires_at = service.issue_scoped_token(
                data, scope, service.default_expires_at()
            )
    except TokenIssueError as exc:
        logger.error("Token issuance failed: %s", exc)
        print("Error: authentication system unavailable")
        sys.exit(1)

    print(token)
    if expires_at is None:
        print("Expires: never", file=sys.stderr)
    else:
        print(f"Expires: {expires_at.isoformat()}", file=sys.stderr)


def cmd_verify(args: argparse.Namespace) -> None:
    settings_store, users = _stores()
    service = _service(settings_store, users)
    try:
        data = service.verify_token(args.token)
    except InvalidTokenError:
        print("Error: not authenticated")
        sys.exit(1)

    print(f"id={data.id} username={data.username} role={data.role} "
          f"force_change_password={str(data.force_change_password).lower()}")


def cmd_invalidate(args: argparse.Namespace) -> None:
    _, users = _stores()
    try:
        issued_at = users.invalidate_sessions(args.user_id)
    except StoreError as exc:
        print(f"Error: {exc}")
        sys.exit(1)
    print(f"Tokens issued before {issued_at} are no longer valid for user {args.user_id}")


def cmd_set_session_timeout(args: argparse.Namespace) -> None:
    settings_store, users = _stores()
    service = _service(settings_store, users)
    try:
        update_session_timeout(service, settings_store, args.duration)
    except InvalidDurationError as exc:
        print(f"Error: {exc}")
        sys.exit(1)
    print(f"Session timeout set to {args.duration}")


def cmd_extension_mode(args: argparse.Namespace) -> None:
    settings_store, _ = _stores()
    settings = settings_store.read()
    settings.is_extension_client = args.state == "on"
    settings_store.write(settings)
    print(f"Extension client mode {args.state}")


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    load_dotenv()

    parser = argparse.ArgumentParser(
        prog="tokenauth",
        description="Issue and verify signed session tokens",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="Create database tables")

    add_user_parser = subparsers.add_parser("add-user", help="Create a user")
    add_user_parser.add_argument("username")
    add_user_parser.add_argument(
        "--role", choices=["admin", "standard"], default="standard",
        help="User role (default: standard)",
    )
    add_user_parser.add_argument("--id", type=int, help="Explicit user ID")

    issue_parser = subparsers.add_parser("issue", help="Issue a token for a user")
    issue_parser.add_argument("user_id", type=int)
    issue_parser.add_argument(
        "--scope", choices=[s.value for s in Scope], default=Scope.DEFAULT.value,
        help="Token scope (default: default)",
    )
    issue_parser.add_argument(
        "--no-expiry", action="store_true", help="Issue a token without exp claim"
    )
    issue_parser.add_argument(
        "--force-change-password", action="store_true",
        help="Flag the session as requiring a password change",
    )

    verify_parser = subparsers.add_parser("verify", help="Verify a token")
    verify_parser.add_argument("token")

    invalidate_parser = subparsers.add_parser(
        "invalidate", help="Invalidate all existing tokens of a user"
    )
    invalidate_parser.add_argument("user_id", type=int)

    timeout_parser = subparsers.add_parser(
        "set-session-timeout", help="Change the session duration (e.g. 24h, 1h30m)"
    )
    timeout_parser.add_argument("duration")

    extension_parser = subparsers.add_parser(
        "extension-mode", help="Toggle 99-year tokens for extension clients"
    )
    extension_parser.add_argument("state", choices=["on", "off"])

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    commands = {
        "init-db": cmd_init_db,
        "add-user": cmd_add_user,
        "issue": cmd_issue,
        "verify": cmd_verify,
        "invalidate": cmd_invalidate,
        "set-session-timeout": cmd_set_session_timeout,
        "extension-mode": cmd_extension_mode,
    }
    commands[args.command](args)


if __name__ == "__main__":
    main()
