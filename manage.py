#!/usr/bin/env python3
"""
Maintenance commands for the configured database.

Usage:
    python manage.py init-db
    python manage.py cleanup-tokens
    python manage.py revoke-user-tokens alice@example.com
    python manage.py grant-role alice@example.com editor

Run cleanup-tokens periodically (cron, systemd timer); the API itself never deletes
refresh tokens.
"""

import argparse
import sys

from app.core.config import get_settings
from app.core.db import SessionLocal, init_db
from app.core.logging_config import configure_logging
from app.models.user import User
from app.services.token_service import TokenService


def _find_user(db, email: str) -> User:
    user = db.query(User).filter(User.email == email.lower()).first()
    if user is None:
        print(f"No user with email {email}", file=sys.stderr)
        raise SystemExit(1)
    return user


def cmd_init_db(args) -> None:
    init_db()
    print("Tables created")


def cmd_cleanup_tokens(args) -> None:
    with SessionLocal() as db:
        count = TokenService(db, get_settings()).cleanup_expired_tokens()
    print(f"Deleted {count} refresh token(s)")


def cmd_revoke_user_tokens(args) -> None:
    with SessionLocal() as db:
        user = _find_user(db, args.email)
        count = TokenService(db, get_settings()).revoke_all_user_tokens(user.id)
    print(f"Revoked {count} refresh token(s) for {args.email}")


def cmd_grant_role(args) -> None:
    with SessionLocal() as db:
        user = _find_user(db, args.email)
        if user.has_role(args.role):
            print(f"{args.email} already has role {args.role}")
            return
        # New list so the JSON column change is detected
        user.roles = [*user.roles, args.role]
        db.commit()
        print(f"{args.email} roles: {', '.join(user.roles)}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="create missing tables").set_defaults(func=cmd_init_db)
    sub.add_parser(
        "cleanup-tokens", help="delete expired refresh tokens and old revoked ones"
    ).set_defaults(func=cmd_cleanup_tokens)

    revoke = sub.add_parser("revoke-user-tokens", help="revoke every refresh token of a user")
    revoke.add_argument("email")
    revoke.set_defaults(func=cmd_revoke_user_tokens)

    grant = sub.add_parser("grant-role", help="add a role tag (e.g. editor) to a user")
    grant.add_argument("email")
    grant.add_argument("role")
    grant.set_defaults(func=cmd_grant_role)

    return parser


def main(argv=None) -> None:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL, settings.LOG_JSON)
    args.func(args)


if __name__ == "__main__":
    main()
