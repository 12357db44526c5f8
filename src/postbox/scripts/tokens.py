"""Mint an access token for an existing user.

Usage:
    python -m postbox.scripts.tokens <login-or-id> [--minutes N]
"""
from __future__ import annotations

import argparse
import sys
from datetime import timedelta

from postbox.core.security import create_access_token
from postbox.db.session import SessionLocal
from postbox.repositories import UserRepository


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Mint a bearer token for a Postbox user")
    parser.add_argument("user", help="Login name or numeric user id")
    parser.add_argument("--minutes", type=int, default=None, help="Token lifetime in minutes")
    args = parser.parse_args(argv)

    with SessionLocal() as db:
        users = UserRepository(db)
        user_id = users.resolve_by_login_key(args.user)
        if user_id is None and args.user.isdigit() and users.exists_by_id(int(args.user)):
            user_id = int(args.user)

    if user_id is None:
        print(f"No user matches {args.user!r}", file=sys.stderr)
        return 1

    expires = timedelta(minutes=args.minutes) if args.minutes else None
    print(create_access_token(user_id, expires))
    return 0


if __name__ == "__main__":
    sys.exit(main())
