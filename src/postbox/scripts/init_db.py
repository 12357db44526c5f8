"""Create the Postbox tables and optionally seed a moderator account."""
from __future__ import annotations

import argparse

from postbox.db.session import SessionLocal, create_tables
from postbox.repositories import UserRepository


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--moderator", help="Login name of a moderator account to create")
    args = parser.parse_args(argv)

    create_tables()
    print("Database initialized.")

    if args.moderator:
        with SessionLocal() as db:
            users = UserRepository(db)
            if users.resolve_by_login_key(args.moderator) is None:
                user = users.create(args.moderator, is_moderator=True)
                print(f"Created moderator {user.user_login} (id={user.id})")
            else:
                print(f"User {args.moderator} already exists")


if __name__ == "__main__":
    main()
