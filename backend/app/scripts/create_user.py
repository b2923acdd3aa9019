"""
Create a user, e.g. an extra admin. Run from the backend directory:
  python -m app.scripts.create_user USERNAME PASSWORD [--admin]
"""
import argparse
import sys

from sqlmodel import Session

from app.database import engine, init_db
from app.errors import CatalogError
from app.services import credentials


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a movie catalog user.")
    parser.add_argument("username")
    parser.add_argument("password")
    parser.add_argument("--admin", action="store_true", help="Grant the admin role")
    args = parser.parse_args(argv)

    username = args.username.strip()
    if not username or not args.password:
        print("Username and password required.", file=sys.stderr)
        return 1

    init_db()
    with Session(engine) as session:
        try:
            credentials.register(session, username, args.password, is_admin=args.admin)
        except CatalogError as e:
            print(f"Could not create '{username}': {e.message}", file=sys.stderr)
            return 1
    role = "admin" if args.admin else "user"
    print(f"Created user '{username}' with role '{role}'.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
