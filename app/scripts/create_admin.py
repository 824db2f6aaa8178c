"""
Create an admin account (registration only ever creates role "user").
Run from project root:
  python -m app.scripts.create_admin USERNAME EMAIL PASSWORD [--first-name X] [--last-name Y]
"""
import argparse
import sys

from app.database import SessionLocal
from app.errors import DuplicateEmail, DuplicateUsername
from app.models.user import ROLE_ADMIN
from app.schemas.auth import validate_email, validate_password_strength, validate_username
from app.services.auth import get_auth_service


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create an admin account.")
    parser.add_argument("username", help="Username (3-30 chars, letters, digits, underscore)")
    parser.add_argument("email", help="Email address")
    parser.add_argument("password", help="Password (8-128 chars, mixed case, digit, special)")
    parser.add_argument("--first-name", default="Site")
    parser.add_argument("--last-name", default="Admin")
    args = parser.parse_args(argv)

    try:
        username = validate_username(args.username)
        email = validate_email(args.email)
        validate_password_strength(args.password)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        try:
            user = get_auth_service().register(
                db,
                username=username,
                email=email,
                password=args.password,
                first_name=args.first_name,
                last_name=args.last_name,
            )
        except (DuplicateEmail, DuplicateUsername) as e:
            print(e.message, file=sys.stderr)
            return 1
        user.role = ROLE_ADMIN
        db.commit()
        print(f"Created admin '{user.username}' ({user.email}).")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
