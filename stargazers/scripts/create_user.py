"""
Create a user (e.g. first admin) in the configured record store. Run from project root:
  python -m stargazers.scripts.create_user USERNAME EMAIL PASSWORD [role]
Example:
  python -m stargazers.scripts.create_user admin admin@example.com 'S3cure-password' admin
"""
import argparse
import sys

from pydantic import ValidationError as PydanticValidationError

from stargazers.core.config import get_settings
from stargazers.core.errors import StargazersError
from stargazers.schemas.user import UserCreate
from stargazers.services.users import create_user
from stargazers.store import build_stores


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a Stargazers user (e.g. the first admin).")
    parser.add_argument("username", help="Username (2-255 chars)")
    parser.add_argument("email", help="Email address")
    parser.add_argument("password", help="Password (8-128 chars, upper, lower and digit)")
    parser.add_argument("role", nargs="?", default="user", choices=["user", "admin"])
    args = parser.parse_args(argv)

    try:
        body = UserCreate(
            username=args.username.strip(),
            email=args.email.strip(),
            password=args.password,
            role=args.role,
        )
    except PydanticValidationError as e:
        for err in e.errors():
            field = ".".join(str(p) for p in err["loc"])
            print(f"Invalid {field}: {err['msg']}", file=sys.stderr)
        return 1

    settings = get_settings()
    stores = build_stores(settings)
    try:
        user = create_user(stores.users, body, settings)
    except StargazersError as e:
        print(e.message, file=sys.stderr)
        return 1
    print(f"Created user '{user['username']}' <{user['email']}> with role '{user['role']}'.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
