"""
Create a user (e.g. an extra admin). Run from project root:
  python -m newsboard.scripts.create_user USERNAME PASSWORD [role]
Example:
  python -m newsboard.scripts.create_user moderator your-secure-password admin
"""
import argparse
import logging
import sys

from pydantic import ValidationError

from newsboard.core.database import session_scope
from newsboard.core.errors import StorageError, UsernameTakenError
from newsboard.core.security import hash_password
from newsboard.models import Role
from newsboard.schemas.auth import RegisterRequest
from newsboard.services import storage

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a NewsBoard user from the command line.")
    parser.add_argument("username", help="Username (3-255 chars)")
    parser.add_argument("password", help="Password (8-128 chars)")
    parser.add_argument(
        "role",
        nargs="?",
        default=Role.USER.value,
        choices=[role.value for role in Role],
    )
    args = parser.parse_args(argv)

    try:
        body = RegisterRequest(username=args.username, password=args.password)
    except ValidationError as e:
        print(e.errors()[0]["msg"].removeprefix("Value error, "), file=sys.stderr)
        return 1

    with session_scope() as db:
        try:
            storage.create_user(
                db,
                body.username,
                hash_password(body.password),
                role=Role(args.role),
            )
        except UsernameTakenError:
            print(f"User '{body.username}' already exists.", file=sys.stderr)
            return 1
        except StorageError as e:
            logger.exception("Could not create user: %s", e)
            return 1
    print(f"Created user '{body.username}' with role '{args.role}'.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
