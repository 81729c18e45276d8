"""
Create a user directly in the database (e.g. the first admin, since creating
admins over HTTP already requires one). Run from project root:
  python -m usergate.scripts.create_user EMAIL PASSWORD [role]
Example:
  python -m usergate.scripts.create_user admin@example.com your-secure-password admin
"""
import argparse
import logging
import sys

from dotenv import load_dotenv

from usergate.core.config import get_settings
from usergate.core.database import create_session_factory
from usergate.core.errors import DuplicateEmail, StorageError, ValidationError
from usergate.core.security import PasswordHasher
from usergate.models.user import Role
from usergate.services.auth import AuthService
from usergate.services.user_store import UserStore

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a usergate user without going through the API.")
    parser.add_argument("email", help="Email address (unique)")
    parser.add_argument("password", help="Password (1-128 chars)")
    parser.add_argument("role", nargs="?", default=Role.USER.value, choices=[r.value for r in Role])
    args = parser.parse_args(argv)

    load_dotenv()
    settings = get_settings()
    db = create_session_factory(settings)()
    auth = AuthService(UserStore(db), PasswordHasher(rounds=settings.BCRYPT_ROUNDS))
    try:
        user = auth.register(args.email, args.password, role=Role(args.role))
    except ValidationError as e:
        print(f"Invalid input: {', '.join(e.fields)}", file=sys.stderr)
        return 1
    except DuplicateEmail:
        print(f"User '{args.email}' already exists.", file=sys.stderr)
        return 1
    except StorageError:
        print("Database error; see log output.", file=sys.stderr)
        return 1
    finally:
        db.close()
    print(f"Created user '{user.email}' (id={user.id}) with role '{user.role.value}'.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
