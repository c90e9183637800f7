"""
Create an account from the command line (e.g. seed users for a demo). Run from project root:
  python -m app.scripts.create_user ID PASSWORD NICKNAME [--profile-image URL]
Example:
  python -m app.scripts.create_user alice your-secure-password alice
"""
import argparse
import logging
import sys

from pydantic import ValidationError

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.core.security import PasswordHasher, TokenIssuer
from app.repositories.users import SqlAlchemyUserRepository
from app.schemas.auth import SignUpRequest
from app.services.auth import AuthService, ConflictError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a Travelmate account.")
    parser.add_argument("id", help="Login id (1-255 chars)")
    parser.add_argument("password", help="Password (6-128 chars)")
    parser.add_argument("nickname", help="Nickname (1-64 chars, unique)")
    parser.add_argument("--profile-image", default=None, help="Profile image URL")
    args = parser.parse_args(argv)

    try:
        body = SignUpRequest(
            id=args.id.strip(),
            password=args.password,
            nickname=args.nickname.strip(),
            profile_image=args.profile_image,
        )
    except ValidationError as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        return 1

    settings = get_settings()
    db = SessionLocal()
    try:
        service = AuthService(
            repository=SqlAlchemyUserRepository(db),
            token_issuer=TokenIssuer(settings),
            hasher=PasswordHasher(rounds=settings.BCRYPT_ROUNDS),
        )
        try:
            result = service.sign_up(body)
        except ConflictError as e:
            print(e.message, file=sys.stderr)
            return 1
        print(f"Created account '{result.user.id}' ({result.user.nickname}).")
        return 0
    except Exception as e:
        logger.exception("Account creation failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
