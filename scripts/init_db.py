"""
Database maintenance script.
Creates tables and indexes, and activates or deactivates accounts.

    python -m scripts.init_db              # create missing tables
    python -m scripts.init_db --reset      # drop and recreate everything
    python -m scripts.init_db --deactivate someone@example.com
"""
import argparse
import logging
import sys

from app.core.config import settings
from app.core.database import SessionLocal, init_db
from app.core.security import get_token_service
from app.services.auth_service import AuthService

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def set_account_status(email: str, is_active: bool) -> bool:
    db = SessionLocal()
    try:
        user = AuthService(db, get_token_service()).set_user_active(email, is_active)
    finally:
        db.close()
    if not user:
        logger.error(f"No account with email {email}")
        return False
    return True


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Healthcare Platform database tools")
    parser.add_argument("--reset", action="store_true",
                        help="drop all tables before recreating them")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--deactivate", metavar="EMAIL", help="deactivate an account")
    group.add_argument("--activate", metavar="EMAIL", help="reactivate an account")
    args = parser.parse_args(argv)

    logger.info(f"Using database {settings.get_database_url.split('@')[-1]}")
    init_db(drop_existing=args.reset)
    logger.info("Tables and indexes are in place")

    if args.deactivate:
        return 0 if set_account_status(args.deactivate, False) else 1
    if args.activate:
        return 0 if set_account_status(args.activate, True) else 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
