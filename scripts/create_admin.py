"""
Create an admin user or reset its password.
"""

from __future__ import annotations

import argparse
import getpass
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from portfolio_api.auth import set_user_password
from portfolio_api.dependencies import get_db_client

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Create or update an admin user")
    parser.add_argument("username", help="Login name")
    parser.add_argument(
        "--password",
        type=str,
        default=None,
        help="Password (prompted when omitted)",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(message)s")

    password = args.password or getpass.getpass(f"Password for {args.username}: ")
    if len(password) < 8:
        logger.error("Password must be at least 8 characters")
        return 1

    user = set_user_password(get_db_client(), args.username, password)
    logger.info("Admin user %s ready (id=%s)", user.username, user.id)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
