"""Create an admin account.

Usage: python -m skillsync.create_admin --email admin@example.com --name "Admin"
The password is prompted for unless --password is given.
"""
import argparse
import getpass
import sys
from typing import List, Optional

from loguru import logger

from skillsync.core.config import settings
from skillsync.core.database import Database, PersistenceError
from skillsync.core.security import hash_password


def create_admin(db: Database, email: str, full_name: str, password: str) -> dict:
    """Insert an admin user; raises ValueError when the email is taken."""
    if db.get_user_by_email(email):
        raise ValueError("User with this email already exists")
    return db.create_user(
        email=email,
        password_hash=hash_password(password),
        full_name=full_name,
        role="admin",
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Create a SkillSync admin user")
    parser.add_argument("--email", required=True)
    parser.add_argument("--name", required=True, help="Full name")
    parser.add_argument("--password", help="Prompted for when omitted")
    args = parser.parse_args(argv)

    password = args.password or getpass.getpass("Admin Password: ")
    if not password:
        print("Password must not be empty", file=sys.stderr)
        return 1

    db = Database.from_settings(settings)
    db.init_schema()
    try:
        user = create_admin(db, args.email, args.name, password)
    except (ValueError, PersistenceError) as exc:
        logger.error("Error creating admin: {}", exc)
        return 1

    print(f"Admin user created: id={user['id']} email={user['email']} role={user['role']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
