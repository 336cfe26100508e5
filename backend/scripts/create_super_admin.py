"""
Bootstrap the first super admin: no K/L organization, every module permission.

    cd backend && alembic upgrade head
    python -m scripts.create_super_admin
"""

import asyncio
import getpass
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import func, or_, select
from sqlalchemy.exc import OperationalError, ProgrammingError
from sismonev.auth.permissions import default_permissions
from sismonev.core.database import AsyncSessionLocal
from sismonev.core.models import User, UserRole
from sismonev.core.security import get_password_hash

MIN_PASSWORD_LENGTH = 6


def _prompt() -> tuple[str, str, str, str] | None:
    """Ask for the account fields; print the problem and return None if one is unusable."""
    username = input("Super admin username: ").strip()
    email = input("Email: ").strip().lower()
    full_name = input("Full name: ").strip() or username
    password = getpass.getpass("Password: ")
    if not username:
        print("Username is required.")
    elif "@" not in email:
        print("A valid email is required.")
    elif len(password) < MIN_PASSWORD_LENGTH:
        print(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
    else:
        return username, email, full_name, password
    return None


def _tables_missing(exc: Exception) -> bool:
    message = str(getattr(exc, "orig", exc)).lower()
    return any(marker in message for marker in ("does not exist", "no such table", "relation"))


async def main() -> int:
    fields = _prompt()
    if fields is None:
        return 1
    username, email, full_name, password = fields

    async with AsyncSessionLocal() as db:
        try:
            clash = (
                await db.execute(
                    select(User).where(or_(User.username == username, func.lower(User.email) == email))
                )
            ).scalars().first()
        except (ProgrammingError, OperationalError) as exc:
            if not _tables_missing(exc):
                raise
            print("The users table is missing; apply migrations with `alembic upgrade head`.")
            return 1
        if clash:
            print(f"'{clash.username}' <{clash.email}> is already registered; nothing created.")
            return 1

        db.add(
            User(
                username=username,
                email=email,
                full_name=full_name,
                hashed_password=get_password_hash(password),
                role=UserRole.SUPER_ADMIN,
                organization_id=None,
                organization_name=None,
                permissions=default_permissions(UserRole.SUPER_ADMIN),
                is_active=True,
            )
        )
        await db.commit()
    print(f"Super admin '{username}' created; log in through POST /api/auth/login.")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
