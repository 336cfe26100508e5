"""
Rewrite stored users to canonical role names and permission maps.

Legacy rows may carry admin_utama / admin_kl roles, or a permission list
such as [{"module": "ran_paud", "actions": ["read"]}]. Run from backend/ with:
  python -m scripts.migrate_permissions [--dry-run]
"""

import asyncio
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import select, text
from sismonev.auth.permissions import is_canonical, normalize_permissions
from sismonev.core.database import AsyncSessionLocal
from sismonev.core.models import User, UserRole

logger = logging.getLogger("scripts.migrate_permissions")

# Stored spellings seen in older databases -> enum name
LEGACY_ROLES = {
    "admin_utama": UserRole.SUPER_ADMIN,
    "ADMIN_UTAMA": UserRole.SUPER_ADMIN,
    "super_admin": UserRole.SUPER_ADMIN,
    "admin_kl": UserRole.ORG_ADMIN,
    "ADMIN_KL": UserRole.ORG_ADMIN,
    "org_admin": UserRole.ORG_ADMIN,
    "admin": UserRole.ADMIN,
}


async def main(dry_run: bool = False) -> None:
    async with AsyncSessionLocal() as db:
        # Raw SQL: the Enum column type refuses to bind unknown values
        renamed = 0
        for legacy, role in LEGACY_ROLES.items():
            result = await db.execute(
                text("UPDATE users SET role = :role WHERE role = :legacy"),
                {"role": role.name, "legacy": legacy},
            )
            if result.rowcount:
                logger.info("%d users with role %s -> %s", result.rowcount, legacy, role.name)
                renamed += result.rowcount

        changed = 0
        users = (await db.execute(select(User).order_by(User.id))).scalars().all()
        for user in users:
            if is_canonical(user.permissions):
                continue
            user.permissions = normalize_permissions(user.permissions, user.role)
            changed += 1
            logger.info("User id=%s (%s) permissions normalized", user.id, user.username)
        if dry_run:
            await db.rollback()
        else:
            await db.commit()
    logger.info(
        "%d roles renamed, %d of %d permission sets normalized%s",
        renamed, changed, len(users), " (dry run, nothing written)" if dry_run else "",
    )


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    asyncio.run(main(dry_run="--dry-run" in sys.argv[1:]))
