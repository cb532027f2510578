"""Seed roles and default workflow statuses in Firestore.

Usage:
    python -m scripts.seed_rbac --platform-owner <user_id>
    python -m scripts.seed_rbac <company_id> [admin_user_id]

The first form upserts the platform roles and the company role templates and
makes <user_id> platform owner. The second clones the templates and default
statuses into a company (skipped if it already has any) and optionally makes
<admin_user_id> its Administrator. Requires Firestore credentials.
"""

import asyncio
import sys

from fieldops.core.config import get_settings
from fieldops.infrastructure.firebase.client import (
    close_firebase,
    get_firestore_client,
    init_firebase,
)
from fieldops.infrastructure.services.tenant_seeding import TenantSeedingService

USAGE = (
    "Usage: python -m scripts.seed_rbac --platform-owner <user_id>\n"
    "       python -m scripts.seed_rbac <company_id> [admin_user_id]"
)


async def main() -> None:
    """Seed platform roles or one company, depending on the arguments."""
    args = sys.argv[1:]
    if not args or (args[0] == "--platform-owner" and len(args) != 2):
        print(USAGE, file=sys.stderr)
        sys.exit(1)

    get_settings()
    if not init_firebase():
        print("Firestore not configured", file=sys.stderr)
        sys.exit(1)
    client = get_firestore_client()
    seeding = TenantSeedingService(client)
    try:
        if args[0] == "--platform-owner":
            seeded = await seeding.seed_platform(owner_user_id=args[1])
            print(f"Seeded {len(seeded)} platform roles and templates; owner {args[1]}")
        else:
            company_id = args[0]
            admin_user_id = args[1] if len(args) > 1 else None
            if await seeding.seed_company(company_id, admin_user_id=admin_user_id):
                print(f"Seeded roles and workflow statuses for company {company_id}")
            else:
                print(f"Company {company_id} already has roles or statuses; nothing written")
    finally:
        await close_firebase()


if __name__ == "__main__":
    asyncio.run(main())
