#!/usr/bin/env python
"""
Script untuk rotate JWT signing keys di Files-CRUD Auth.

Usage:
    python scripts/rotate_keys.py            # tambah key baru (key aktif)
    python scripts/rotate_keys.py --purge-old  # tambah key baru, hapus semua key lama

Token yang di-sign dengan key yang di-purge tidak lagi valid.
"""

import asyncio
import sys
from pathlib import Path

# Add parent directory to path
sys.path.append(str(Path(__file__).parent.parent))

from filescrud.core.config import settings
from filescrud.db.factory import create_persistence
from filescrud.db.session import database_scope
from filescrud.services.auth import AuthService


async def rotate(purge_old: bool) -> int:
    """
    Tambahkan signing key baru dan (opsional) purge key lama.

    Returns:
        Jumlah key yang di-purge
    """
    persistence = create_persistence(settings)
    await persistence.startup()
    try:
        auth_service = AuthService.from_settings(settings, persistence)

        async with database_scope(persistence) as db:
            old_keys = await db.get_jwt_keys()

        await auth_service.rotate_signing_key()

        if not purge_old:
            return 0
        for key in old_keys:
            await auth_service.purge_signing_key(key)
        return len(old_keys)
    finally:
        await persistence.shutdown()


def main():
    """Main function."""
    print("🔐 Files-CRUD Auth signing key rotation")
    purge_old = "--purge-old" in sys.argv[1:]

    try:
        purged = asyncio.run(rotate(purge_old))
    except Exception as e:
        print(f"\n❌ Error rotating signing keys: {e}")
        sys.exit(1)

    print("\n✅ New signing key added")
    if purge_old:
        print(f"✅ Purged {purged} old key(s); previously issued tokens are now invalid")


if __name__ == "__main__":
    main()
