#!/usr/bin/env python
"""
Script untuk membuat admin user di Files-CRUD Auth.
Usage: python scripts/create_admin.py [--non-interactive <username> <password>]
"""

import asyncio
import sys
import getpass
from pathlib import Path

# Add parent directory to path
sys.path.append(str(Path(__file__).parent.parent))

from filescrud.core.config import settings
from filescrud.core.constants import DatabaseBackend
from filescrud.db.factory import create_persistence
from filescrud.services.auth import AuthService


def get_user_input() -> dict:
    """Get admin user details from user input."""
    print("\n=== Create Admin User ===\n")

    while True:
        username = input("Admin username: ").strip()
        if len(username) >= 3:
            break
        print("Username must be at least 3 characters.")

    while True:
        password = getpass.getpass("Admin password: ")
        if not password:
            print("Password must not be empty.")
            continue

        confirm_password = getpass.getpass("Confirm password: ")
        if password != confirm_password:
            print("Passwords do not match. Please try again.")
            continue

        break

    return {"username": username, "password": password}


async def create_admin_user(username: str, password: str) -> bool:
    """
    Create admin user lewat AuthService.

    Returns:
        True jika user dibuat, False jika username sudah dipakai
    """
    persistence = create_persistence(settings)
    await persistence.startup()
    try:
        auth_service = AuthService.from_settings(settings, persistence)
        result = await auth_service.add_user(
            username,
            password,
            admin=True,
            meta={"created_by": "create_admin_script"}
        )
        return result.ok
    finally:
        await persistence.shutdown()


async def main():
    """Main function."""
    if settings.DATABASE_BACKEND == DatabaseBackend.MEMORY:
        print("DATABASE_BACKEND is 'memory'; the admin user would not outlive this script.")
        sys.exit(1)

    try:
        if len(sys.argv) > 1 and sys.argv[1] == "--non-interactive":
            if len(sys.argv) != 4:
                print("Usage: python create_admin.py --non-interactive <username> <password>")
                sys.exit(1)
            user_data = {"username": sys.argv[2], "password": sys.argv[3]}
        else:
            user_data = get_user_input()

        print("\nCreating admin user...")
        created = await create_admin_user(**user_data)
        if not created:
            print(f"\n❌ Username '{user_data['username']}' is already taken")
            sys.exit(1)

        print("\n✅ Admin user created successfully!")
        print(f"   Username: {user_data['username']}")
        print(f"   Backend: {settings.DATABASE_BACKEND}")

    except KeyboardInterrupt:
        print("\n\nOperation cancelled by user.")
        sys.exit(0)
    except Exception as e:
        print(f"\n❌ Error creating admin user: {e}")
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
