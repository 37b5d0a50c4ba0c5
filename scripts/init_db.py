"""
Database Initialization Script

Creates every table from the ORM models and optionally seeds the first
admin account (registration through the API only ever creates customers).

Run from project root:
    python scripts/init_db.py
    python scripts/init_db.py --admin-username admin --admin-email admin@example.com --admin-password ...

Author: Khalil_Bannouri
Version: 1.0.0
"""

import argparse
import asyncio
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Windows event loop fix
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

from restaurant_api.core.config import get_settings, setup_logging
from restaurant_api.core.errors import Conflict
from restaurant_api.database import Database
from restaurant_api.models import UserRole
from restaurant_api.services import AuthService


async def init_db(admin_username=None, admin_email=None, admin_password=None) -> bool:
    settings = get_settings()
    setup_logging(settings)
    database = Database.from_settings(settings)

    print("=" * 60)
    print("🗄️  DATABASE INITIALIZATION")
    print("=" * 60)
    print(f"📄 Target: {database.engine.url.render_as_string(hide_password=True)}")

    try:
        await database.create_all()
        print("✅ Tables created")

        if admin_username:
            auth = AuthService(database, settings)
            try:
                user = await auth.create_user(
                    admin_username,
                    admin_email,
                    admin_password,
                    role=UserRole.ADMIN,
                )
                print(f"✅ Admin account #{user.id} ({user.username}) created")
            except Conflict:
                print(f"⚠️ Admin '{admin_username}' or '{admin_email}' already exists, skipped")
    finally:
        await database.dispose()

    print("=" * 60)
    return True


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create tables and seed an admin")
    parser.add_argument("--admin-username", help="Username for the admin account")
    parser.add_argument("--admin-email", help="Email for the admin account")
    parser.add_argument("--admin-password", help="Password for the admin account")
    args = parser.parse_args()

    if args.admin_username and not (args.admin_email and args.admin_password):
        parser.error("--admin-username requires --admin-email and --admin-password")

    asyncio.run(init_db(args.admin_username, args.admin_email, args.admin_password))
