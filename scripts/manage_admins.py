#!/usr/bin/env python3
"""
List, add or remove confession bot admins directly in the database.

The in-bot "Manage Admins" menu is only reachable by an existing admin, so the
first admin has to be added with this script:

    python scripts/manage_admins.py add 123456789
"""

import argparse
import asyncio

from dotenv import load_dotenv

load_dotenv()

from confession_bot.database import (
    add_admin,
    close_pool,
    create_schema,
    get_pool,
    get_settings,
    remove_admin,
)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Manage confession bot admins.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="Print the current admin ids.")

    add_parser = subparsers.add_parser("add", help="Grant admin rights.")
    add_parser.add_argument("admin_id", type=int)

    remove_parser = subparsers.add_parser("remove", help="Revoke admin rights.")
    remove_parser.add_argument("admin_id", type=int)

    return parser.parse_args()


async def main() -> None:
    args = parse_args()
    pool = await get_pool()
    try:
        async with pool.acquire() as conn:
            await create_schema(conn)

        if args.command == "add":
            await add_admin(args.admin_id)
            print(f"Added admin {args.admin_id}")
        elif args.command == "remove":
            await remove_admin(args.admin_id)
            print(f"Removed admin {args.admin_id}")

        settings = await get_settings()
        print("\nAdmins:")
        print("-------------------")
        for admin_id in sorted(settings.admins):
            print(admin_id)
        if not settings.admins:
            print("(none)")
    finally:
        await close_pool()


if __name__ == "__main__":
    asyncio.run(main())
