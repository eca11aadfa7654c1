#!/usr/bin/env python3
"""
Manage users in the check-in database.

Usage:
    python scripts/manage_users.py add john@example.com secret123 "John Doe" manager
    python scripts/manage_users.py add jane@example.com secret123 "Jane Smith" member --manager-id <id>
    python scripts/manage_users.py remove --email john@example.com
    python scripts/manage_users.py remove --id <id>
    python scripts/manage_users.py remove --all
    python scripts/manage_users.py list
    python scripts/manage_users.py seed

Run `alembic upgrade head` first so the tables exist.
"""

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

sys.path.append(str(Path(__file__).resolve().parents[1]))

# Load environment variables
load_dotenv()

from app.core.config import get_settings
from app.db.session import build_engine, build_session_factory
from app.repositories.users import UserDirectory, UserDirectoryError
from app.schemas.user import UserCreate

SEED_PASSWORD = "password123"

SEED_MANAGERS = [
    {"email": "sarah.johnson@company.com", "name": "Sarah Johnson", "team_id": "engineering"},
    {"email": "michael.chen@company.com", "name": "Michael Chen", "team_id": "product"},
]

# manager email -> members
SEED_MEMBERS = {
    "sarah.johnson@company.com": [
        ("alex.rodriguez@company.com", "Alex Rodriguez"),
        ("emma.wilson@company.com", "Emma Wilson"),
        ("david.kim@company.com", "David Kim"),
        ("lisa.patel@company.com", "Lisa Patel"),
        ("james.anderson@company.com", "James Anderson"),
    ],
    "michael.chen@company.com": [
        ("sophia.garcia@company.com", "Sophia Garcia"),
        ("ryan.thompson@company.com", "Ryan Thompson"),
        ("olivia.martinez@company.com", "Olivia Martinez"),
        ("daniel.lee@company.com", "Daniel Lee"),
        ("ava.brown@company.com", "Ava Brown"),
    ],
}


def cmd_add(users: UserDirectory, args) -> None:
    payload = UserCreate(
        email=args.email,
        password=args.password,
        name=args.name,
        role=args.role,
        manager_id=args.manager_id,
        team_id=args.team_id,
    )
    u = users.create_user(**payload.model_dump())
    print(f"✅ Created {u.role} {u.email}")
    print(f"   id:        {u.id}")
    print(f"   managerId: {u.manager_id or 'N/A'}")
    print(f"   teamId:    {u.team_id or 'N/A'}")


def cmd_remove(users: UserDirectory, args) -> None:
    if args.all:
        count = users.remove_all()
        print(f"🗑️  Removed {count} user(s)")
        return

    u = users.find_by_id(args.id) if args.id else users.find_by_email(args.email)
    if not u:
        print("❌ User not found")
        sys.exit(1)

    if u.role == "manager" and users.has_members(u.id):
        print(f"⚠️  {u.email} still has team members; they will be orphaned")
    users.remove_by_id(u.id)
    print(f"🗑️  Removed {u.email} ({u.id})")


def cmd_list(users: UserDirectory, args) -> None:
    rows = users.list_users()
    if not rows:
        print("No users found")
        return
    print(f"{'ID':<38}{'EMAIL':<34}{'ROLE':<9}{'MANAGER':<38}NAME")
    for u in rows:
        print(f"{u.id:<38}{u.email:<34}{u.role:<9}{(u.manager_id or '-'):<38}{u.name}")
    print(f"\n{len(rows)} user(s)")


def cmd_seed(users: UserDirectory, args) -> None:
    created = 0
    for m in SEED_MANAGERS:
        manager = users.find_by_email(m["email"])
        if not manager:
            manager = users.create_user(
                email=m["email"], password=SEED_PASSWORD, name=m["name"], role="manager", team_id=m["team_id"]
            )
            created += 1

        for email, name in SEED_MEMBERS[m["email"]]:
            if users.exists(email):
                continue
            users.create_user(
                email=email,
                password=SEED_PASSWORD,
                name=name,
                role="member",
                manager_id=manager.id,
                team_id=m["team_id"],
            )
            created += 1

    print(f"=== SEED COMPLETE: {created} user(s) created ===")
    print(f"All seed users share the password '{SEED_PASSWORD}'")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Manage check-in users")
    sub = parser.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help="Create a user")
    add.add_argument("email")
    add.add_argument("password")
    add.add_argument("name")
    add.add_argument("role", choices=["manager", "member"])
    add.add_argument("--manager-id", help="Required for members, not allowed for managers")
    add.add_argument("--team-id")
    add.set_defaults(func=cmd_add)

    remove = sub.add_parser("remove", help="Remove users")
    target = remove.add_mutually_exclusive_group(required=True)
    target.add_argument("--email")
    target.add_argument("--id")
    target.add_argument("--all", action="store_true", help="Remove every user (destructive)")
    remove.set_defaults(func=cmd_remove)

    lst = sub.add_parser("list", help="List users")
    lst.set_defaults(func=cmd_list)

    seed = sub.add_parser("seed", help="Create two managers with five members each")
    seed.set_defaults(func=cmd_seed)
    return parser


def main():
    args = build_parser().parse_args()

    engine = build_engine(get_settings())
    db = build_session_factory(engine)()
    try:
        args.func(UserDirectory(db), args)
        db.commit()
    except (UserDirectoryError, ValidationError) as e:
        db.rollback()
        print(f"❌ Error: {e}")
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    main()
