"""
AfriVerse Editorial Desk - Seed Users Script
============================================
Seeds the database with a starter newsroom: one admin, two editors and
a handful of writers. Passwords are hashed with bcrypt before storage.

Usage:
    python -m scripts.seed_users

WARNING: initial passwords live in this file.
    - Everyone must change their password on first login.
    - For development/staging only.
"""

import asyncio
import os
import sys

# Add parent dir to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from sqlalchemy import select  # noqa: E402

from app.core.database import async_session, init_db  # noqa: E402
from app.core.security import hash_password  # noqa: E402
from app.models.user import User, UserRole  # noqa: E402


NEWSROOM = [
    {"name": "Amara Okafor", "email": "admin@afriverse.news", "password": "Admin2026@Desk", "role": UserRole.ADMIN},
    {"name": "Kwame Mensah", "email": "k.mensah@afriverse.news", "password": "Editor2026@Km", "role": UserRole.EDITOR},
    {"name": "Zainab Bello", "email": "z.bello@afriverse.news", "password": "Editor2026@Zb", "role": UserRole.EDITOR},
    {
        "name": "Thandiwe Dlamini",
        "email": "t.dlamini@afriverse.news",
        "password": "Senior2026@Td",
        "role": UserRole.SENIOR_WRITER,
    },
    {"name": "Yusuf Abdi", "email": "y.abdi@afriverse.news", "password": "Author2026@Ya", "role": UserRole.AUTHOR},
    {"name": "Nia Wanjiru", "email": "n.wanjiru@afriverse.news", "password": "Author2026@Nw", "role": UserRole.AUTHOR},
    {
        "name": "Kofi Asante",
        "email": "k.asante@afriverse.news",
        "password": "Contrib2026@Ka",
        "role": UserRole.CONTRIBUTOR,
    },
]


async def seed_users():
    """Seed the database with the starter newsroom."""
    await init_db()

    async with async_session() as session:
        added = 0
        skipped = 0

        for member in NEWSROOM:
            result = await session.execute(select(User).where(User.email == member["email"]))
            if result.scalar_one_or_none():
                print(f"  skip  {member['name']} <{member['email']}> already exists")
                skipped += 1
                continue

            session.add(
                User(
                    name=member["name"],
                    email=member["email"],
                    hashed_password=hash_password(member["password"]),
                    role=member["role"],
                    is_active=True,
                )
            )
            print(f"  added {member['name']} <{member['email']}> as {member['role'].value}")
            added += 1

        await session.commit()

    print(f"\n{'=' * 50}")
    print(f"Result: {added} new users | {skipped} already present")
    print(f"Total newsroom: {len(NEWSROOM)}")
    print(f"{'=' * 50}")


if __name__ == "__main__":
    print("=" * 50)
    print("Seeding AfriVerse newsroom accounts")
    print("=" * 50)
    asyncio.run(seed_users())
