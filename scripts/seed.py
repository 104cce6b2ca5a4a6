"""Seed the database with an admin and a demo user.

Run with: python -m scripts.seed
Creates the tables if they don't exist (dev only).
"""

import asyncio

from sqlalchemy import select

from carebook.core.auth import hash_password
from carebook.core.config import settings
from carebook.core.database import Database
from carebook.models import User, UserRole

USERS = [
    {
        "nid_no": "1970000001",
        "name": "CareBook Admin",
        "email": "admin@carebook.io",
        "contact": "01700000001",
        "password": "Admin123",
        "role": UserRole.ADMIN,
    },
    {
        "nid_no": "1990123456",
        "name": "Demo User",
        "email": "user@example.com",
        "contact": "01700000002",
        "password": "User1234",
        "role": UserRole.USER,
    },
]


async def seed():
    database = Database(settings.database_url, echo=settings.database_echo)
    await database.open()
    try:
        await database.create_all()

        async with database.session() as db:
            created = []
            for data in USERS:
                result = await db.execute(select(User).where(User.email == data["email"]))
                if result.scalar_one_or_none():
                    continue
                db.add(User(
                    nid_no=data["nid_no"],
                    name=data["name"],
                    email=data["email"],
                    contact=data["contact"],
                    hashed_password=hash_password(data["password"]),
                    role=data["role"],
                ))
                created.append(data)
            await db.commit()

        if not created:
            print("Database already seeded - skipping.")
            return

        print(f"Seeded {len(created)} users:")
        for data in created:
            print(f"    {data['email']} / {data['password']} ({data['role'].value})")
    finally:
        await database.close()


if __name__ == "__main__":
    asyncio.run(seed())
