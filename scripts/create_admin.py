#!/usr/bin/env python3
"""Create an admin user with properly hashed password."""

import argparse
import asyncio

from sqlalchemy import select

from joyhomes.core.security import get_password_hash
from joyhomes.database import AsyncSessionLocal
from joyhomes.models.user import User


async def create_admin(
    email: str = "admin@joyhomes.vn",
    password: str = "Admin@123",
    full_name: str = "Joyhomes Admin",
) -> None:
    """Create an admin user if it doesn't exist."""
    async with AsyncSessionLocal() as session:
        result = await session.execute(select(User).where(User.email == email))
        existing = result.scalar_one_or_none()

        if existing:
            # Reset password and role
            existing.password_hash = get_password_hash(password)
            existing.role = "ADMIN"
            existing.is_active = True
            existing.full_name = full_name
            await session.commit()
            print(f"Updated existing admin user: {email}")
        else:
            admin = User(
                email=email,
                password_hash=get_password_hash(password),
                role="ADMIN",
                full_name=full_name,
                is_active=True,
            )
            session.add(admin)
            await session.commit()
            print(f"Created admin user: {email}")

        print(f"Email: {email}")
        print(f"Password: {password}")
        print("Role: ADMIN")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create an admin user")
    parser.add_argument("--email", default="admin@joyhomes.vn", help="Admin email")
    parser.add_argument("--password", default="Admin@123", help="Admin password")
    parser.add_argument("--full-name", default="Joyhomes Admin", help="Full name")

    args = parser.parse_args()

    asyncio.run(create_admin(email=args.email, password=args.password, full_name=args.full_name))
