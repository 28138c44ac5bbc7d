"""
Seed script for PolicyDesk.

Creates demo users and a handful of contracts spread across the active,
ended and archived views. Contracts go through the lifecycle controller so
each one carries its CREATED history entry.

Usage:
    python -m policydesk.scripts.seed
"""

import asyncio
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from policydesk.common.enums import UserRole
from policydesk.common.logging import get_logger, setup_logging
from policydesk.common.security import get_password_hash
from policydesk.core.contracts.lifecycle import ContractLifecycle
from policydesk.core.users.service import UserService
from policydesk.db.models import Contract, User
from policydesk.db.session import async_session_factory, init_db

logger = get_logger("scripts.seed")

DEMO_USERS = [
    ("sales", "sales123", UserRole.SALES, "Demo Salesperson"),
    ("viewer", "viewer123", UserRole.VIEWER, "Demo Viewer"),
]


def _demo_contracts(today: date) -> list[dict]:
    return [
        {
            "client_name": "UAB Baltic Freight",
            "salesperson": "sales",
            "insurance_type": "Motor third party liability",
            "policy_no": "POL-1001",
            "valid_from": today - timedelta(days=300),
            "valid_until": today + timedelta(days=65),
            "registration_no": "KLM123",
            "yearly_premium": Decimal("420.00"),
            "payout": Decimal("5000000.00"),
            "notes": ["Fleet discount applied"],
        },
        {
            "client_name": "Jonas Petraitis",
            "salesperson": "sales",
            "insurance_type": "Casco",
            "policy_no": "POL-1002",
            "valid_from": today - timedelta(days=350),
            "valid_until": today + timedelta(days=12),
            "registration_no": "ABC321",
            "yearly_premium": Decimal("615.50"),
            "payout": Decimal("18000.00"),
            "notes": [],
        },
        {
            "client_name": "Northwind Storage",
            "salesperson": "admin",
            "insurance_type": "Property",
            "policy_no": "POL-1003",
            "valid_from": today - timedelta(days=400),
            "valid_until": today - timedelta(days=35),
            "registration_no": "",
            "yearly_premium": Decimal("1290.00"),
            "payout": Decimal("250000.00"),
            "notes": ["Client asked for a renewal quote"],
        },
        {
            "client_name": "Rasa Kazlauskiene",
            "salesperson": "sales",
            "insurance_type": "Home",
            "policy_no": "POL-1004",
            "valid_from": today - timedelta(days=30),
            "valid_until": today + timedelta(days=335),
            "registration_no": "",
            "yearly_premium": Decimal("180.00"),
            "payout": Decimal("90000.00"),
            "notes": ["Sold the property, policy on hold"],
        },
    ]


async def seed(session: AsyncSession, today: date | None = None) -> int:
    """Load demo data into an empty database. Returns the number of contracts created."""
    today = today or date.today()
    users = UserService(session)
    admin = await users.ensure_default_admin()
    if admin is None:
        existing = await session.execute(select(Contract.id).limit(1))
        if existing.first() is not None:
            logger.info("Database already seeded, skipping")
            return 0
        result = await session.execute(select(User).where(User.role == UserRole.ADMIN.value))
        admin = result.scalars().first()
        if admin is None:
            logger.error("No admin user found; cannot seed contracts")
            return 0

    for username, password, role, full_name in DEMO_USERS:
        found = await session.execute(select(User.id).where(User.username == username))
        if found.first() is None:
            session.add(
                User(
                    username=username,
                    hashed_password=get_password_hash(password),
                    role=role.value,
                    full_name=full_name,
                )
            )
    await session.flush()

    lifecycle = ContractLifecycle(session)
    created = [await lifecycle.create(data, admin) for data in _demo_contracts(today)]
    # Last one goes to the archive; POL-1003 is already expired
    await lifecycle.toggle_archive(created[-1].id, admin)
    return len(created)


async def main() -> None:
    setup_logging()
    await init_db()
    async with async_session_factory() as session:
        count = await seed(session)
        await session.commit()
    logger.info("Seeded %d contracts", count)


if __name__ == "__main__":
    asyncio.run(main())
