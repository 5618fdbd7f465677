"""
Seed default departments, zones and roles. Safe to run more than once.

Usage: python -m scripts.seed_org
"""
import asyncio
import logging

from hrmaster.core.database import init_db
from hrmaster.services.calendar_service import ensure_singletons
from hrmaster.services.org_service import seed_defaults

logger = logging.getLogger(__name__)

DEPARTMENTS = ["Engineering", "Human Resources", "Sales", "Marketing", "Finance"]

ZONES = ["New York Office", "London Office", "Remote (US)", "Remote (Global)"]

ROLES = [
    {"name": "Admin", "description": "System Administrator", "protected": True},
    {"name": "HR", "description": "Human Resources", "protected": True},
    {"name": "Employee", "description": "General Employee", "protected": True},
    {"name": "Software Engineer", "description": "Full stack developer"},
    {"name": "Senior Software Engineer", "description": "Lead developer"},
    {"name": "Product Manager", "description": "Product strategy and roadmap"},
    {"name": "HR Manager", "description": "HR operations lead"},
    {"name": "Sales Representative", "description": "Client acquisition"},
    {"name": "Designer", "description": "UI/UX Designer"},
]


async def main():
    await init_db()
    await ensure_singletons()
    created = await seed_defaults(DEPARTMENTS, ZONES, ROLES)
    logger.info("Seeding complete, %d entries created", created)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
