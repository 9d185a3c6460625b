import asyncio
import logging
from datetime import date
from dotenv import load_dotenv
from punchclock.models.credential import Credential
from punchclock.models.employee import Employee
from punchclock.models.enums import Role
from punchclock.services.auth_service import hash_password
from punchclock.store.base import AttendanceStore

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "password123"


async def seed_demo_accounts(store: AttendanceStore) -> bool:
    """Create a demo admin and a demo employee when no accounts exist."""
    if await store.count_credentials() > 0:
        logger.info("Accounts already exist; skipping demo account seeding")
        return False

    admin_employee = await store.insert_employee(Employee(
        first_name="Demo",
        last_name="Admin",
        email="admin@example.com",
        department="Administration",
        position="Administrator",
        contact_number="123-456-7890",
        address="123 Admin St, City",
        hire_date=date(2023, 1, 1),
    ))
    employee = await store.insert_employee(Employee(
        first_name="Demo",
        last_name="Employee",
        email="employee@example.com",
        department="Operations",
        position="Associate",
        contact_number="987-654-3210",
        address="456 Employee Ave, Town",
        hire_date=date(2023, 6, 15),
    ))

    await store.insert_credential(Credential(
        employee_id=admin_employee.id,
        email="admin@example.com",
        password_hash=hash_password(DEMO_PASSWORD),
        role=Role.ADMIN,
    ))
    await store.insert_credential(Credential(
        employee_id=employee.id,
        email="employee@example.com",
        password_hash=hash_password(DEMO_PASSWORD),
        role=Role.EMPLOYEE,
    ))
    logger.info("Demo accounts created: admin@example.com, employee@example.com")
    return True


def run_seed():
    from fastapi import FastAPI
    from punchclock.db import get_store, init_db

    load_dotenv()
    init_db(FastAPI())
    asyncio.run(seed_demo_accounts(get_store()))


if __name__ == "__main__":
    run_seed()
