from typing import List
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.auth.role import Role

roles_data = [
    {
        "name": "admin",
        "description": "Administrator; reviews leave requests and manages payroll",
        "is_system_role": True
    },
    {
        "name": "hr_manager",
        "description": "HR Manager; reviews leave requests and validates payroll"
    },
    {
        "name": "employee",
        "description": "Regular Employee; submits leave requests"
    },
]

async def seed_roles(session: AsyncSession) -> List[str]:
    """Seed roles into the database (idempotent)"""
    created_roles = []
    for role_data in roles_data:
        existing_role = await session.execute(
            select(Role).where(Role.name == role_data["name"])
        )
        if existing_role.scalar_one_or_none():
            continue

        session.add(Role(
            name=role_data["name"],
            description=role_data["description"],
            is_system_role=role_data.get("is_system_role", False),
        ))
        created_roles.append(role_data["name"])

    await session.commit()
    return created_roles
