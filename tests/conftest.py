import pytest
import pytest_asyncio
from datetime import date
from types import SimpleNamespace
from typing import AsyncGenerator
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from main import app as fastapi_app
from app.core.config import settings
from app.core.database import get_async_session
from app.db.base import Base
from app.db.seeds.init_roles_data import seed_roles
from app.models import Employee, EmployeeProfile, Role, User, UserRole

@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database per test"""
    test_engine = create_async_engine(
        settings.DATABASE_TEST_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()

@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

@pytest_asyncio.fixture
async def session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    async with session_maker() as db_session:
        yield db_session

@pytest_asyncio.fixture
async def client(session_maker) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the test database"""
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as db_session:
            yield db_session

    fastapi_app.dependency_overrides[get_async_session] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=fastapi_app), base_url="http://test") as ac:
        yield ac
    fastapi_app.dependency_overrides.clear()

@pytest_asyncio.fixture
async def people(session: AsyncSession) -> SimpleNamespace:
    """
    Two active reviewers (admin, hr_manager), one deactivated admin, and an
    employee whose login account holds only the employee role.
    """
    await seed_roles(session)
    roles = {role.name: role for role in (await session.execute(select(Role))).scalars()}

    def make_user(username: str, is_active: bool = True) -> User:
        return User(
            email=f"{username}@example.com",
            username=username,
            full_name=username.replace("_", " ").title(),
            is_active=is_active,
        )

    admin = make_user("fatou_admin")
    hr_manager = make_user("ibrahima_rh")
    dormant_admin = make_user("old_admin", is_active=False)
    staff = make_user("awa_diop")
    session.add_all([admin, hr_manager, dormant_admin, staff])
    await session.flush()

    session.add_all([
        UserRole(user_id=admin.id, role_id=roles["admin"].id),
        UserRole(user_id=hr_manager.id, role_id=roles["hr_manager"].id),
        UserRole(user_id=dormant_admin.id, role_id=roles["admin"].id),
        UserRole(user_id=staff.id, role_id=roles["employee"].id),
    ])

    employee = Employee(
        employee_code="EMP001",
        user_id=staff.id,
        first_name="Awa",
        last_name="Diop",
        email="awa.diop@example.com",
        hire_date=date(2021, 3, 1),
        position="Comptable",
    )
    second_employee = Employee(
        employee_code="EMP002",
        first_name="Moussa",
        last_name="Ndiaye",
        email="moussa.ndiaye@example.com",
        hire_date=date(2022, 9, 15),
        position="Chauffeur",
    )
    session.add_all([employee, second_employee])
    await session.flush()

    session.add(EmployeeProfile(
        employee_id=employee.id,
        convention="Commerce",
        contract_status="CDI",
        qualification="Cadre",
        tax_parts=2,
        employer_name="Sahel Distribution",
        site="Dakar",
    ))
    await session.commit()

    return SimpleNamespace(
        admin=admin,
        hr_manager=hr_manager,
        dormant_admin=dormant_admin,
        staff=staff,
        employee=employee,
        second_employee=second_employee,
    )
