import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import ConcurrentModificationError, NotFoundError, TimedOutError
from app.models.auth.role import Role
from app.models.auth.user import User
from app.models.auth.user_role import UserRole
from app.models.hr.employee import Employee
from app.models.hr.employee_profile import EmployeeProfile
from app.models.hr.leave_request import LeaveRequest
from app.models.hr.payroll_record import PayrollRecord
from app.models.notification.notification import Notification

logger = logging.getLogger(__name__)

TABLES = {
    PayrollRecord.__tablename__: PayrollRecord,
    LeaveRequest.__tablename__: LeaveRequest,
    Notification.__tablename__: Notification,
    Employee.__tablename__: Employee,
    EmployeeProfile.__tablename__: EmployeeProfile,
    User.__tablename__: User,
    Role.__tablename__: Role,
    UserRole.__tablename__: UserRole,
}


class PersistenceGateway:
    """
    Table-addressed data access over an AsyncSession.

    Every public call is a single round trip bounded by a timeout. Writes commit
    immediately and roll back on failure. Reads always repopulate identity-map
    instances so callers never act on a stale copy.
    """

    def __init__(self, session: AsyncSession, timeout: Optional[float] = None):
        self.session = session
        self.timeout = timeout if timeout is not None else settings.DB_OPERATION_TIMEOUT_SECONDS

    def _model(self, table: str):
        try:
            return TABLES[table]
        except KeyError:
            raise ValueError(f"Unknown table '{table}'")

    async def _run(self, operation: str, coro):
        try:
            return await asyncio.wait_for(coro, timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.error(f"Database operation {operation} timed out after {self.timeout}s")
            await self._safe_rollback()
            raise TimedOutError(operation, self.timeout)

    async def _safe_rollback(self):
        try:
            await self.session.rollback()
        except Exception as e:
            logger.error(f"Rollback failed: {e}")

    # region ========== Writes ==========

    async def insert(self, table: str, values: Dict[str, Any]) -> int:
        """
        Insert one row and return its id.

        Only the write itself is timed; the id is taken from the flush, so a
        committed row is never reported as failed by a slow read-back. Callers
        load the row with their own bounded read.
        """
        model = self._model(table)

        async def _insert():
            row = model(**values)
            self.session.add(row)
            try:
                await self.session.flush()
                record_id = row.id
                await self.session.commit()
            except Exception:
                await self.session.rollback()
                raise
            return record_id

        return await self._run(f"insert:{table}", _insert())

    async def update(
        self,
        table: str,
        record_id: int,
        values: Dict[str, Any],
        expected_version: Optional[int] = None,
        options: Sequence[Any] = (),
    ):
        """
        Update one row by id and return the refreshed row.

        Versioned tables get their version bumped on every write; with an
        expected_version the write only lands if nobody else wrote first.
        """
        model = self._model(table)
        versioned = hasattr(model, "version")

        async def _update():
            stmt = update(model).where(model.id == record_id)
            changes = dict(values)
            if versioned:
                if expected_version is not None:
                    stmt = stmt.where(model.version == expected_version)
                changes["version"] = model.version + 1
            stmt = stmt.values(**changes).execution_options(synchronize_session=False)

            try:
                result = await self.session.execute(stmt)
                if result.rowcount == 0:
                    await self.session.rollback()
                    exists = await self.session.scalar(
                        select(func.count(model.id)).where(model.id == record_id)
                    )
                    if exists and expected_version is not None:
                        raise ConcurrentModificationError(table, record_id, expected_version)
                    raise NotFoundError(f"{table} {record_id} not found", table=table, record_id=record_id)
                await self.session.commit()
            except (NotFoundError, ConcurrentModificationError):
                raise
            except Exception:
                await self.session.rollback()
                raise

            return await self._select_one(model, [model.id == record_id], options)

        return await self._run(f"update:{table}", _update())

    async def update_many(self, table: str, values: Dict[str, Any], *conditions: Any) -> int:
        """Update every row matching the conditions; returns the row count"""
        model = self._model(table)

        async def _update_many():
            try:
                result = await self.session.execute(
                    update(model).where(*conditions).values(**values)
                    .execution_options(synchronize_session=False)
                )
                await self.session.commit()
            except Exception:
                await self.session.rollback()
                raise
            return result.rowcount

        return await self._run(f"update_many:{table}", _update_many())

    async def delete(self, table: str, record_id: int) -> bool:
        model = self._model(table)

        async def _delete():
            try:
                result = await self.session.execute(
                    delete(model).where(model.id == record_id).execution_options(synchronize_session=False)
                )
                if result.rowcount == 0:
                    await self.session.rollback()
                    raise NotFoundError(f"{table} {record_id} not found", table=table, record_id=record_id)
                await self.session.commit()
            except NotFoundError:
                raise
            except Exception:
                await self.session.rollback()
                raise
            return True

        return await self._run(f"delete:{table}", _delete())

    # endregion

    # region ========== Reads ==========

    async def _select_one(self, model, conditions: Iterable[Any], options: Sequence[Any] = ()):
        stmt = select(model).where(*conditions).execution_options(populate_existing=True)
        if options:
            stmt = stmt.options(*options)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def select_one(self, table: str, *conditions: Any, options: Sequence[Any] = ()):
        """First row matching all conditions, or None"""
        model = self._model(table)
        return await self._run(f"select_one:{table}", self._select_one(model, conditions, options))

    async def select_many(
        self,
        table: str,
        *conditions: Any,
        order_by: Optional[Sequence[Any]] = None,
        options: Sequence[Any] = (),
    ) -> List[Any]:
        model = self._model(table)

        async def _select_many():
            stmt = select(model).where(*conditions).execution_options(populate_existing=True)
            if options:
                stmt = stmt.options(*options)
            if order_by is not None:
                stmt = stmt.order_by(*order_by)
            result = await self.session.execute(stmt)
            return list(result.scalars().unique().all())

        return await self._run(f"select_many:{table}", _select_many())

    async def get(self, table: str, record_id: int, options: Sequence[Any] = (), label: Optional[str] = None):
        """Row by id or NotFoundError"""
        model = self._model(table)
        row = await self.select_one(table, model.id == record_id, options=options)
        if row is None:
            raise NotFoundError(f"{label or table} {record_id} not found", table=table, record_id=record_id)
        return row

    # endregion
