import logging
from typing import List, Optional, Tuple
from datetime import datetime, timezone
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.config import settings
from app.core.exceptions import InvalidTransitionError, ValidationError
from app.core.logging import log_user_action
from app.db.gateway import PersistenceGateway
from app.models.hr.employee import Employee
from app.models.hr.leave_request import LeaveRequest
from app.models.shared.enums import LeaveStatus, NotificationType
from app.schemas.hr.leave_schema import LeaveRequestCreate
from app.services.dashboard.aggregation import filter_by_free_text
from app.services.notification.notification_service import FanOutResult, NotificationService

logger = logging.getLogger(__name__)

TABLE = LeaveRequest.__tablename__
RECORD_OPTIONS = (selectinload(LeaveRequest.employee),)
SEARCH_FIELDS = ("employee.employee_code", "employee.first_name", "employee.last_name", "leave_type", "reason")
DECISIONS = {LeaveStatus.APPROVED, LeaveStatus.REJECTED}

class LeaveService:
    def __init__(self, session: AsyncSession, notifications: Optional[NotificationService] = None):
        self.session = session
        self.gateway = PersistenceGateway(session)
        self.notifications = notifications or NotificationService(session)

    async def create_leave_request(
        self, data: LeaveRequestCreate, acting_user_id: int
    ) -> Tuple[LeaveRequest, FanOutResult]:
        """
        Submit a pending leave request and alert every reviewer.

        The request is committed before the fan-out starts, so a reviewer that
        cannot be notified never undoes the submission.
        """
        if data.end_date < data.start_date:
            raise ValidationError("End date cannot be before start date", field="end_date")

        employee = await self.gateway.get(Employee.__tablename__, data.employee_id, label="Employee")

        request_id = await self.gateway.insert(TABLE, {
            "employee_id": data.employee_id,
            "start_date": data.start_date,
            "end_date": data.end_date,
            "leave_type": data.leave_type,
            "reason": data.reason,
            "status": LeaveStatus.PENDING,
            "created_by": acting_user_id,
        })
        log_user_action(acting_user_id, "CREATE", "leave_request", request_id, leave_type=data.leave_type.value)

        fan_out = await self.notifications.notify_admins(
            title="New leave request",
            message=(
                f"{employee.full_name} ({employee.employee_code}) requested {data.leave_type.value.lower()} leave "
                f"from {data.start_date.isoformat()} to {data.end_date.isoformat()}"
            ),
            notification_type=NotificationType.LEAVE_REQUEST,
            related_id=request_id,
        )
        if fan_out.lookup_failed:
            logger.error(f"Leave request {request_id} created but reviewers could not be looked up")
        elif fan_out.failed:
            logger.error(
                f"Leave request {request_id} created but {len(fan_out.failed)} reviewer(s) "
                f"were not notified: {fan_out.failed}"
            )
        else:
            logger.info(f"Leave request {request_id} created, {len(fan_out.delivered)} reviewer(s) notified")

        return await self.get_leave_request(request_id), fan_out

    async def decide_leave_request(
        self,
        request_id: int,
        decision: LeaveStatus,
        reviewer_id: Optional[int],
        comment: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> LeaveRequest:
        """Approve or reject a request; only the review fields change"""
        decision = LeaveStatus(decision)
        if decision not in DECISIONS:
            raise InvalidTransitionError(None, decision.value, "A decision must be APPROVED or REJECTED")
        if not reviewer_id:
            raise ValidationError("A reviewer is required to decide a leave request", field="reviewer_id")

        leave_request = await self.get_leave_request(request_id)

        if reviewer_id not in await self.notifications.get_admin_user_ids():
            raise InvalidTransitionError(
                leave_request.status.value, decision.value,
                "Only users holding a reviewer role can decide leave requests",
            )

        if leave_request.status != LeaveStatus.PENDING and settings.LEAVE_DECISIONS_FINAL:
            raise InvalidTransitionError(
                leave_request.status.value, decision.value,
                f"Leave request already {leave_request.status.value.lower()}",
            )

        if leave_request.employee and leave_request.employee.user_id == reviewer_id:
            raise InvalidTransitionError(
                leave_request.status.value, decision.value,
                "Reviewers cannot decide their own leave requests",
            )

        previous = leave_request.status
        updated = await self.gateway.update(
            TABLE,
            request_id,
            {
                "status": decision,
                "reviewed_by": reviewer_id,
                "review_comment": comment,
                "reviewed_at": datetime.now(timezone.utc),
            },
            expected_version=expected_version if expected_version is not None else leave_request.version,
            options=RECORD_OPTIONS,
        )

        log_user_action(reviewer_id, "DECIDE", "leave_request", request_id,
                        from_status=previous.value, to_status=decision.value)
        return updated

    async def get_leave_request(self, request_id: int) -> LeaveRequest:
        return await self.gateway.get(TABLE, request_id, options=RECORD_OPTIONS, label="Leave request")

    async def list_leave_requests(
        self,
        employee_id: Optional[int] = None,
        status: Optional[LeaveStatus] = None,
        search: Optional[str] = None,
    ) -> List[LeaveRequest]:
        conditions = []
        if employee_id:
            conditions.append(LeaveRequest.employee_id == employee_id)
        if status:
            conditions.append(LeaveRequest.status == status)

        requests = await self.gateway.select_many(
            TABLE,
            *conditions,
            order_by=(LeaveRequest.created_at.desc(), LeaveRequest.id.desc()),
            options=RECORD_OPTIONS,
        )
        if search:
            requests = filter_by_free_text(requests, search, SEARCH_FIELDS)
        return requests
