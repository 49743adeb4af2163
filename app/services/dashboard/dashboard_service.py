import logging
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.models.shared.enums import PayrollStatus
from app.schemas.hr.payroll_schema import PayrollSummaryResponse
from app.services.dashboard.aggregation import count_by_status, sum_net_payable_by_status
from app.services.hr.payroll_service import PayrollService

logger = logging.getLogger(__name__)

class DashboardService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.payroll = PayrollService(session)

    async def get_payroll_summary(self, year: Optional[int] = None, month: Optional[int] = None) -> PayrollSummaryResponse:
        """Net payable and record counts per payroll status"""
        try:
            records = await self.payroll.list_payroll_records(year=year, month=month)

            net_by_status = sum_net_payable_by_status(records)
            counts = count_by_status(records, statuses=list(PayrollStatus))

            return PayrollSummaryResponse(
                period_year=year,
                period_month=month,
                currency=settings.CURRENCY_CODE,
                record_count=len(records),
                total_net_payable=sum(net_by_status.values()),
                net_payable_by_status=net_by_status,
                count_by_status=counts,
            )

        except Exception as e:
            logger.error(f"Error building payroll summary: {str(e)}")
            raise
