"""
Payment lifecycle of a payroll record.

    PENDING ──> VALIDATED ──> PAID
       └──────────────────────^   (only while direct payment is allowed)

PAID is terminal. Nothing moves back to PENDING.
"""
import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

from app.core.config import settings
from app.core.exceptions import InvalidTransitionError, MissingRequiredFieldError
from app.models.shared.enums import PayrollStatus, PaymentMethod

logger = logging.getLogger(__name__)

TRANSITIONS = {
    PayrollStatus.PENDING: {PayrollStatus.VALIDATED, PayrollStatus.PAID},
    PayrollStatus.VALIDATED: {PayrollStatus.PAID},
    PayrollStatus.PAID: set(),
}


class PaymentStateMachine:
    def __init__(self, allow_direct_payment: Optional[bool] = None, require_payment_date: Optional[bool] = None):
        self.allow_direct_payment = (
            settings.ALLOW_DIRECT_PENDING_TO_PAID if allow_direct_payment is None else allow_direct_payment
        )
        self.require_payment_date = (
            settings.REQUIRE_PAYMENT_DATE if require_payment_date is None else require_payment_date
        )

    def allowed_targets(self, current: PayrollStatus) -> set:
        targets = set(TRANSITIONS[PayrollStatus(current)])
        if current == PayrollStatus.PENDING and not self.allow_direct_payment:
            targets.discard(PayrollStatus.PAID)
        return targets

    def can_transition(self, current: PayrollStatus, target: PayrollStatus) -> bool:
        return PayrollStatus(target) in self.allowed_targets(current)

    def is_editable(self, current: PayrollStatus) -> bool:
        """Component amounts may only change before the first validation"""
        return PayrollStatus(current) == PayrollStatus.PENDING

    def plan(
        self,
        current: PayrollStatus,
        target: PayrollStatus,
        payment_method: Optional[PaymentMethod] = None,
        payment_date: Optional[date] = None,
        payment_reference: Optional[str] = None,
        acting_user_id: Optional[int] = None,
        today: Optional[date] = None,
    ) -> Dict[str, Any]:
        """
        Validate a status change and return the column values to write.

        Raises MissingRequiredFieldError or InvalidTransitionError; never
        touches the record itself.
        """
        current = PayrollStatus(current)
        target = PayrollStatus(target)

        if target == PayrollStatus.PAID:
            if payment_method is None:
                raise MissingRequiredFieldError("payment_method", target.value)
            if payment_date is None and self.require_payment_date:
                raise MissingRequiredFieldError("payment_date", target.value)

        if not self.can_transition(current, target):
            detail = None
            if current == PayrollStatus.PENDING and target == PayrollStatus.PAID:
                detail = "Payroll record must be validated before it can be paid"
            elif current == PayrollStatus.PAID:
                detail = "Paid payroll records are final"
            raise InvalidTransitionError(current.value, target.value, detail)

        changes: Dict[str, Any] = {"status": target, "updated_by": acting_user_id}

        if target == PayrollStatus.VALIDATED:
            if payment_method or payment_date or payment_reference:
                logger.debug("Ignoring payment fields supplied for a validation")
            changes.update(
                validated_by=acting_user_id,
                validated_at=datetime.now(timezone.utc),
                payment_method=None,
                payment_date=None,
                payment_reference=None,
            )
        elif target == PayrollStatus.PAID:
            changes.update(
                payment_method=PaymentMethod(payment_method),
                payment_date=payment_date or today or date.today(),
                payment_reference=payment_reference,
                paid_by=acting_user_id,
            )

        return changes
