"""
Payroll arithmetic.

All amounts are whole units of the payroll currency (XOF has no minor unit),
so the totals are plain integer sums and never need rounding.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict

from app.core.config import settings
from app.core.exceptions import InvalidAmountError, NegativeNetPayableError

GROSS_FIELDS = ("base_salary", "over_salary", "displacement_allowance", "transport_allowance")
DEDUCTION_FIELDS = ("income_tax", "pension_contribution", "minimum_tax_levy")


@dataclass(frozen=True)
class PayrollBreakdown:
    gross_total: int
    total_deductions: int
    net_payable: int

    def as_dict(self) -> Dict[str, int]:
        return {
            "gross_total": self.gross_total,
            "total_deductions": self.total_deductions,
            "net_payable": self.net_payable,
        }


def _component(components: Any, field: str) -> Any:
    if isinstance(components, dict):
        return components.get(field, 0)
    return getattr(components, field, 0)


def validate_amount(field: str, amount: Any) -> int:
    """Return the amount as int, rejecting negatives and fractional values"""
    if amount is None:
        return 0
    if isinstance(amount, bool):
        raise InvalidAmountError(field, amount)
    if isinstance(amount, int):
        value = amount
    elif isinstance(amount, (float, Decimal)) and amount == int(amount):
        value = int(amount)
    else:
        raise InvalidAmountError(field, amount)
    if value < 0:
        raise InvalidAmountError(field, amount)
    return value


def _sum_components(components: Any, fields) -> int:
    return sum(validate_amount(field, _component(components, field)) for field in fields)


def compute_gross_total(components: Any) -> int:
    """Base salary + over-salary + displacement allowance + transport allowance"""
    return _sum_components(components, GROSS_FIELDS)


def compute_deduction_total(components: Any) -> int:
    """Income-tax withholding + pension contribution + minimum-tax levy"""
    return _sum_components(components, DEDUCTION_FIELDS)


def compute_net_payable(gross: int, deductions: int, allow_negative: bool = None) -> int:
    if allow_negative is None:
        allow_negative = settings.ALLOW_NEGATIVE_NET_PAYABLE
    net = validate_amount("gross_total", gross) - validate_amount("total_deductions", deductions)
    if net < 0 and not allow_negative:
        raise NegativeNetPayableError(gross, deductions)
    return net


def compute_breakdown(gross_components: Any, deduction_components: Any, allow_negative: bool = None) -> PayrollBreakdown:
    gross = compute_gross_total(gross_components)
    deductions = compute_deduction_total(deduction_components)
    return PayrollBreakdown(
        gross_total=gross,
        total_deductions=deductions,
        net_payable=compute_net_payable(gross, deductions, allow_negative),
    )


def breakdown_for_record(record: Any, allow_negative: bool = True) -> PayrollBreakdown:
    """Recompute totals from a record's stored components (flat attributes)"""
    return compute_breakdown(record, record, allow_negative=allow_negative)
