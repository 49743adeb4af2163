import pytest
from decimal import Decimal
from types import SimpleNamespace

from app.core.exceptions import ErrorCategory, InvalidAmountError, NegativeNetPayableError
from app.services.hr.payroll_calculator import (
    breakdown_for_record, compute_breakdown, compute_deduction_total,
    compute_gross_total, compute_net_payable, validate_amount,
)

GROSS = {"base_salary": 350000, "over_salary": 50000, "displacement_allowance": 25000, "transport_allowance": 0}
DEDUCTIONS = {"income_tax": 37255, "pension_contribution": 24836, "minimum_tax_levy": 3000}

class TestTotals:
    def test_gross_total_sums_all_four_components(self):
        assert compute_gross_total(GROSS) == 425000

    def test_deduction_total_sums_all_three_components(self):
        assert compute_deduction_total(DEDUCTIONS) == 65091

    def test_missing_components_count_as_zero(self):
        assert compute_gross_total({"base_salary": 100000}) == 100000
        assert compute_deduction_total({}) == 0

    def test_components_read_from_objects(self):
        record = SimpleNamespace(base_salary=200000, over_salary=0, displacement_allowance=0, transport_allowance=15000)
        assert compute_gross_total(record) == 215000

    def test_breakdown_matches_payslip(self):
        breakdown = compute_breakdown(GROSS, DEDUCTIONS)
        assert breakdown.gross_total == 425000
        assert breakdown.total_deductions == 65091
        assert breakdown.net_payable == 359909
        assert breakdown.as_dict() == {"gross_total": 425000, "total_deductions": 65091, "net_payable": 359909}

    def test_breakdown_for_flat_record(self):
        record = SimpleNamespace(**GROSS, **DEDUCTIONS)
        assert breakdown_for_record(record).net_payable == 359909

class TestNetPayable:
    def test_net_is_gross_minus_deductions(self):
        assert compute_net_payable(425000, 65091) == 359909

    def test_zero_net_is_allowed(self):
        assert compute_net_payable(3000, 3000) == 0

    def test_negative_net_rejected_by_default(self):
        with pytest.raises(NegativeNetPayableError) as exc:
            compute_net_payable(1000, 5000, allow_negative=False)
        assert exc.value.category == ErrorCategory.INVALID_DATA
        assert exc.value.status_code == 422

    def test_negative_net_allowed_when_enabled(self):
        assert compute_net_payable(1000, 5000, allow_negative=True) == -4000

class TestAmountValidation:
    @pytest.mark.parametrize("amount", [-1, -350000])
    def test_negative_component_rejected(self, amount):
        with pytest.raises(InvalidAmountError) as exc:
            compute_gross_total({**GROSS, "over_salary": amount})
        assert exc.value.context["field"] == "over_salary"

    @pytest.mark.parametrize("amount", [1500.5, Decimal("10.25"), True, "1000"])
    def test_non_integer_amounts_rejected(self, amount):
        with pytest.raises(InvalidAmountError):
            validate_amount("base_salary", amount)

    def test_whole_valued_decimal_accepted(self):
        assert validate_amount("base_salary", Decimal("350000")) == 350000

    def test_none_counts_as_zero(self):
        assert validate_amount("transport_allowance", None) == 0
