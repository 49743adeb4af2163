from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from typing import Any, Dict, List, Optional
from datetime import date, datetime

from app.models.shared.enums import PayrollStatus, PaymentMethod
from app.services.hr.payroll_calculator import breakdown_for_record
from app.utils.period import format_period, parse_period, validate_period

class GrossComponents(BaseModel):
    base_salary: int = 0
    over_salary: int = 0
    displacement_allowance: int = 0
    transport_allowance: int = 0

class DeductionComponents(BaseModel):
    income_tax: int = 0
    pension_contribution: int = 0
    minimum_tax_levy: int = 0

class PayrollPeriod(BaseModel):
    year: int
    month: int

    @model_validator(mode="before")
    @classmethod
    def parse_label(cls, value: Any) -> Any:
        if isinstance(value, str):
            year, month = parse_period(value)
            return {"year": year, "month": month}
        return value

    @model_validator(mode="after")
    def check_range(self):
        validate_period(self.year, self.month)
        return self

    @property
    def label(self) -> str:
        return format_period(self.year, self.month)

class PayrollRecordCreate(BaseModel):
    employee_id: int
    period: PayrollPeriod
    gross: GrossComponents = GrossComponents()
    deductions: DeductionComponents = DeductionComponents()

class PayrollRecordUpdate(BaseModel):
    """Direct edits, allowed only before validation"""
    period: Optional[PayrollPeriod] = None
    base_salary: Optional[int] = None
    over_salary: Optional[int] = None
    displacement_allowance: Optional[int] = None
    transport_allowance: Optional[int] = None
    income_tax: Optional[int] = None
    pension_contribution: Optional[int] = None
    minimum_tax_levy: Optional[int] = None
    expected_version: Optional[int] = None

    def changes(self) -> Dict[str, Any]:
        data = self.model_dump(exclude_unset=True, exclude={"period", "expected_version"})
        data = {key: value for key, value in data.items() if value is not None}
        if self.period is not None:
            data["period_year"] = self.period.year
            data["period_month"] = self.period.month
        return data

class PayrollTransitionRequest(BaseModel):
    target_status: PayrollStatus
    payment_method: Optional[PaymentMethod] = None
    payment_date: Optional[date] = None
    payment_reference: Optional[str] = None
    expected_version: Optional[int] = None

    @field_validator("target_status", mode="before")
    @classmethod
    def parse_status(cls, v):
        return PayrollStatus(v) if isinstance(v, str) else v

    @field_validator("payment_method", mode="before")
    @classmethod
    def parse_method(cls, v):
        # "Virement", "Espèces", "Mobile Money" come straight from the payment form
        return PaymentMethod(v) if isinstance(v, str) and v else v

class EmployeeInfo(BaseModel):
    id: int
    employee_code: str
    first_name: str
    last_name: str

    model_config = ConfigDict(from_attributes=True)

class EmployeeProfileInfo(BaseModel):
    convention: Optional[str] = None
    contract_status: Optional[str] = None
    qualification: Optional[str] = None
    tax_parts: Optional[int] = None
    birth_date: Optional[date] = None
    employer_name: Optional[str] = None
    site: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

class PayrollRecordResponse(BaseModel):
    id: int
    employee_id: int
    employee: Optional[EmployeeInfo] = None
    period_year: int
    period_month: int
    base_salary: int
    over_salary: int
    displacement_allowance: int
    transport_allowance: int
    income_tax: int
    pension_contribution: int
    minimum_tax_levy: int
    gross_total: int = 0
    total_deductions: int = 0
    net_payable: int = 0
    status: PayrollStatus
    payment_method: Optional[PaymentMethod] = None
    payment_date: Optional[date] = None
    payment_reference: Optional[str] = None
    validated_by: Optional[int] = None
    validated_at: Optional[datetime] = None
    paid_by: Optional[int] = None
    version: int
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @model_validator(mode="after")
    def recompute_totals(self):
        # Totals always come from the components, never from stored columns
        breakdown = breakdown_for_record(self)
        self.gross_total = breakdown.gross_total
        self.total_deductions = breakdown.total_deductions
        self.net_payable = breakdown.net_payable
        return self

    @property
    def period_label(self) -> str:
        return format_period(self.period_year, self.period_month)

class PayrollRecordDetail(PayrollRecordResponse):
    """Record plus the contract details printed on a payslip"""
    employee_profile: Optional[EmployeeProfileInfo] = None

class PayrollRunEntry(BaseModel):
    employee_id: int
    gross: GrossComponents = GrossComponents()
    deductions: DeductionComponents = DeductionComponents()

class PayrollRunRequest(BaseModel):
    """A pay run for one period; employees without an entry start at zero"""
    period: PayrollPeriod
    entries: List[PayrollRunEntry] = []

class PayrollRunFailure(BaseModel):
    employee_id: int
    error: str

class PayrollRunResponse(BaseModel):
    period_year: int
    period_month: int
    created: List[PayrollRecordResponse] = []
    skipped_employee_ids: List[int] = []
    failed: List[PayrollRunFailure] = []
    total_gross: int = 0
    total_net_payable: int = 0

class PayrollSummaryResponse(BaseModel):
    period_year: Optional[int] = None
    period_month: Optional[int] = None
    currency: str
    record_count: int
    total_net_payable: int
    net_payable_by_status: Dict[PayrollStatus, int]
    count_by_status: Dict[PayrollStatus, int]
