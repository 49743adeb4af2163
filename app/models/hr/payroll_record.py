from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum as SQLEnum, Date, BigInteger, UniqueConstraint
from sqlalchemy.orm import relationship
from app.db.base import VersionedModel
from app.models.shared.enums import PayrollStatus, PaymentMethod
from app.utils.period import format_period

class PayrollRecord(VersionedModel):
    __tablename__ = 'payroll_records'
    __table_args__ = (
        UniqueConstraint('employee_id', 'period_year', 'period_month', name='uq_payroll_employee_period'),
    )
    
    employee_id = Column(Integer, ForeignKey('employees.id'), nullable=False, index=True)
    period_year = Column(Integer, nullable=False)
    period_month = Column(Integer, nullable=False)

    # Gross components (whole currency units)
    base_salary = Column(BigInteger, nullable=False, default=0)
    over_salary = Column(BigInteger, nullable=False, default=0)
    displacement_allowance = Column(BigInteger, nullable=False, default=0)
    transport_allowance = Column(BigInteger, nullable=False, default=0)

    # Deduction components
    income_tax = Column(BigInteger, nullable=False, default=0)
    pension_contribution = Column(BigInteger, nullable=False, default=0)
    minimum_tax_levy = Column(BigInteger, nullable=False, default=0)

    # Derived from the components on every write
    gross_total = Column(BigInteger, nullable=False)
    total_deductions = Column(BigInteger, nullable=False)
    net_payable = Column(BigInteger, nullable=False)

    status = Column(SQLEnum(PayrollStatus), nullable=False, default=PayrollStatus.PENDING, index=True)
    payment_method = Column(SQLEnum(PaymentMethod), nullable=True)
    payment_date = Column(Date, nullable=True)
    payment_reference = Column(String(100), nullable=True)

    validated_by = Column(Integer, nullable=True)  # User ID who validated
    validated_at = Column(DateTime(timezone=True), nullable=True)
    paid_by = Column(Integer, nullable=True)  # User ID who recorded the payment
    
    # Relationships
    employee = relationship("Employee", back_populates="payroll_records")

    @property
    def period_label(self) -> str:
        return format_period(self.period_year, self.period_month)

    def __repr__(self):
        return f"<PayrollRecord {self.id} employee={self.employee_id} {self.period_label} {self.status}>"
