from sqlalchemy import Column, Integer, String, ForeignKey, Date
from sqlalchemy.orm import relationship
from app.db.base import BaseModel

class EmployeeProfile(BaseModel):
    """Contract details printed on payslips, kept apart from the payroll record"""
    __tablename__ = 'employee_profiles'

    employee_id = Column(Integer, ForeignKey('employees.id'), unique=True, nullable=False)
    convention = Column(String(150))  # Collective agreement
    contract_status = Column(String(50))  # CDI, CDD, ...
    qualification = Column(String(150))
    tax_parts = Column(Integer, default=1)  # Income-tax household parts
    birth_date = Column(Date)
    employer_name = Column(String(200))
    site = Column(String(255))

    # Relationships
    employee = relationship("Employee", back_populates="profile")
