from sqlalchemy import Column, Integer, String, Boolean, Text, ForeignKey, Date
from sqlalchemy.orm import relationship
from app.db.base import BaseModel

class Employee(BaseModel):
    __tablename__ = 'employees'
    
    employee_code = Column(String(20), unique=True, nullable=False, index=True)  # Matricule
    user_id = Column(Integer, ForeignKey('users.id'), nullable=True)  # Login account of the employee
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    email = Column(String(100), unique=True, nullable=False)
    phone = Column(String(20))
    hire_date = Column(Date)
    position = Column(String(100))
    address = Column(Text)
    is_active = Column(Boolean, default=True)
    
    # Relationships
    profile = relationship("EmployeeProfile", back_populates="employee", uselist=False)
    payroll_records = relationship("PayrollRecord", back_populates="employee")
    leave_requests = relationship("LeaveRequest", back_populates="employee")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self):
        return f"<Employee {self.employee_code}>"
