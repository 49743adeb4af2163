from sqlalchemy import Column, Integer, Text, ForeignKey, Enum as SQLEnum, Date, DateTime
from sqlalchemy.orm import relationship
from app.db.base import VersionedModel
from app.models.shared.enums import LeaveType, LeaveStatus

class LeaveRequest(VersionedModel):
    __tablename__ = 'leave_requests'
    
    employee_id = Column(Integer, ForeignKey('employees.id'), nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    leave_type = Column(SQLEnum(LeaveType), nullable=False)
    reason = Column(Text)
    status = Column(SQLEnum(LeaveStatus), nullable=False, default=LeaveStatus.PENDING, index=True)
    reviewed_by = Column(Integer, nullable=True)  # User ID of the reviewer
    review_comment = Column(Text)
    reviewed_at = Column(DateTime(timezone=True))
    
    # Relationships
    employee = relationship("Employee", back_populates="leave_requests")

    @property
    def duration_days(self) -> int:
        return (self.end_date - self.start_date).days + 1
