from app.models.auth.role import Role
from app.models.auth.user_role import UserRole
from app.models.auth.user import User
from app.models.hr.employee import Employee
from app.models.hr.employee_profile import EmployeeProfile
from app.models.hr.payroll_record import PayrollRecord
from app.models.hr.leave_request import LeaveRequest
from app.models.notification.notification import Notification


__all__ = [
    "Role",
    "UserRole",
    "User",
    "Employee",
    "EmployeeProfile",
    "PayrollRecord",
    "LeaveRequest",
    "Notification",
]
