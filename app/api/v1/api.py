from fastapi import APIRouter
from app.api.v1.endpoints.hr import leave_requests, payroll
from app.api.v1.endpoints.notification import notifications

api_router = APIRouter()

# HR routes
api_router.include_router(payroll.router, prefix="/hr/payroll", tags=["Human Resource"])
api_router.include_router(leave_requests.router, prefix="/hr/leave", tags=["Human Resource"])

# Notification routes
api_router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])
