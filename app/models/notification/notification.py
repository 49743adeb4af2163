from sqlalchemy import Column, Integer, String, Boolean, Text, ForeignKey
from app.db.base import BaseModel

class Notification(BaseModel):
    __tablename__ = 'notifications'
    
    user_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)  # Recipient
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    notification_type = Column(String(50))  # LEAVE_REQUEST, PAYROLL, SYSTEM
    related_id = Column(Integer)  # ID of the record the notification is about
    is_read = Column(Boolean, default=False, nullable=False)
