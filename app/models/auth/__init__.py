# app/models/auth/__init__.py

# Import models in dependency order
from .role import Role
from .user import User
from .user_role import UserRole

# Make sure all models are available
__all__ = [
    "Role", 
    "User",
    "UserRole"
]
