import logging
from typing import Any

audit_logger = logging.getLogger("app.audit")

def log_user_action(user_id: Any, action: str, entity: str, entity_id: Any = None, **details: Any):
    """Log user actions for audit trail"""
    extra = " ".join(f"{key}={value}" for key, value in details.items())
    audit_logger.info(f"User {user_id} performed {action} on {entity} {entity_id or ''} {extra}".rstrip())
