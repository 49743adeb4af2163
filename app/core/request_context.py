from typing import Optional, Dict
from fastapi import Request

# Names you’ll read from headers (change to match your FE/GW)
HDR_REQUEST_ID = "X-Request-Id"
HDR_SESSION_ID = "X-Session-Id"
HDR_USER_ID = "X-User-Id"

def get_request_context(request: Request) -> Dict[str, Optional[str]]:
    """
    Extracts endpoint, client IP, user-agent, request_id, session_id and the
    acting user id from the FastAPI Request.
    - header values fall back to None when absent.
    """
    ip_address = request.client.host if request.client else None
    user_agent = request.headers.get("user-agent")
    endpoint = f"{request.method} {request.url.path}"
    return {
        "ip_address": ip_address,
        "user_agent": user_agent,
        "endpoint": endpoint,
        "request_id": request.headers.get(HDR_REQUEST_ID),
        "session_id": request.headers.get(HDR_SESSION_ID),
        "user_id": request.headers.get(HDR_USER_ID),
    }
