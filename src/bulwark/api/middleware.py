import time
import logging
from uuid import uuid4
from fastapi import Request

logger = logging.getLogger("bulwark.api")

async def add_request_id(request: Request, call_next):
    rid = request.headers.get("x-request-id") or uuid4().hex
    request.state.request_id = rid
    response = await call_next(request)
    response.headers["x-request-id"] = rid
    return response


def _session_fields(request: Request) -> dict:
    # Set by get_current_session; absent for routes that never resolve a session.
    session = getattr(request.state, "session", None)
    if session is None:
        return {"role": None, "home_unit_id": None, "authenticated": False}
    return {
        "role": session.role.value if session.role else None,
        "home_unit_id": session.home_unit_id,
        "authenticated": session.is_authenticated,
    }


async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = None
    try:
        response = await call_next(request)
        return response
    finally:
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "request",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status": getattr(response, "status_code", "error"),
                "duration_ms": round(duration_ms, 2),
                "request_id": getattr(request.state, "request_id", None),
                **_session_fields(request),
            },
        )
