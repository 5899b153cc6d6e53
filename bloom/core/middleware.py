"""
Request middleware: per-request log context for the member and funnel APIs
"""
import re
import time
import uuid
from typing import Any, Callable, Dict

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from bloom.core.auth import SESSION_COOKIE
from bloom.core.logging_config import LoggingConfig

logger = LoggingConfig.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Probes and scrapes are logged at debug so they do not drown member traffic
QUIET_PATHS = ("/health", "/metrics")

_LEAD_PATH = re.compile(r"^/api/(?:funnel/)?leads/(\d+)")
_COACHING_SESSION_PATH = re.compile(r"^/api/coaching/sessions/([0-9a-fA-F-]{36})")
_COACHING_MODULE_PATH = re.compile(r"^/api/coaching/modules/([^/]+)/components/([^/]+)")


def route_context(path: str) -> Dict[str, Any]:
    """Log fields derived from the path: API area plus lead, module and session ids"""
    context: Dict[str, Any] = {}
    parts = path.strip("/").split("/")
    if len(parts) >= 2 and parts[0] == "api":
        context["api_area"] = parts[1]

    match = _LEAD_PATH.match(path)
    if match:
        context["lead_id"] = int(match.group(1))
    match = _COACHING_SESSION_PATH.match(path)
    if match:
        context["coaching_session_id"] = match.group(1)
    match = _COACHING_MODULE_PATH.match(path)
    if match:
        context["module_id"] = match.group(1)
        context["component_id"] = match.group(2)
    return context


def _has_credentials(request: Request) -> bool:
    authorization = request.headers.get("authorization", "")
    return authorization.lower().startswith("bearer ") or SESSION_COOKIE in request.cookies


class LoggingContextMiddleware(BaseHTTPMiddleware):
    """Tags every log line of a request and echoes the request id"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        path = request.url.path
        log = logger.debug if path.startswith(QUIET_PATHS) else logger.info

        LoggingConfig.set_context(
            request_id=request_id,
            method=request.method,
            path=path,
            authenticated=_has_credentials(request),
            **route_context(path),
        )

        start_time = time.time()
        log("Request started", extra={"query_params": str(request.query_params)})

        try:
            response = await call_next(request)
            duration_ms = int((time.time() - start_time) * 1000)
            if response.status_code >= 500:
                log = logger.warning
            log("Request completed", extra={"status_code": response.status_code, "duration_ms": duration_ms})
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        except Exception as e:
            logger.error(
                "Request failed",
                exc_info=True,
                extra={
                    "error_type": type(e).__name__,
                    "duration_ms": int((time.time() - start_time) * 1000),
                }
            )
            raise
        finally:
            LoggingConfig.clear_context()
