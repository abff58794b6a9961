"""
Per-request correlation id and access logging.

Plain ASGI: the context var covers the whole downstream call, streamed
bodies and background tasks included.
"""

import re
import time
import uuid
from typing import Optional

from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from lessoncore.logging_config import get_logger, request_id_var

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Client-supplied ids end up in logs and response headers
_ACCEPTED_ID = re.compile(r"[A-Za-z0-9._-]{1,128}")


def resolve_request_id(incoming: Optional[str]) -> str:
    """Reuse a well-formed incoming id, otherwise mint a new one."""
    if incoming and _ACCEPTED_ID.fullmatch(incoming):
        return incoming
    return str(uuid.uuid4())


class RequestIdMiddleware:
    """
    Tag every HTTP request with an id and log how it went.

    The id is exposed as ``request.state.request_id``, through
    ``request_id_var`` for log records, and echoed in the response's
    X-Request-ID header. Requests slower than ``slow_request_ms`` are logged
    at WARNING, the rest at DEBUG.
    """

    def __init__(self, app: ASGIApp, slow_request_ms: float = 1000.0) -> None:
        self.app = app
        self.slow_request_ms = slow_request_ms

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = resolve_request_id(Headers(scope=scope).get(REQUEST_ID_HEADER))
        scope.setdefault("state", {})["request_id"] = request_id
        status_code = 500

        async def send_with_request_id(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                headers = MutableHeaders(scope=message)
                if REQUEST_ID_HEADER not in headers:
                    headers.append(REQUEST_ID_HEADER, request_id)
            await send(message)

        token = request_id_var.set(request_id)
        start = time.perf_counter()
        try:
            await self.app(scope, receive, send_with_request_id)
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 1)
            extra = {
                "method": scope["method"],
                "path": scope["path"],
                "status_code": status_code,
                "duration_ms": duration_ms,
            }
            if duration_ms > self.slow_request_ms:
                logger.warning("Slow request", extra=extra)
            else:
                logger.debug("Request finished", extra=extra)
            request_id_var.reset(token)
