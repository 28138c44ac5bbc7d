import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from policydesk.api.deps import SESSION_USER_KEY
from policydesk.common.logging import get_logger
from policydesk.config import settings

logger = get_logger("middleware")


class RequestTimingMiddleware(BaseHTTPMiddleware):
    """Access log line per request, tagged with the session user.

    Must sit inside ``SessionMiddleware`` so ``request.session`` is populated.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - started) * 1000

        # Read after the handler so a fresh login is attributed
        user_id = request.session.get(SESSION_USER_KEY) if "session" in request.scope else None
        level = logging.WARNING if duration_ms >= settings.SLOW_REQUEST_MS else logging.INFO
        logger.log(
            level,
            "%s %s -> %d in %.1fms (user=%s)",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            user_id or "-",
        )

        response.headers["X-Request-Duration-Ms"] = f"{duration_ms:.1f}"
        return response
