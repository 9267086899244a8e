from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from routers.responses import error_response
import logging
import time

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Log every request with its status and duration.

    Also the last boundary for unhandled exceptions: they are logged with
    their stack trace and answered with a generic 500, and the server keeps
    serving other requests.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("Unhandled error serving %s %s", request.method, request.url.path)
            response = error_response(500, "Internal server error")

        logger.info(
            "status=%s method=%s path=%s duration=%.2fms",
            response.status_code,
            request.method,
            request.url.path,
            (time.perf_counter() - start) * 1000,
        )
        return response
