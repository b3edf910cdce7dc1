import time
import uuid

import structlog

REQUEST_ID_HEADER = "X-Request-ID"

logger = structlog.get_logger(__name__)


class CorrelationIdMiddleware:
    """Tag every request with a request id and log its start and outcome.

    The id comes from the ``X-Request-ID`` header or is a fresh UUID4. It is
    bound into structlog contextvars together with the method and path, so
    anything logged while the request runs carries them, and it is echoed
    back on the response.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            correlation_id=request_id,
            method=request.method,
            path=request.path,
        )
        logger.info("request.started")

        started = time.perf_counter()
        response = self.get_response(request)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)

        log = logger.warning if response.status_code >= 500 else logger.info
        log("request.finished", status_code=response.status_code, duration_ms=elapsed_ms)

        response[REQUEST_ID_HEADER] = request_id
        return response
