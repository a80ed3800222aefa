"""Development access log — one line per request, after the response is built."""

import logging
import time

from brochure.http.request import Request
from brochure.middleware.protocol import AnyResponse, Next

logger = logging.getLogger("brochure.access")


class AccessLog:
    """Log ``METHOD URL STATUS TIME ms - LENGTH`` for every request.

    Side effect only; the response is returned untouched. A request that
    raises is logged as a 500 and the exception continues outward to the
    error fallback.

    The line is written once the pipeline has produced the response, so
    TIME covers the time to headers. File and re-encoded bodies are
    streamed afterwards by the sender; their transfer time is not
    included, and a failure while streaming shows up only in the
    ``brochure.server`` error log.
    """

    __slots__ = ()

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        start = time.perf_counter()
        try:
            response = await next(request)
        except Exception:
            _log_line(request, 500, start, None)
            raise
        _log_line(request, response.status, start, response.content_length)
        return response


def _log_line(request: Request, status: int, start: float, length: int | None) -> None:
    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.3f ms - %s",
        request.method,
        request.url,
        status,
        elapsed_ms,
        "-" if length is None else length,
    )
