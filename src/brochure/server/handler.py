"""ASGI handler — translates ASGI scope/messages to brochure types.

The only component that touches raw ASGI directly. Converts the scope to
an immutable Request, runs it through the pipeline, and sends the
response back through ASGI ``send()``. Also the error fallback: any
exception the pipeline lets escape becomes a plain-text 500, provided no
response bytes have gone out yet.
"""

from brochure._internal.asgi import Receive, Scope, Send
from brochure.http.request import Request
from brochure.pipeline import Pipeline
from brochure.server.errors import internal_error_response, log_error
from brochure.server.sender import send_response


async def handle_request(
    scope: Scope,
    receive: Receive,  # noqa: ARG001
    send: Send,
    *,
    pipeline: Pipeline,
    traceback_style: str = "compact",
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope)
    started = False

    async def tracked_send(message: dict) -> None:
        nonlocal started
        if message["type"] == "http.response.start":
            started = True
        await send(message)

    try:
        response = await pipeline(request)
        await send_response(response, tracked_send, include_body=not request.is_head)
    except Exception as exc:
        log_error(exc, request, style=traceback_style)
        if started:
            # Status and headers are on the wire; the connection is the
            # server's to abort.
            raise
        fallback = pipeline.apply_header_policies(internal_error_response())
        await send_response(fallback, send, include_body=not request.is_head)
