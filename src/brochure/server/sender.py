"""ASGI response sending — translates brochure responses to ASGI messages.

In-memory bodies go out in a single message. Files and re-encoded
streams go out chunk by chunk with ``more_body=True`` and a closing
empty message.
"""

from brochure._internal.asgi import Send
from brochure.http.response import Response
from brochure.middleware.protocol import AnyResponse


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


def build_raw_headers(response: AnyResponse, *, body_allowed: bool) -> list[tuple[bytes, bytes]]:
    """Lower-cased header byte pairs, with ``content-length`` computed here."""
    raw_headers: list[tuple[bytes, bytes]] = [
        (b"content-type", response.content_type.encode("latin-1")),
    ]
    for name, value in response.headers:
        lowered = name.lower()
        if lowered == "content-length":
            continue
        raw_headers.append((lowered.encode("latin-1"), value.encode("latin-1")))

    length = response.content_length if body_allowed else 0
    if length is not None:
        raw_headers.append((b"content-length", str(length).encode("latin-1")))
    return raw_headers


async def send_response(response: AnyResponse, send: Send, *, include_body: bool = True) -> None:
    """Translate a response into ASGI ``send()`` calls.

    ``include_body=False`` answers HEAD: same headers, including the
    length the body would have had, but no body bytes.
    """
    body_allowed = _body_allowed(response.status)

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": build_raw_headers(response, body_allowed=body_allowed),
        }
    )

    if not (include_body and body_allowed):
        await send({"type": "http.response.body", "body": b""})
        return

    if isinstance(response, Response):
        await send({"type": "http.response.body", "body": response.body_bytes})
        return

    async for chunk in response.iter_body():
        if chunk:
            await send({"type": "http.response.body", "body": chunk, "more_body": True})
    await send({"type": "http.response.body", "body": b"", "more_body": False})
