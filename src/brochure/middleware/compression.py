"""Response compression — gzip or deflate, negotiated from ``Accept-Encoding``.

Only the transport bytes change: status, content type and the other
headers stay as the inner stages left them. The body is re-encoded
chunk by chunk, so a compressed file is never held in memory whole.
"""

import zlib
from collections.abc import AsyncIterator

from brochure.http.request import Request
from brochure.http.response import StreamingResponse
from brochure.middleware.protocol import AnyResponse, Next

# zlib window bits per content-coding
_WBITS = {"gzip": 16 + zlib.MAX_WBITS, "deflate": zlib.MAX_WBITS}

_COMPRESSIBLE_EXACT = frozenset(
    {
        "application/javascript",
        "application/json",
        "application/manifest+json",
        "application/xml",
        "image/svg+xml",
    }
)


def is_compressible(content_type: str) -> bool:
    """Whether a media type is text-like enough to be worth compressing."""
    media = content_type.split(";", 1)[0].strip().lower()
    if media.startswith("text/") or media in _COMPRESSIBLE_EXACT:
        return True
    return media.endswith(("+json", "+xml", "/javascript", "/json", "/xml"))


def negotiate_encoding(accept: list[str]) -> str | None:
    """Pick ``gzip`` or ``deflate`` from parsed ``Accept-Encoding`` items.

    Honours q-values (``q=0`` refuses a coding) and the ``*`` wildcard.
    Prefers gzip when both are equally acceptable.
    """
    weights: dict[str, float] = {}
    for item in accept:
        coding, *params = (part.strip() for part in item.split(";"))
        q = 1.0
        for param in params:
            key, _, value = param.partition("=")
            if key.strip().lower() == "q":
                try:
                    q = float(value)
                except ValueError:
                    q = 0.0
        weights[coding.lower()] = q

    best: str | None = None
    best_q = 0.0
    for coding in ("gzip", "deflate"):
        q = weights.get(coding, weights.get("*", 0.0))
        if q > best_q:
            best, best_q = coding, q
    return best


async def _encode(chunks: AsyncIterator[bytes], coding: str, level: int) -> AsyncIterator[bytes]:
    compressor = zlib.compressobj(level, zlib.DEFLATED, _WBITS[coding])
    async for chunk in chunks:
        data = compressor.compress(chunk)
        if data:
            yield data
    yield compressor.flush()


def _add_vary(response: AnyResponse) -> AnyResponse:
    vary = response.header("Vary")
    if vary is None:
        return response.with_header("Vary", "Accept-Encoding")
    tokens = {token.strip().lower() for token in vary.split(",")}
    if "accept-encoding" in tokens or "*" in tokens:
        return response
    return response.with_header("Vary", f"{vary}, Accept-Encoding")


class Compression:
    """Compress compressible responses when the client advertises support.

    Skipped for HEAD requests, bodiless statuses, bodies below
    ``threshold`` bytes, responses already carrying ``Content-Encoding``
    and responses marked ``Cache-Control: no-transform``.
    ``Vary: Accept-Encoding`` is added to every compressible response
    so shared caches keep the encodings apart.
    """

    __slots__ = ("level", "threshold")

    def __init__(self, *, threshold: int = 1024, level: int = 6) -> None:
        self.threshold = threshold
        self.level = level

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        response = await next(request)

        if response.status < 200 or response.status in (204, 304):
            return response
        if response.header("Content-Encoding") is not None:
            return response
        if not is_compressible(response.content_type):
            return response

        response = _add_vary(response)

        if request.is_head:
            return response
        if "no-transform" in (response.header("Cache-Control") or "").lower():
            return response
        length = response.content_length
        if length is not None and length < self.threshold:
            return response

        coding = negotiate_encoding(request.headers.get_csv("accept-encoding"))
        if coding is None:
            return response

        return StreamingResponse(
            chunks=_encode(response.iter_body(), coding, self.level),
            status=response.status,
            content_type=response.content_type,
            headers=response.headers,
        ).without_header("Content-Length").with_header("Content-Encoding", coding)
