"""HTTP responses with a chainable ``.with_*()`` transformation API.

Each transformation returns a new response. Stages modify responses on
the way out without knowing which concrete type they hold:

- ``Response`` — an in-memory body (redirects, plain-text fallbacks)
- ``FileResponse`` — a file from the asset root, streamed from disk
- ``StreamingResponse`` — an async iterator of chunks (re-encoded bodies)
"""

from collections.abc import AsyncIterator
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Self

import anyio

PLAIN_TEXT = "text/plain; charset=utf-8"


class _HeaderOps:
    """Chainable header/status operations shared by every response type.

    Header names compare case-insensitively. ``with_header`` replaces any
    existing value for the name, matching ``setHeader`` semantics.
    """

    __slots__ = ()

    status: int
    content_type: str
    headers: tuple[tuple[str, str], ...]

    def header(self, name: str, default: str | None = None) -> str | None:
        """Return the value of header *name*, or *default*."""
        lowered = name.lower()
        for key, value in self.headers:
            if key.lower() == lowered:
                return value
        return default

    def with_status(self, status: int) -> Self:
        """Return a copy with a different status code."""
        return replace(self, status=status)  # type: ignore[type-var]

    def with_header(self, name: str, value: str) -> Self:
        """Return a copy with *name* set to *value* (replacing any previous value)."""
        lowered = name.lower()
        kept = tuple((k, v) for k, v in self.headers if k.lower() != lowered)
        return replace(self, headers=(*kept, (name, value)))  # type: ignore[type-var]

    def with_default_header(self, name: str, value: str) -> Self:
        """Return a copy with *name* set only if it is not set yet."""
        if self.header(name) is not None:
            return self
        return self.with_header(name, value)

    def without_header(self, name: str) -> Self:
        """Return a copy with every *name* header removed."""
        lowered = name.lower()
        kept = tuple((k, v) for k, v in self.headers if k.lower() != lowered)
        return replace(self, headers=kept)  # type: ignore[type-var]

    def with_content_type(self, content_type: str) -> Self:
        """Return a copy with a different content type."""
        return replace(self, content_type=content_type)  # type: ignore[type-var]


@dataclass(frozen=True, slots=True)
class Response(_HeaderOps):
    """An HTTP response with an in-memory body."""

    body: str | bytes = ""
    status: int = 200
    content_type: str = "text/html; charset=utf-8"
    headers: tuple[tuple[str, str], ...] = ()

    @property
    def body_bytes(self) -> bytes:
        """Body as bytes."""
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body

    @property
    def text(self) -> str:
        """Body as string."""
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8")
        return self.body

    @property
    def content_length(self) -> int:
        return len(self.body_bytes)

    async def iter_body(self) -> AsyncIterator[bytes]:
        yield self.body_bytes


@dataclass(frozen=True, slots=True)
class FileResponse(_HeaderOps):
    """A file from the asset root.

    The body is read lazily in ``chunk_size`` pieces when the response is
    sent, so a large asset never sits in memory and other requests keep
    running while the read waits on disk.
    """

    path: Path
    size: int
    status: int = 200
    content_type: str = "application/octet-stream"
    headers: tuple[tuple[str, str], ...] = ()
    chunk_size: int = 64 * 1024

    @property
    def content_length(self) -> int:
        return self.size

    async def iter_body(self) -> AsyncIterator[bytes]:
        async with await anyio.open_file(self.path, "rb") as fh:
            while chunk := await fh.read(self.chunk_size):
                yield chunk


@dataclass(frozen=True, slots=True)
class StreamingResponse(_HeaderOps):
    """A response whose length is unknown until the last chunk.

    Sent with chunked transfer encoding; no ``Content-Length``.
    """

    chunks: AsyncIterator[bytes]
    status: int = 200
    content_type: str = "text/html; charset=utf-8"
    headers: tuple[tuple[str, str], ...] = ()

    @property
    def content_length(self) -> None:
        return None

    async def iter_body(self) -> AsyncIterator[bytes]:
        async for chunk in self.chunks:
            yield chunk


def redirect(url: str, status: int = 302) -> Response:
    """Build a redirect response pointing at *url*."""
    return Response(body="", status=status, content_type=PLAIN_TEXT).with_header("Location", url)


def plain_text(body: str, status: int = 200) -> Response:
    """Build a ``text/plain`` response."""
    return Response(body=body, status=status, content_type=PLAIN_TEXT)
