"""Immutable HTTP request.

Frozen metadata only. Static assets never read a request body, so the
ASGI ``receive`` channel stays with the handler.
"""

from dataclasses import dataclass, replace
from typing import Any

from brochure.http.headers import Headers


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Stages that need to change what the rest of the pipeline sees (the
    proxy stage rewriting the client address) build a new request with
    ``with_forwarded()`` instead of mutating this one.
    """

    method: str
    path: str
    headers: Headers
    query_string: bytes = b""
    raw_path: bytes = b""
    scheme: str = "http"
    http_version: str = "1.1"
    server: tuple[str, int] | None = None
    client: tuple[str, int] | None = None

    # -- Computed properties --

    @property
    def host(self) -> str:
        """The ``Host`` header exactly as sent, or ``""``."""
        return self.headers.get("host", "")

    @property
    def is_head(self) -> bool:
        return self.method == "HEAD"

    @property
    def client_ip(self) -> str | None:
        """Client address, after proxy trust has been applied."""
        return self.client[0] if self.client else None

    @property
    def url(self) -> str:
        """The request target: path (still percent-encoded) plus query string."""
        target = self.raw_path.decode("latin-1") if self.raw_path else self.path
        if self.query_string:
            return f"{target}?{self.query_string.decode('latin-1')}"
        return target

    # -- Transformations --

    def with_forwarded(self, *, client_ip: str | None, scheme: str | None) -> "Request":
        """Return a new request with the proxy-reported client and scheme."""
        client = self.client
        if client_ip:
            client = (client_ip, client[1] if client else 0)
        return replace(self, client=client, scheme=scheme or self.scheme)

    # -- Factory --

    @classmethod
    def from_asgi(cls, scope: dict[str, Any]) -> "Request":
        """Create a Request from an ASGI ``http`` scope."""
        server = scope.get("server")
        client = scope.get("client")
        return cls(
            method=scope["method"],
            path=scope["path"],
            headers=Headers(tuple(scope.get("headers", ()))),
            query_string=scope.get("query_string", b""),
            raw_path=scope.get("raw_path") or b"",
            scheme=scope.get("scheme", "http"),
            http_version=scope.get("http_version", "1.1"),
            server=tuple(server) if server else None,
            client=tuple(client) if client else None,
        )
