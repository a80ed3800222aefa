"""Content-Security-Policy — rendered once from the policy table."""

from collections.abc import Mapping

from brochure.errors import ConfigurationError
from brochure.http.request import Request
from brochure.middleware.protocol import AnyResponse, Next


def build_policy(directives: Mapping[str, tuple[str, ...]]) -> str:
    """Join a ``{directive: sources}`` table into a header value.

    Directives keep their table order and are separated by ``"; "``;
    sources are separated by single spaces. A directive with no sources
    (``upgrade-insecure-requests``) renders as its bare name::

        >>> build_policy({"default-src": ("'self'",), "upgrade-insecure-requests": ()})
        "default-src 'self'; upgrade-insecure-requests"

    Raises:
        ConfigurationError: If the table is empty, or a name or source
            contains characters that would break the header grammar.
    """
    if not directives:
        msg = "Content-Security-Policy needs at least one directive"
        raise ConfigurationError(msg)

    rendered: list[str] = []
    for name, sources in directives.items():
        for token in (name, *sources):
            if not token or any(ch in token for ch in ";,\r\n "):
                msg = f"Invalid Content-Security-Policy token {token!r} in {name!r}"
                raise ConfigurationError(msg)
        rendered.append(" ".join((name, *sources)))
    return "; ".join(rendered)


class ContentSecurityPolicy:
    """Attach the pre-rendered policy to every response, unconditionally."""

    __slots__ = ("policy",)

    def __init__(self, directives: Mapping[str, tuple[str, ...]]) -> None:
        self.policy = build_policy(directives)

    def apply(self, response: AnyResponse) -> AnyResponse:
        return response.with_header("Content-Security-Policy", self.policy)

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        return self.apply(await next(request))
