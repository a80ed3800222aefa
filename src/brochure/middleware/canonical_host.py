"""Canonical host — send ``www.`` traffic to the apex domain."""

from brochure.http.request import Request
from brochure.http.response import redirect
from brochure.middleware.protocol import AnyResponse, Next

_PREFIX = "www."


def apex_location(request: Request) -> str | None:
    """The apex URL for a ``www.`` request, or None for any other host.

    A plain prefix match on the literal ``www.``: no wildcard handling,
    no subdomain depth. The scheme is always ``https``.
    """
    host = request.host
    if not host.startswith(_PREFIX):
        return None
    return f"https://{host[len(_PREFIX) :]}{request.url}"


class CanonicalHost:
    """Terminate ``www.`` requests with a permanent redirect to the apex."""

    __slots__ = ()

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        location = apex_location(request)
        if location is None:
            return await next(request)
        return redirect(location, status=301)
