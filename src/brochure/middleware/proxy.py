"""Reverse-proxy trust — honour ``X-Forwarded-*`` from a fixed number of hops.

The site runs behind one load balancer. Its ``X-Forwarded-For`` entry
(the rightmost one) is the real client; anything further left was
written by the client and is not trusted.
"""

from brochure.http.request import Request
from brochure.middleware.protocol import AnyResponse, Next


class TrustedProxy:
    """Rewrite the request's client address and scheme from proxy headers.

    With ``hops=1`` the client is the last ``X-Forwarded-For`` address and
    the scheme is the first ``X-Forwarded-Proto`` value. Requests without
    the headers pass through unchanged. Always passes through.
    """

    __slots__ = ("hops",)

    def __init__(self, hops: int = 1) -> None:
        self.hops = hops

    def resolve(self, request: Request) -> Request:
        if self.hops <= 0:
            return request

        forwarded_for = request.headers.get_csv("x-forwarded-for")
        client_ip = None
        if forwarded_for:
            # Trusting N hops means the Nth address from the right.
            client_ip = forwarded_for[max(len(forwarded_for) - self.hops, 0)]

        protos = request.headers.get_csv("x-forwarded-proto")
        scheme = protos[0].lower() if protos else None

        if client_ip is None and scheme is None:
            return request
        return request.with_forwarded(client_ip=client_ip, scheme=scheme)

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        return await next(self.resolve(request))
