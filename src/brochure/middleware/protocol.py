"""Stage protocol and Next type alias.

A pipeline stage is any callable matching::

    async def stage(request: Request, next: Next) -> AnyResponse: ...

A stage either returns without calling ``next`` (it terminates the
request) or calls ``next`` exactly once and may transform the response
it gets back (it passes through).

Header-policy stages also expose ``apply(response)``, a pure function
of the response. The error fallback uses it to give a 500 the same
protective headers as every other response.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol, TypeAlias, runtime_checkable

from brochure.http.request import Request
from brochure.http.response import FileResponse, Response, StreamingResponse

# Any response type the pipeline can produce
AnyResponse: TypeAlias = Response | FileResponse | StreamingResponse

# The rest of the pipeline, as seen from one stage
Next: TypeAlias = Callable[[Request], Awaitable[AnyResponse]]


class Middleware(Protocol):
    """Protocol for pipeline stages.

    Accepts both functions and callable objects::

        async def timing(request: Request, next: Next) -> AnyResponse:
            start = time.monotonic()
            response = await next(request)
            return response.with_header("X-Time", f"{time.monotonic() - start:.3f}")
    """

    async def __call__(self, request: Request, next: Next) -> AnyResponse: ...


@runtime_checkable
class HeaderPolicy(Protocol):
    """A stage whose only effect is a fixed set of response headers."""

    def apply(self, response: AnyResponse) -> AnyResponse: ...
