"""Cache-Control policy — long-lived assets, never-cached HTML.

Two stages cooperate. ``HTMLFreshness`` sits inside ``AssetCaching`` in
the pipeline, so on the way out the HTML rule is written first and the
asset rule only fills in paths the HTML rule left alone.
"""

from brochure.http.request import Request
from brochure.middleware.protocol import AnyResponse, Next

NO_STORE = "no-store, max-age=0"


def immutable(max_age: int) -> str:
    return f"public, max-age={max_age}, immutable"


def is_html_path(path: str) -> bool:
    """``/`` and any path ending in ``.html``."""
    return path == "/" or path.endswith(".html")


class AssetCaching:
    """Long-lived immutable caching for every path not ending in ``.html``.

    Decided on the path alone, before anything is known about the file:
    a 404 for ``/missing.css`` carries the header too.
    """

    __slots__ = ("value",)

    def __init__(self, max_age: int) -> None:
        self.value = immutable(max_age)

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        response = await next(request)
        if request.path.endswith(".html"):
            return response
        return response.with_default_header("Cache-Control", self.value)


class HTMLFreshness:
    """``no-store`` for HTML documents, whether served or fallen back."""

    __slots__ = ()

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        response = await next(request)
        if is_html_path(request.path):
            return response.with_header("Cache-Control", NO_STORE)
        return response
