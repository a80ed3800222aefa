"""Content-Type overrides for asset types the platform guesses badly."""

from collections.abc import Mapping

from brochure.http.request import Request
from brochure.http.response import FileResponse
from brochure.middleware.protocol import AnyResponse, Next


class MimeOverrides:
    """Force the registered media type for selected path suffixes.

    Applies only to files actually served for the path (status 200);
    a custom 404 page served for ``/missing.svg`` stays HTML.
    """

    __slots__ = ("overrides",)

    def __init__(self, overrides: Mapping[str, str]) -> None:
        self.overrides = {suffix.lower(): media for suffix, media in overrides.items()}

    def lookup(self, path: str) -> str | None:
        lowered = path.lower()
        for suffix, media in self.overrides.items():
            if lowered.endswith(suffix):
                return media
        return None

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        media = self.lookup(request.path)
        response = await next(request)
        if media is not None and isinstance(response, FileResponse) and response.status == 200:
            return response.with_content_type(media)
        return response
