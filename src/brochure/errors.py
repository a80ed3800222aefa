"""Brochure exception hierarchy.

Shared across the pipeline stages and the request handler so every
module raises and catches the same types.
"""

from dataclasses import dataclass


class BrochureError(Exception):
    """Base for all brochure-specific errors."""


class ConfigurationError(BrochureError):
    """Raised when site configuration is invalid.

    Surfaces at startup (``SiteConfig.from_env()`` or the lifespan startup),
    never while serving requests.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(BrochureError):
    """An error that maps directly to an HTTP status code."""

    status: int
    detail: str = ""

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404 — no file in the asset root matched the request path.

    Expected, not a fault: the not-found stage turns it into the
    custom 404 page or a plain-text fallback.
    """

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)
