"""Brochure — serve a static marketing site over ASGI.

Fixed HTML/CSS/image/script assets from one directory, with security
headers, compression, canonical-host redirection and a cache-control
policy.

Basic usage::

    from brochure import Site, SiteConfig

    site = Site(SiteConfig.from_env())
    site.run()
"""

__version__ = "0.1.0"
__all__ = [
    "BrochureError",
    "ConfigurationError",
    "HTTPError",
    "NotFound",
    "Pipeline",
    "Request",
    "Response",
    "Site",
    "SiteConfig",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import brochure`` fast while providing a clean top-level API.
    """
    if name == "Site":
        from brochure.app import Site

        return Site

    if name == "SiteConfig":
        from brochure.config import SiteConfig

        return SiteConfig

    if name == "Pipeline":
        from brochure.pipeline import Pipeline

        return Pipeline

    if name == "Request":
        from brochure.http.request import Request

        return Request

    if name == "Response":
        from brochure.http.response import Response

        return Response

    if name in ("BrochureError", "ConfigurationError", "HTTPError", "NotFound"):
        from brochure import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
