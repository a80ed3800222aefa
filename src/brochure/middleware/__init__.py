"""Pipeline stages — Protocol-based, no inheritance required.

A stage is any callable matching:
    async def stage(request: Request, next: Next) -> AnyResponse

Built-in stages:
    TrustedProxy -- Client address and scheme from X-Forwarded-* (one hop)
    AccessLog -- Development request log
    Compression -- gzip/deflate response bodies
    SecurityHeaders -- Baseline protective headers
    ContentSecurityPolicy -- Policy header rendered from a directive table
    StrictTransportSecurity -- HSTS (production)
    MimeOverrides -- Registered media types for selected suffixes
    CanonicalHost -- www. to apex redirect
    AssetCaching / HTMLFreshness -- Cache-Control policy
    StaticFiles / RootDocument / NotFoundPage -- Serving from the asset root
"""

from brochure.middleware.access_log import AccessLog
from brochure.middleware.cache_control import AssetCaching, HTMLFreshness
from brochure.middleware.canonical_host import CanonicalHost
from brochure.middleware.compression import Compression
from brochure.middleware.csp import ContentSecurityPolicy, build_policy
from brochure.middleware.mime import MimeOverrides
from brochure.middleware.protocol import AnyResponse, HeaderPolicy, Middleware, Next
from brochure.middleware.proxy import TrustedProxy
from brochure.middleware.security_headers import (
    SecurityHeaders,
    SecurityHeadersConfig,
    StrictTransportSecurity,
)
from brochure.middleware.static import AssetRoot, NotFoundPage, RootDocument, StaticFiles

__all__ = [
    "AccessLog",
    "AnyResponse",
    "AssetCaching",
    "AssetRoot",
    "CanonicalHost",
    "Compression",
    "ContentSecurityPolicy",
    "HTMLFreshness",
    "HeaderPolicy",
    "Middleware",
    "MimeOverrides",
    "Next",
    "NotFoundPage",
    "RootDocument",
    "SecurityHeaders",
    "SecurityHeadersConfig",
    "StaticFiles",
    "StrictTransportSecurity",
    "TrustedProxy",
    "build_policy",
]
