"""The request pipeline — an explicit, statically ordered list of stages.

``build_stages()`` is the single place the order is decided. Outermost
first; each stage either terminates or passes through exactly once:

=====  =======================  =========================================
order  stage                    contract
=====  =======================  =========================================
1      TrustedProxy             pass through (rewrites client/scheme)
2      AccessLog                pass through (dev only; logs afterwards)
3      Compression              pass through (re-encodes the body)
4      SecurityHeaders          pass through (baseline headers)
5      ContentSecurityPolicy    pass through (policy header)
6      StrictTransportSecurity  pass through (production only)
7      MimeOverrides            pass through (fixes served content type)
8      CanonicalHost            terminates ``www.`` hosts with a 301
9      AssetCaching             pass through (immutable for non-HTML)
10     HTMLFreshness            pass through (no-store for HTML)
11     NotFoundPage             catches ``NotFound`` → 404 page
12     StaticFiles              terminates on a file hit
13     RootDocument             terminates ``/`` with the index document
--     not_found                raises ``NotFound``
=====  =======================  =========================================

``HTMLFreshness`` sits inside ``AssetCaching`` and ``NotFoundPage``
wraps static resolution, so both can act on whatever response the inner
stages settle on. Unhandled faults are handled outside the pipeline, by
the request handler.
"""

from collections.abc import Callable
from typing import Any

from brochure.config import SiteConfig
from brochure.http.request import Request
from brochure.middleware.access_log import AccessLog
from brochure.middleware.cache_control import AssetCaching, HTMLFreshness
from brochure.middleware.canonical_host import CanonicalHost
from brochure.middleware.compression import Compression
from brochure.middleware.csp import ContentSecurityPolicy
from brochure.middleware.mime import MimeOverrides
from brochure.middleware.protocol import AnyResponse, HeaderPolicy, Middleware, Next
from brochure.middleware.proxy import TrustedProxy
from brochure.middleware.security_headers import SecurityHeaders, StrictTransportSecurity
from brochure.middleware.static import (
    AssetRoot,
    NotFoundPage,
    RootDocument,
    StaticFiles,
    not_found,
)


def build_stages(config: SiteConfig, root: AssetRoot) -> tuple[Middleware, ...]:
    """Instantiate every stage for *config*, outermost first."""
    stages: list[Middleware] = [TrustedProxy(config.trusted_proxy_hops)]

    if config.access_log:
        stages.append(AccessLog())

    stages += [
        Compression(threshold=config.compression_threshold, level=config.compression_level),
        SecurityHeaders(),
        ContentSecurityPolicy(config.csp_directives),
    ]

    if config.production:
        stages.append(
            StrictTransportSecurity(
                config.hsts_max_age,
                include_subdomains=config.hsts_include_subdomains,
                preload=config.hsts_preload,
            )
        )

    stages += [
        MimeOverrides(config.mime_overrides),
        CanonicalHost(),
        AssetCaching(config.asset_max_age),
        HTMLFreshness(),
        NotFoundPage(root, config.not_found_document),
        StaticFiles(root),
        RootDocument(root),
    ]
    return tuple(stages)


class Pipeline:
    """Ordered stages compiled into one callable.

    Built once at startup; immutable and shared by every request.
    """

    __slots__ = ("_entry", "stages")

    def __init__(
        self,
        stages: tuple[Middleware, ...],
        terminal: Callable[[Request], Any] = not_found,
    ) -> None:
        self.stages = stages

        handler: Next = terminal
        for stage in reversed(stages):
            handler = _bind(stage, handler)
        self._entry = handler

    @classmethod
    def from_config(cls, config: SiteConfig) -> "Pipeline":
        root = AssetRoot(
            config.asset_path,
            index=config.index_document,
            chunk_size=config.chunk_size,
        )
        return cls(build_stages(config, root))

    async def __call__(self, request: Request) -> AnyResponse:
        return await self._entry(request)

    @property
    def header_policies(self) -> tuple[HeaderPolicy, ...]:
        """Stages that only add fixed headers, in pipeline order."""
        return tuple(stage for stage in self.stages if isinstance(stage, HeaderPolicy))

    def apply_header_policies(self, response: AnyResponse) -> AnyResponse:
        """Give a response built outside the pipeline the fixed protective headers."""
        for policy in reversed(self.header_policies):
            response = policy.apply(response)
        return response


def _bind(stage: Middleware, inner: Next) -> Next:
    async def call(request: Request) -> AnyResponse:
        return await stage(request, inner)

    return call
