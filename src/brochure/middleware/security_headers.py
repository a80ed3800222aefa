"""Security headers — the protective baseline and HSTS.

Headers are applied to every response: pages, assets, redirects and
error fallbacks alike. The content policy is not part of
the baseline; ``ContentSecurityPolicy`` owns that header.
"""

from dataclasses import dataclass

from brochure.http.request import Request
from brochure.middleware.protocol import AnyResponse, Next


@dataclass(frozen=True, slots=True)
class SecurityHeadersConfig:
    """Baseline header values. All values are applied as-is."""

    cross_origin_opener_policy: str = "same-origin"
    cross_origin_resource_policy: str = "same-origin"
    origin_agent_cluster: str = "?1"
    referrer_policy: str = "no-referrer"
    x_content_type_options: str = "nosniff"
    x_dns_prefetch_control: str = "off"
    x_download_options: str = "noopen"
    x_frame_options: str = "SAMEORIGIN"
    x_permitted_cross_domain_policies: str = "none"
    x_xss_protection: str = "0"

    def items(self) -> tuple[tuple[str, str], ...]:
        return (
            ("Cross-Origin-Opener-Policy", self.cross_origin_opener_policy),
            ("Cross-Origin-Resource-Policy", self.cross_origin_resource_policy),
            ("Origin-Agent-Cluster", self.origin_agent_cluster),
            ("Referrer-Policy", self.referrer_policy),
            ("X-Content-Type-Options", self.x_content_type_options),
            ("X-DNS-Prefetch-Control", self.x_dns_prefetch_control),
            ("X-Download-Options", self.x_download_options),
            ("X-Frame-Options", self.x_frame_options),
            ("X-Permitted-Cross-Domain-Policies", self.x_permitted_cross_domain_policies),
            ("X-XSS-Protection", self.x_xss_protection),
        )


class SecurityHeaders:
    """Add the baseline protective headers to every response.

    Usage::

        stages = (SecurityHeaders(), ...)

    Or with custom values::

        SecurityHeaders(SecurityHeadersConfig(x_frame_options="DENY"))
    """

    __slots__ = ("_items", "config")

    def __init__(self, config: SecurityHeadersConfig | None = None) -> None:
        self.config = config or SecurityHeadersConfig()
        self._items = self.config.items()

    def apply(self, response: AnyResponse) -> AnyResponse:
        for name, value in self._items:
            response = response.with_header(name, value)
        return response

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        return self.apply(await next(request))


def hsts_value(max_age: int, *, include_subdomains: bool = True, preload: bool = False) -> str:
    """Render a ``Strict-Transport-Security`` value."""
    parts = [f"max-age={max_age}"]
    if include_subdomains:
        parts.append("includeSubDomains")
    if preload:
        parts.append("preload")
    return "; ".join(parts)


class StrictTransportSecurity:
    """Set ``Strict-Transport-Security`` on every response.

    Only installed in production, where the site is reachable over HTTPS
    exclusively.
    """

    __slots__ = ("value",)

    def __init__(
        self,
        max_age: int,
        *,
        include_subdomains: bool = True,
        preload: bool = False,
    ) -> None:
        self.value = hsts_value(max_age, include_subdomains=include_subdomains, preload=preload)

    def apply(self, response: AnyResponse) -> AnyResponse:
        return response.with_header("Strict-Transport-Security", self.value)

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        return self.apply(await next(request))
