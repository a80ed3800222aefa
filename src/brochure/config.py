"""Site configuration.

SiteConfig is a frozen dataclass — resolved once at startup, immutable after
creation, passed explicitly into every pipeline stage. Nothing reads the
process environment at request time.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType

from brochure.errors import ConfigurationError

THIRTY_DAYS = 60 * 60 * 24 * 30

# Content-Security-Policy directives, in header order
DEFAULT_CSP_DIRECTIVES: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "default-src": ("'self'",),
        "script-src": ("'self'", "'unsafe-inline'", "https://www.googletagmanager.com"),
        "style-src": ("'self'", "'unsafe-inline'", "https://cdn.jsdelivr.net"),
        "img-src": ("'self'", "data:", "https://www.pin.ca"),
        "font-src": ("'self'", "https://cdn.jsdelivr.net"),
        "connect-src": (
            "'self'",
            "https://www.google-analytics.com",
            "https://region1.google-analytics.com",
        ),
        "frame-src": ("'self'",),
        "object-src": ("'none'",),
        "base-uri": ("'self'",),
        "form-action": ("'self'",),
        "upgrade-insecure-requests": (),
    }
)

DEFAULT_MIME_OVERRIDES: Mapping[str, str] = MappingProxyType(
    {
        ".webmanifest": "application/manifest+json",
        ".svg": "image/svg+xml",
        ".webp": "image/webp",
    }
)

_TRUTHY = frozenset({"1", "true", "yes", "on"})

LOG_LEVELS = ("debug", "info", "warning", "error", "critical")
TRACEBACK_STYLES = ("compact", "full", "minimal")

_DEFAULT_HOST = "0.0.0.0"
_DEFAULT_PORT = 3000
_DEFAULT_ASSET_ROOT = "public"


@dataclass(frozen=True, slots=True)
class SiteConfig:
    """Site configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = SiteConfig(asset_root="dist", production=True)

    Or resolve everything from the environment once at startup::

        config = SiteConfig.from_env()
    """

    # Server
    host: str = _DEFAULT_HOST
    port: int = _DEFAULT_PORT
    production: bool = False

    # Asset root
    asset_root: str | Path = _DEFAULT_ASSET_ROOT
    index_document: str = "index.html"
    not_found_document: str = "404.html"

    # Policy table for Content-Security-Policy
    csp_directives: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: DEFAULT_CSP_DIRECTIVES
    )

    # HSTS (production only)
    hsts_max_age: int = THIRTY_DAYS
    hsts_include_subdomains: bool = True
    hsts_preload: bool = False

    # Caching
    asset_max_age: int = THIRTY_DAYS

    # Content-Type overrides by path suffix
    mime_overrides: Mapping[str, str] = field(default_factory=lambda: DEFAULT_MIME_OVERRIDES)

    # Reverse proxy
    trusted_proxy_hops: int = 1

    # Compression
    compression_threshold: int = 1024
    compression_level: int = 6

    # Static file streaming
    chunk_size: int = 64 * 1024

    # Logging
    log_level: str = "info"
    traceback_style: str = "compact"

    @property
    def asset_path(self) -> Path:
        """The asset root as an absolute, symlink-free path."""
        return Path(self.asset_root).resolve()

    @property
    def access_log(self) -> bool:
        """Per-request access lines are emitted outside production."""
        return not self.production

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "SiteConfig":
        """Resolve configuration from environment variables.

        ``PORT`` (default 3000), ``HOST``, ``APP_ENV`` (``production``
        toggles production mode), ``ASSET_ROOT``, ``LOG_LEVEL`` and
        ``BROCHURE_TRACEBACK``.

        Raises:
            ConfigurationError: If ``PORT`` is not a valid port number, or
                ``LOG_LEVEL`` or ``BROCHURE_TRACEBACK`` names an unknown value.
        """
        env = os.environ if environ is None else environ

        raw_port = env.get("PORT", "").strip()
        port = _DEFAULT_PORT
        if raw_port:
            try:
                port = int(raw_port)
            except ValueError:
                msg = f"PORT must be an integer, got {raw_port!r}"
                raise ConfigurationError(msg) from None
            if not 0 < port < 65536:
                msg = f"PORT out of range: {port}"
                raise ConfigurationError(msg)

        app_env = env.get("APP_ENV", "").strip().lower()
        production = app_env == "production" or env.get("PRODUCTION", "").lower() in _TRUTHY

        log_level = _choice(env, "LOG_LEVEL", LOG_LEVELS, "info")
        traceback_style = _choice(env, "BROCHURE_TRACEBACK", TRACEBACK_STYLES, "compact")

        return cls(
            host=env.get("HOST", _DEFAULT_HOST),
            port=port,
            production=production,
            asset_root=env.get("ASSET_ROOT", _DEFAULT_ASSET_ROOT),
            log_level=log_level,
            traceback_style=traceback_style,
        )

    def validate(self) -> None:
        """Check the filesystem contract.

        Raises:
            ConfigurationError: If the asset root is not a directory.
        """
        root = self.asset_path
        if not root.is_dir():
            msg = f"Asset root {str(root)!r} is not a directory"
            raise ConfigurationError(msg)


def _choice(env: Mapping[str, str], name: str, allowed: tuple[str, ...], default: str) -> str:
    value = env.get(name, "").strip().lower() or default
    if value not in allowed:
        msg = f"{name} must be one of {', '.join(allowed)}; got {value!r}"
        raise ConfigurationError(msg)
    return value
