"""End-to-end behaviour of the assembled pipeline."""

from pathlib import Path

import pytest

from brochure.config import SiteConfig
from brochure.middleware import (
    AccessLog,
    AssetCaching,
    CanonicalHost,
    Compression,
    ContentSecurityPolicy,
    HTMLFreshness,
    MimeOverrides,
    NotFoundPage,
    RootDocument,
    SecurityHeaders,
    StaticFiles,
    StrictTransportSecurity,
    TrustedProxy,
)
from brochure.middleware.static import AssetRoot
from brochure.pipeline import Pipeline, build_stages
from brochure.testing import TestClient

IMMUTABLE = "public, max-age=2592000, immutable"
NO_STORE = "no-store, max-age=0"


def _stage_types(config: SiteConfig, public_dir: Path) -> list[type]:
    return [type(stage) for stage in build_stages(config, AssetRoot(public_dir))]


class TestStageOrder:
    def test_development(self, public_dir: Path) -> None:
        assert _stage_types(SiteConfig(asset_root=public_dir), public_dir) == [
            TrustedProxy,
            AccessLog,
            Compression,
            SecurityHeaders,
            ContentSecurityPolicy,
            MimeOverrides,
            CanonicalHost,
            AssetCaching,
            HTMLFreshness,
            NotFoundPage,
            StaticFiles,
            RootDocument,
        ]

    def test_production(self, public_dir: Path) -> None:
        types = _stage_types(SiteConfig(asset_root=public_dir, production=True), public_dir)
        assert AccessLog not in types
        assert types.index(StrictTransportSecurity) == types.index(ContentSecurityPolicy) + 1

    def test_header_policies(self, public_dir: Path) -> None:
        pipeline = Pipeline.from_config(SiteConfig(asset_root=public_dir, production=True))
        assert [type(p) for p in pipeline.header_policies] == [
            SecurityHeaders,
            ContentSecurityPolicy,
            StrictTransportSecurity,
        ]


class TestCachePolicy:
    @pytest.mark.parametrize("path", ["/style.css", "/images/logo.png", "/icon.svg", "/about"])
    async def test_static_assets_immutable(self, site, path: str) -> None:
        async with TestClient(site) as client:
            response = await client.get(path)
        assert response.status == 200
        assert response.header("cache-control") == IMMUTABLE

    @pytest.mark.parametrize("path", ["/", "/about.html", "/pages/pricing.html"])
    async def test_html_no_store(self, site, path: str) -> None:
        async with TestClient(site) as client:
            response = await client.get(path)
        assert response.status == 200
        assert response.header("cache-control") == NO_STORE

    async def test_missing_asset_still_immutable(self, site) -> None:
        async with TestClient(site) as client:
            response = await client.get("/does-not-exist")
        assert response.status == 404
        assert response.header("cache-control") == IMMUTABLE

    async def test_missing_html_no_store(self, site) -> None:
        async with TestClient(site) as client:
            response = await client.get("/gone.html")
        assert response.status == 404
        assert response.header("cache-control") == NO_STORE


class TestSiteBehaviour:
    async def test_root_serves_index(self, site, public_dir: Path) -> None:
        async with TestClient(site) as client:
            response = await client.get("/")
        assert response.status == 200
        assert response.body_bytes == (public_dir / "index.html").read_bytes()
        assert response.content_type == "text/html; charset=utf-8"

    async def test_www_redirect_keeps_path_and_query(self, site) -> None:
        async with TestClient(site) as client:
            response = await client.get("/about?ref=ad", headers={"Host": "www.pin.ca"})
        assert response.status == 301
        assert response.header("location") == "https://pin.ca/about?ref=ad"
        assert response.header("content-security-policy")

    @pytest.mark.parametrize("path", ["/", "/style.css", "/does-not-exist"])
    async def test_every_response_has_csp(self, site, path: str) -> None:
        async with TestClient(site) as client:
            response = await client.get(path)
        policy = response.header("content-security-policy")
        assert policy
        directives = dict(part.split(" ", 1) for part in policy.split("; ") if " " in part)
        assert directives["default-src"] == "'self'"

    async def test_baseline_headers(self, site) -> None:
        async with TestClient(site) as client:
            response = await client.get("/")
        assert response.header("x-frame-options") == "SAMEORIGIN"
        assert response.header("x-content-type-options") == "nosniff"
        assert response.header("strict-transport-security") is None

    async def test_hsts_in_production(self, make_site) -> None:
        site = make_site(production=True)
        async with TestClient(site) as client:
            response = await client.get("/")
        assert response.header("strict-transport-security") == "max-age=2592000; includeSubDomains"

    async def test_post_is_not_served(self, site) -> None:
        async with TestClient(site) as client:
            response = await client.request("POST", "/about.html", body=b"x=1")
        assert response.status == 404

    async def test_head_matches_get(self, site) -> None:
        async with TestClient(site) as client:
            get = await client.get("/about.html")
            head = await client.head("/about.html")
        assert head.status == get.status
        assert head.body_bytes == b""
        assert head.header("content-length") == get.header("content-length")

    async def test_idempotent(self, site) -> None:
        async with TestClient(site) as client:
            first = await client.get("/style.css")
            second = await client.get("/style.css")
        assert first.status == second.status
        assert first.content_type == second.content_type
        assert first.headers == second.headers
        assert first.body_bytes == second.body_bytes
