"""Tests for the root document and the not-found fallback."""

from pathlib import Path

import pytest

from brochure.errors import NotFound
from brochure.http.headers import Headers
from brochure.http.request import Request
from brochure.middleware.static import AssetRoot, RootDocument, not_found
from brochure.testing import TestClient


def _get(path: str) -> Request:
    return Request(method="GET", path=path, headers=Headers())


class TestNotFoundTerminal:
    async def test_raises(self) -> None:
        with pytest.raises(NotFound) as info:
            await not_found(_get("/x"))
        assert info.value.status == 404


class TestNotFoundPage:
    async def test_custom_page(self, site, public_dir: Path) -> None:
        async with TestClient(site) as client:
            response = await client.get("/does-not-exist")
        assert response.status == 404
        assert response.text == (public_dir / "404.html").read_text()
        assert "text/html" in response.content_type

    async def test_plain_text_when_page_missing(self, site, public_dir: Path) -> None:
        (public_dir / "404.html").unlink()
        async with TestClient(site) as client:
            response = await client.get("/does-not-exist")
        assert response.status == 404
        assert response.text == "404 Not Found"
        assert response.content_type.startswith("text/plain")

    async def test_custom_document_name(self, make_site, public_dir: Path) -> None:
        (public_dir / "missing.html").write_text("<p>custom</p>")
        site = make_site(not_found_document="missing.html")
        async with TestClient(site) as client:
            response = await client.get("/nope")
        assert response.status == 404
        assert response.text == "<p>custom</p>"

    async def test_missing_svg_still_html(self, site) -> None:
        async with TestClient(site) as client:
            response = await client.get("/missing.svg")
        assert response.status == 404
        assert "text/html" in response.content_type


class TestRootDocument:
    async def test_serves_index_when_inner_falls_through(self, public_dir: Path) -> None:
        stage = RootDocument(AssetRoot(public_dir))
        response = await stage(_get("/"), not_found)
        assert response.status == 200
        assert response.path == public_dir / "index.html"

    async def test_other_paths_pass_through(self, public_dir: Path) -> None:
        stage = RootDocument(AssetRoot(public_dir))
        with pytest.raises(NotFound):
            await stage(_get("/about.html"), not_found)

    async def test_missing_index_passes_through(self, tmp_path: Path) -> None:
        stage = RootDocument(AssetRoot(tmp_path))
        with pytest.raises(NotFound):
            await stage(_get("/"), not_found)

    async def test_missing_index_is_404(self, make_site, public_dir: Path) -> None:
        (public_dir / "index.html").unlink()
        site = make_site()
        async with TestClient(site) as client:
            response = await client.get("/")
        assert response.status == 404
        assert response.header("cache-control") == "no-store, max-age=0"
