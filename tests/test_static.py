"""Tests for static file serving from the asset root."""

import os
from email.utils import formatdate
from pathlib import Path

import pytest

from brochure.middleware.static import Asset, AssetRoot, DirectoryRedirect
from brochure.testing import TestClient

# ------------------------------------------------------------------
# AssetRoot.resolve — path mapping, no HTTP
# ------------------------------------------------------------------


class TestResolve:
    def test_plain_file(self, public_dir: Path) -> None:
        found = AssetRoot(public_dir).resolve("/style.css")
        assert isinstance(found, Asset)
        assert found.path == public_dir / "style.css"
        assert found.size == (public_dir / "style.css").stat().st_size

    def test_root_is_index(self, public_dir: Path) -> None:
        found = AssetRoot(public_dir).resolve("/")
        assert isinstance(found, Asset)
        assert found.path.name == "index.html"

    def test_html_extension_fallback(self, public_dir: Path) -> None:
        found = AssetRoot(public_dir).resolve("/pages/pricing")
        assert isinstance(found, Asset)
        assert found.path == public_dir / "pages" / "pricing.html"

    def test_no_fallback_when_extension_present(self, public_dir: Path) -> None:
        (public_dir / "report.v2.html").write_text("x")
        assert AssetRoot(public_dir).resolve("/report.v2") is None

    def test_directory_without_slash_redirects(self, public_dir: Path) -> None:
        assert AssetRoot(public_dir).resolve("/pages") == DirectoryRedirect("/pages/")

    def test_directory_with_slash_serves_index(self, public_dir: Path) -> None:
        found = AssetRoot(public_dir).resolve("/pages/")
        assert isinstance(found, Asset)
        assert found.path == public_dir / "pages" / "index.html"

    def test_directory_without_index(self, public_dir: Path) -> None:
        assert AssetRoot(public_dir).resolve("/images/") is None
        assert AssetRoot(public_dir).resolve("/images") is None

    @pytest.mark.parametrize(
        "path", ["/../secret.txt", "/pages/../style.css", "/.env", "/.git/config", "/a\x00b"]
    )
    def test_unsafe_paths_not_served(self, public_dir: Path, path: str) -> None:
        (public_dir.parent / "secret.txt").write_text("s3cret")
        assert AssetRoot(public_dir).resolve(path) is None

    def test_symlink_escape_not_served(self, public_dir: Path) -> None:
        outside = public_dir.parent / "outside.txt"
        outside.write_text("nope")
        os.symlink(outside, public_dir / "link.txt")
        assert AssetRoot(public_dir).resolve("/link.txt") is None

    def test_find_document(self, public_dir: Path) -> None:
        root = AssetRoot(public_dir)
        assert root.find("404.html") is not None
        assert root.find("500.html") is None

    def test_overlong_segment_is_a_miss(self, public_dir: Path) -> None:
        root = AssetRoot(public_dir)
        assert root.resolve("/" + "a" * 300) is None
        assert root.resolve("/pages/" + "b" * 300 + ".css") is None
        assert root.find("c" * 300) is None

    def test_directory_redirect_is_percent_encoded(self, public_dir: Path) -> None:
        (public_dir / "our team").mkdir()
        (public_dir / "our team" / "index.html").write_text("<h1>Team</h1>")
        found = AssetRoot(public_dir).resolve("/our team")
        assert found == DirectoryRedirect("/our%20team/")


class TestAsset:
    def test_etag_format(self, tmp_path: Path) -> None:
        asset = Asset(path=tmp_path / "x", size=255, mtime=1.5)
        assert asset.etag == 'W/"ff-5dc"'

    def test_last_modified(self, tmp_path: Path) -> None:
        asset = Asset(path=tmp_path / "x", size=1, mtime=0)
        assert asset.last_modified == formatdate(0, usegmt=True)

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("a.css", "text/css; charset=utf-8"),
            ("a.html", "text/html; charset=utf-8"),
            ("a.png", "image/png"),
            ("a.unknownext", "application/octet-stream"),
        ],
    )
    def test_content_type(self, tmp_path: Path, name: str, expected: str) -> None:
        assert Asset(path=tmp_path / name, size=0, mtime=0).content_type == expected


# ------------------------------------------------------------------
# Through the full pipeline
# ------------------------------------------------------------------


class TestStaticServing:
    async def test_serves_css(self, site, public_dir: Path) -> None:
        css = (public_dir / "style.css").read_text()
        async with TestClient(site) as client:
            response = await client.get("/style.css")
        assert response.status == 200
        assert "text/css" in response.content_type
        assert response.text == css
        assert response.header("content-length") == str(len(css))

    async def test_root_serves_index(self, site, public_dir: Path) -> None:
        async with TestClient(site) as client:
            response = await client.get("/")
        assert response.status == 200
        assert response.text == (public_dir / "index.html").read_text()
        assert response.header("cache-control") == "no-store, max-age=0"

    async def test_etag_and_last_modified(self, site, public_dir: Path) -> None:
        stat = (public_dir / "app.js").stat()
        async with TestClient(site) as client:
            response = await client.get("/app.js")
        assert response.header("etag") == f'W/"{stat.st_size:x}-{int(stat.st_mtime * 1000):x}"'
        assert response.header("last-modified") == formatdate(stat.st_mtime, usegmt=True)

    async def test_directory_redirect_keeps_query(self, site) -> None:
        async with TestClient(site) as client:
            response = await client.get("/pages?ref=nav")
        assert response.status == 301
        assert response.header("location") == "/pages/?ref=nav"

    async def test_head_has_headers_no_body(self, site, public_dir: Path) -> None:
        async with TestClient(site) as client:
            response = await client.head("/style.css")
        assert response.status == 200
        assert response.body == b""
        assert response.header("content-length") == str((public_dir / "style.css").stat().st_size)

    async def test_post_is_not_served(self, site) -> None:
        async with TestClient(site) as client:
            response = await client.request("POST", "/style.css")
        assert response.status == 404

    async def test_dotfile_is_not_served(self, site) -> None:
        async with TestClient(site) as client:
            response = await client.get("/.env")
        assert response.status == 404
        assert b"SECRET" not in response.body

    async def test_overlong_path_is_404(self, site, public_dir: Path) -> None:
        async with TestClient(site) as client:
            response = await client.get("/" + "a" * 300)
        assert response.status == 404
        assert response.text == (public_dir / "404.html").read_text()

    async def test_non_ascii_directory_redirect(self, site, public_dir: Path) -> None:
        (public_dir / "日本").mkdir()
        (public_dir / "日本" / "index.html").write_text("<h1>ようこそ</h1>", encoding="utf-8")
        async with TestClient(site) as client:
            redirected = await client.get("/日本")
            followed = await client.get(redirected.header("location"))
        assert redirected.status == 301
        assert redirected.header("location") == "/%E6%97%A5%E6%9C%AC/"
        assert followed.status == 200
        assert followed.text == "<h1>ようこそ</h1>"

    async def test_large_file_streamed_intact(self, make_site, public_dir: Path) -> None:
        data = os.urandom(200_000)
        (public_dir / "video.bin").write_bytes(data)
        site = make_site(chunk_size=4096)
        async with TestClient(site) as client:
            response = await client.get("/video.bin")
        assert response.body == data


class TestConditionalGet:
    async def test_matching_etag_is_not_modified(self, site) -> None:
        async with TestClient(site) as client:
            first = await client.get("/app.js")
            second = await client.get("/app.js", headers={"If-None-Match": first.header("etag")})
        assert second.status == 304
        assert second.body == b""
        assert second.header("etag") == first.header("etag")
        assert second.header("cache-control") == "public, max-age=2592000, immutable"

    async def test_star_matches(self, site) -> None:
        async with TestClient(site) as client:
            response = await client.get("/app.js", headers={"If-None-Match": "*"})
        assert response.status == 304

    async def test_stale_etag_gets_full_body(self, site) -> None:
        async with TestClient(site) as client:
            response = await client.get("/app.js", headers={"If-None-Match": 'W/"0-0"'})
        assert response.status == 200
        assert response.text == "console.log('hi');"

    async def test_if_modified_since(self, site, public_dir: Path) -> None:
        mtime = (public_dir / "app.js").stat().st_mtime
        async with TestClient(site) as client:
            fresh = await client.get(
                "/app.js", headers={"If-Modified-Since": formatdate(mtime + 60, usegmt=True)}
            )
            stale = await client.get(
                "/app.js", headers={"If-Modified-Since": formatdate(mtime - 3600, usegmt=True)}
            )
            garbage = await client.get("/app.js", headers={"If-Modified-Since": "yesterday"})
        assert fresh.status == 304
        assert stale.status == 200
        assert garbage.status == 200
