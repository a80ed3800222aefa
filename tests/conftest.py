"""Shared fixtures: a small marketing site on disk and a factory for Sites over it."""

from collections.abc import Callable
from pathlib import Path

import pytest

from brochure.app import Site
from brochure.config import SiteConfig

INDEX_HTML = "<!doctype html><h1>Home</h1>"
NOT_FOUND_HTML = "<!doctype html><h1>Lost?</h1>"
# Large enough to clear the compression threshold
STYLE_CSS = "body { color: #222; }\n" * 100


@pytest.fixture
def public_dir(tmp_path: Path) -> Path:
    """An asset root shaped like a real marketing site."""
    public = tmp_path / "public"
    public.mkdir()

    (public / "index.html").write_text(INDEX_HTML)
    (public / "404.html").write_text(NOT_FOUND_HTML)
    (public / "about.html").write_text("<h1>About us</h1>")
    (public / "style.css").write_text(STYLE_CSS)
    (public / "app.js").write_text("console.log('hi');")
    (public / "icon.svg").write_text('<svg xmlns="http://www.w3.org/2000/svg"/>')
    (public / "site.webmanifest").write_text('{"name": "PIN"}')
    (public / "hero.webp").write_bytes(b"RIFF\x00\x00\x00\x00WEBPVP8 ")
    (public / ".env").write_text("SECRET=1")

    pages = public / "pages"
    pages.mkdir()
    (pages / "index.html").write_text("<h1>Pages</h1>")
    (pages / "pricing.html").write_text("<h1>Pricing</h1>")

    images = public / "images"
    images.mkdir()
    (images / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n")

    return public


@pytest.fixture
def make_site(public_dir: Path) -> Callable[..., Site]:
    """Build a Site over ``public_dir``; keyword arguments override SiteConfig fields."""

    def factory(**overrides: object) -> Site:
        overrides.setdefault("asset_root", public_dir)
        return Site(SiteConfig(**overrides))  # type: ignore[arg-type]

    return factory


@pytest.fixture
def site(make_site: Callable[..., Site]) -> Site:
    return make_site()
