"""Static file serving from the asset root.

Three stages share one ``AssetRoot``:

- ``StaticFiles`` maps the request path to a file and serves it, or
  falls through to the next stage.
- ``RootDocument`` serves the index document for exactly ``/``.
- ``NotFoundPage`` turns the terminal ``NotFound`` into the custom 404
  document, or a plain-text fallback when that document is missing.

Filesystem checks run in a worker thread and file bodies are streamed
with async reads, so a slow disk never stalls other requests.
"""

import mimetypes
from dataclasses import dataclass
from email.utils import formatdate, parsedate_to_datetime
from pathlib import Path
from urllib.parse import quote

import anyio.to_thread

from brochure.errors import NotFound
from brochure.http.request import Request
from brochure.http.response import FileResponse, Response, plain_text, redirect
from brochure.middleware.protocol import AnyResponse, Next

_UTF8_TYPES = frozenset({"application/javascript", "application/json"})


@dataclass(frozen=True, slots=True)
class Asset:
    """A regular file inside the asset root, as found by a lookup."""

    path: Path
    size: int
    mtime: float

    @property
    def etag(self) -> str:
        """Weak validator from size and modification time (milliseconds), in hex."""
        return f'W/"{self.size:x}-{int(self.mtime * 1000):x}"'

    @property
    def last_modified(self) -> str:
        return formatdate(self.mtime, usegmt=True)

    @property
    def content_type(self) -> str:
        guessed, _ = mimetypes.guess_type(self.path.name)
        if guessed is None:
            return "application/octet-stream"
        if guessed.startswith("text/") or guessed in _UTF8_TYPES:
            return f"{guessed}; charset=utf-8"
        return guessed


@dataclass(frozen=True, slots=True)
class DirectoryRedirect:
    """A directory was requested without its trailing slash.

    ``location`` is percent-encoded, ready for the ``Location`` header.
    """

    location: str


def _stat_file(path: Path) -> Asset | None:
    try:
        if not path.is_file():
            return None
        stat = path.stat()
    except OSError:
        # ENAMETOOLONG, EACCES: a miss, not a fault
        return None
    return Asset(path=path, size=stat.st_size, mtime=stat.st_mtime)


def _is_dir(path: Path) -> bool:
    try:
        return path.is_dir()
    except OSError:
        return False


class AssetRoot:
    """Read-only view of the directory that holds every servable file.

    Security: dot segments (``..`` and dotfiles) are never served, and
    the resolved path must stay inside the root, so symlinks cannot
    escape it either.
    """

    __slots__ = ("chunk_size", "directory", "index")

    def __init__(
        self,
        directory: str | Path,
        *,
        index: str = "index.html",
        chunk_size: int = 64 * 1024,
    ) -> None:
        self.directory = Path(directory).resolve()
        self.index = index
        self.chunk_size = chunk_size

    def _inside(self, relative: str) -> Path | None:
        try:
            candidate = (self.directory / relative).resolve() if relative else self.directory
        except OSError:
            return None
        if not candidate.is_relative_to(self.directory):
            return None
        return candidate

    def resolve(self, url_path: str) -> Asset | DirectoryRedirect | None:
        """Map a decoded URL path to a file. Blocking; see ``lookup()``.

        - ``/dir/`` serves ``dir/index.html``
        - ``/dir`` redirects to ``/dir/`` when that index exists
        - ``/about`` falls back to ``about.html`` when no extensionless file exists
        """
        if "\x00" in url_path:
            return None

        relative = url_path.lstrip("/")
        if any(segment.startswith(".") for segment in relative.split("/")):
            return None

        candidate = self._inside(relative)
        if candidate is None:
            return None

        if _is_dir(candidate):
            index = _stat_file(candidate / self.index)
            if index is None:
                return None
            if relative and not url_path.endswith("/"):
                return DirectoryRedirect(quote(url_path) + "/")
            return index

        asset = _stat_file(candidate)
        if asset is not None:
            return asset

        if relative and not url_path.endswith("/") and not Path(relative).suffix:
            html = self._inside(relative + ".html")
            if html is not None:
                return _stat_file(html)
        return None

    def find(self, name: str) -> Asset | None:
        """Find a named document (index, 404 page) at the top of the root. Blocking."""
        candidate = self._inside(name)
        return _stat_file(candidate) if candidate is not None else None

    async def lookup(self, url_path: str) -> Asset | DirectoryRedirect | None:
        return await anyio.to_thread.run_sync(self.resolve, url_path)

    async def lookup_document(self, name: str) -> Asset | None:
        return await anyio.to_thread.run_sync(self.find, name)

    def serve(self, asset: Asset, *, status: int = 200) -> FileResponse:
        """Build a streamed response for *asset* with its validators."""
        return FileResponse(
            path=asset.path,
            size=asset.size,
            status=status,
            content_type=asset.content_type,
            headers=(("ETag", asset.etag), ("Last-Modified", asset.last_modified)),
            chunk_size=self.chunk_size,
        )


def is_not_modified(request: Request, asset: Asset) -> bool:
    """Conditional GET: does the client's cached copy still match *asset*?

    ``If-None-Match`` wins when present (weak comparison, ``*`` matches
    anything). Otherwise ``If-Modified-Since`` is compared at one-second
    resolution.
    """
    if_none_match = request.headers.get_csv("if-none-match")
    if if_none_match:
        current = asset.etag.removeprefix("W/")
        return any(tag == "*" or tag.removeprefix("W/") == current for tag in if_none_match)

    if_modified_since = request.headers.get("if-modified-since")
    if if_modified_since:
        try:
            since = parsedate_to_datetime(if_modified_since)
        except (TypeError, ValueError):
            return False
        return int(asset.mtime) <= int(since.timestamp())
    return False


class StaticFiles:
    """Serve files from the asset root, or fall through.

    Only GET and HEAD are served; other methods fall straight through
    (and end as 404s). A miss is not an error: the request simply moves
    on to the next stage.

    Usage::

        root = AssetRoot("./public")
        stages = (..., StaticFiles(root), ...)
    """

    __slots__ = ("root",)

    def __init__(self, root: AssetRoot) -> None:
        self.root = root

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        if request.method not in ("GET", "HEAD"):
            return await next(request)

        found = await self.root.lookup(request.path)
        if found is None:
            return await next(request)

        if isinstance(found, DirectoryRedirect):
            location = found.location
            if request.query_string:
                location = f"{location}?{request.query_string.decode('latin-1')}"
            return redirect(location, status=301)

        if is_not_modified(request, found):
            return Response(body=b"", status=304, content_type=found.content_type).with_header(
                "ETag", found.etag
            ).with_header("Last-Modified", found.last_modified)

        return self.root.serve(found)


class RootDocument:
    """Serve the index document for ``/`` when static resolution did not.

    Passes through for every other path, and for ``/`` when the index
    document is missing.
    """

    __slots__ = ("root",)

    def __init__(self, root: AssetRoot) -> None:
        self.root = root

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        if request.path != "/" or request.method not in ("GET", "HEAD"):
            return await next(request)
        asset = await self.root.lookup_document(self.root.index)
        if asset is None:
            return await next(request)
        return self.root.serve(asset)


class NotFoundPage:
    """Turn ``NotFound`` from the inner stages into a 404 response.

    Serves the custom not-found document with status 404 when the asset
    root has one, otherwise a plain-text ``404 Not Found``.
    """

    __slots__ = ("document", "root")

    def __init__(self, root: AssetRoot, document: str = "404.html") -> None:
        self.root = root
        self.document = document

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        try:
            return await next(request)
        except NotFound:
            pass

        asset = await self.root.lookup_document(self.document)
        if asset is None:
            return plain_text("404 Not Found", status=404)
        return self.root.serve(asset, status=404)


async def not_found(request: Request) -> AnyResponse:
    """Innermost stage: nothing before it produced a response."""
    raise NotFound(f"No asset for {request.path}")
