"""Brochure site application.

A ``Site`` is an ASGI 3 application built from a ``SiteConfig``. The
pipeline is compiled once, on the first lifespan or HTTP event, and is
immutable afterwards.
"""

import logging
import threading

from brochure._internal.asgi import Receive, Scope, Send
from brochure.config import SiteConfig
from brochure.pipeline import Pipeline
from brochure.server.handler import handle_request

logger = logging.getLogger("brochure.server")


class Site:
    """The static site.

    Usage::

        site = Site(SiteConfig(asset_root="public"))
        site.run()

    Or mount ``site`` in any ASGI server: it is the ASGI callable.

    Thread safety:
        The freeze transition uses a Lock + double-check so exactly one
        thread builds the pipeline, even if several workers deliver
        their first request at the same time.
    """

    __slots__ = ("_freeze_lock", "_pipeline", "config")

    def __init__(self, config: SiteConfig | None = None) -> None:
        self.config: SiteConfig = config or SiteConfig()
        self._freeze_lock = threading.Lock()
        self._pipeline: Pipeline | None = None

    @property
    def pipeline(self) -> Pipeline:
        """The compiled pipeline (compiling it on first access)."""
        self._ensure_frozen()
        assert self._pipeline is not None
        return self._pipeline

    def run(self) -> None:
        """Validate the site and serve it with pounce."""
        self._ensure_frozen()

        from brochure.server.run import run_server

        run_server(self)

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point.

        Handles lifespan directly, then delegates HTTP scopes to the
        request handler.
        """
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        await handle_request(
            scope,
            receive,
            send,
            pipeline=self.pipeline,
            traceback_style=self.config.traceback_style,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        Configuration problems fail startup instead of the first request.
        """
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    self._ensure_frozen()
                except Exception as exc:
                    logger.error("Startup failed: %s", exc)
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        if self._pipeline is not None:
            return
        with self._freeze_lock:
            if self._pipeline is not None:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Validate the configuration and compile the pipeline.

        MUST only be called while holding _freeze_lock.
        """
        self.config.validate()
        root = self.config.asset_path
        if not (root / self.config.index_document).is_file():
            logger.warning("Asset root %s has no %s", root, self.config.index_document)
        self._pipeline = Pipeline.from_config(self.config)
