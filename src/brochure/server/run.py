"""Serve a Site with pounce.

pounce takes an import string in its ``run()`` helper, but we hold a
live ``Site`` object, so ``pounce.Server`` is driven directly with the
ASGI callable. One worker: every request is a task on a single event
loop.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from brochure.app import Site

logger = logging.getLogger("brochure.server")


def run_server(site: Site) -> None:
    """Start a pounce server for *site* on its configured host and port."""
    from pounce.config import ServerConfig
    from pounce.server import Server

    config = site.config
    server_config = ServerConfig(
        host=config.host,
        port=config.port,
        workers=1,
        log_level=config.log_level,
    )
    display_host = "localhost" if config.host in ("0.0.0.0", "") else config.host
    logger.info(
        "Serving %s at http://%s:%d (%s)",
        config.asset_path,
        display_host,
        config.port,
        "production" if config.production else "development",
    )
    Server(server_config, site).run()
