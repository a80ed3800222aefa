"""``python -m brochure`` — serve the asset root described by the environment.

No command-line flags: everything comes from ``SiteConfig.from_env()``.
"""

import logging
import sys

from brochure.app import Site
from brochure.config import SiteConfig
from brochure.errors import ConfigurationError

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str) -> None:
    """Route ``brochure.*`` loggers to stderr at *level*."""
    logging.basicConfig(level=level.upper(), format=_LOG_FORMAT, stream=sys.stderr)


def main() -> None:
    try:
        config = SiteConfig.from_env()
        configure_logging(config.log_level)
        site = Site(config)
        site.run()
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
