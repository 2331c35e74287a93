"""
Logging setup - one stream handler on the root logger.

Modules log through logging.getLogger(__name__).
"""

import logging
import sys

from placement_portal.core.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_configured = False


def setup_logging() -> None:
    """Configure root logging once per process."""
    global _configured
    if _configured:
        return

    settings = get_settings()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(settings.log_level.upper())

    # SQL echo is controlled by the engine, keep the pool quiet
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)
    _configured = True
