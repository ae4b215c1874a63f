"""Process-wide logging for the API and the notification worker."""

import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

# HTTP client libraries log every request at INFO
_QUIET_LOGGERS = ("httpx", "httpcore", "urllib3")


def setup_logging(level: Optional[str] = None) -> None:
    """Configure the root logger from ``level`` or ``LOG_LEVEL`` (default INFO)."""
    resolved = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    floor = max(logging.WARNING, logging.getLogger().level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(floor)
