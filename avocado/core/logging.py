import logging
import os
from typing import Optional

_QUIET_LOGGERS = ("httpx", "httpcore", "multipart")


def configure_logging(level: Optional[str] = None) -> None:
    """Configure logging for the API process and the cron script."""
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    # HTTP client request lines stay out of INFO output
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
