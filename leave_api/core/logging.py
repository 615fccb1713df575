"""
Process-wide logging for the API and the accrual script
"""
import logging
import sys
from typing import Optional

from leave_api.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Loggers that drown out service logs at INFO
NOISY_LOGGERS = ("uvicorn.access", "sqlalchemy.engine")


def setup_logging(level: Optional[str] = None) -> None:
    """Send log records to stdout at LOG_LEVEL unless a level is given."""
    level_name = (level or settings.LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info("Logging configured: level=%s env=%s", level_name, settings.APP_ENV)
