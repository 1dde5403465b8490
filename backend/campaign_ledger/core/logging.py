"""
Logging configuration for the campaign ledger service
"""

import logging
import logging.config

from campaign_ledger.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = None) -> None:
    """Configure root logging once for the application process"""
    level = (level or settings.LOG_LEVEL).upper()

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": LOG_FORMAT},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
            },
        },
        "root": {
            "level": level,
            "handlers": ["console"],
        },
        "loggers": {
            # SQL echo stays off unless explicitly raised
            "sqlalchemy.engine": {"level": "WARNING"},
        },
    })
