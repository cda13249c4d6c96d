import logging.config
import sys
from typing import Optional


def configure_logging(level: str = "INFO", error_log: Optional[str] = None):
    """Console logging for the tools; optionally also a rotating file for errors."""
    handlers = {
        "console": {
            "level": level,
            "class": "logging.StreamHandler",
            "formatter": "standard",
            "stream": sys.stderr,
        },
    }
    if error_log:
        handlers["file"] = {
            "level": "ERROR",
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "standard",
            "filename": error_log,
            "maxBytes": 10485760,  # 10MB
            "backupCount": 5,
        }

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S"
            },
        },
        "handlers": handlers,
        "loggers": {
            "": {
                "handlers": list(handlers),
                "level": level,
                "propagate": True
            },
        }
    }

    logging.config.dictConfig(logging_config)
