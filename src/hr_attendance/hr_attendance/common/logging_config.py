from __future__ import annotations

import logging
import logging.config
import os
from typing import Optional


def setup_logging(level: str = "INFO", *, log_dir: Optional[str] = None) -> None:
    """Setup application logging configuration.

    Console output always; with ``log_dir`` also rotating app/error files and a
    dedicated audit file.
    """

    handlers: dict = {
        "console": {
            "class": "logging.StreamHandler",
            "level": level,
            "formatter": "default",
            "stream": "ext://sys.stdout",
        },
    }
    root_handlers = ["console"]
    audit_handlers = ["console"]

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        rotating = {
            "class": "logging.handlers.RotatingFileHandler",
            "maxBytes": 10485760,  # 10MB
            "backupCount": 10,
            "encoding": "utf-8",
        }
        handlers["app_file"] = {
            **rotating,
            "level": level,
            "formatter": "detailed",
            "filename": os.path.join(log_dir, "app.log"),
        }
        handlers["error_file"] = {
            **rotating,
            "level": "ERROR",
            "formatter": "detailed",
            "filename": os.path.join(log_dir, "error.log"),
        }
        handlers["audit_file"] = {
            **rotating,
            "level": "INFO",
            "formatter": "audit",
            "filename": os.path.join(log_dir, "audit.log"),
        }
        root_handlers += ["app_file", "error_file"]
        audit_handlers = ["audit_file"]

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
                "detailed": {
                    "format": "%(asctime)s - %(name)s - %(levelname)s - %(module)s - %(funcName)s:%(lineno)d - %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
                "audit": {
                    "format": "%(asctime)s - %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
            },
            "handlers": handlers,
            "loggers": {
                "": {"level": level, "handlers": root_handlers},
                "audit": {"level": "INFO", "handlers": audit_handlers, "propagate": False},
                "access": {"level": "INFO", "handlers": root_handlers, "propagate": False},
                "werkzeug": {"level": "WARNING"},
            },
        }
    )

    logging.getLogger(__name__).info("Logging configured (level=%s, log_dir=%s)", level, log_dir or "-")
