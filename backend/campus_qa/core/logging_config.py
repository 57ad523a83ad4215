"""Logging configuration for the Campus QA backend."""

import logging
import logging.config

LOG_FORMAT = "%(asctime)s - %(name)s:%(lineno)d - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "chromadb", "openai")


def build_logging_config(level: str = "INFO") -> dict:
    level = level.upper()
    config = {
        "version": 1,
        "disable_existing_loggers": False,  # Keep uvicorn's loggers
        "formatters": {
            "default": {
                "format": LOG_FORMAT,
                "datefmt": DATE_FORMAT,
            },
        },
        "handlers": {
            "console": {
                "level": level,
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            "": {
                "handlers": ["console"],
                "level": level,
            },
            "uvicorn.error": {
                "level": logging.INFO,
                "handlers": ["console"],
                "propagate": False,
            },
        },
    }
    for name in QUIET_LOGGERS:
        config["loggers"][name] = {
            "level": logging.WARNING,
            "handlers": ["console"],
            "propagate": False,
        }
    return config


def configure_logging(level: str = "INFO") -> None:
    logging.config.dictConfig(build_logging_config(level))
