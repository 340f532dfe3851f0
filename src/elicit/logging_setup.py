"""Logging configuration for scripts and applications embedding elicit.

The library itself only creates module loggers (with a NullHandler on the
package logger). Call configure_logging() from an entry point to send
them to stdout.
"""
from __future__ import annotations

import logging
from logging.config import dictConfig
from typing import Optional

from elicit.config import load_settings


def _dict_config(level: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s %(levelname)s:%(name)s:%(message)s",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "default",
                "stream": "ext://sys.stdout",
            }
        },
        "loggers": {
            "elicit": {"level": level, "handlers": ["console"], "propagate": False},
        },
    }


def configure_logging(level: Optional[str] = None) -> None:
    """Configure the elicit logger once.

    If the logger already has a console handler, return to prevent duplicate
    output when called repeatedly.
    """
    logger = logging.getLogger("elicit")
    if any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        return
    dictConfig(_dict_config((level or load_settings().log_level).upper()))
