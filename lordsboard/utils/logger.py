"""Logging setup for lordsboard.

Every module asks get_logger(__name__) for its logger. The first call attaches
the console handler, plus a file handler when LOG_FILE is set, to the root
logger at LOG_LEVEL. Snapshot builds issue one RPC call per token, so the HTTP
client loggers underneath web3 and requests are held at QUIET_LEVEL.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
QUIET_LOGGERS = ('urllib3', 'web3', 'requests')
QUIET_LEVEL = logging.WARNING

_configured = False


def _file_handler(path: str, formatter: logging.Formatter) -> Optional[logging.Handler]:
    try:
        log_path = Path(path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path, encoding='utf-8')
    except OSError:
        logging.getLogger(__name__).exception('Cannot open log file %s, logging to console only', path)
        return None
    handler.setFormatter(formatter)
    return handler


def _ensure_configured() -> None:
    global _configured
    if _configured:
        return

    level = getattr(logging, os.getenv('LOG_LEVEL', 'INFO').upper(), logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT)

    root = logging.getLogger()
    root.setLevel(level)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    log_file = os.getenv('LOG_FILE', '')
    if log_file:
        handler = _file_handler(log_file, formatter)
        if handler is not None:
            root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, QUIET_LEVEL))

    _configured = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger for ``name``, configuring the root logger on first use."""
    _ensure_configured()
    return logging.getLogger(name)
