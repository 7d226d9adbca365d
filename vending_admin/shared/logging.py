# caminho: vending_admin/shared/logging.py
# Funções:
# - setup_logging(): inicializa logging em stdout e arquivo rotativo
# - log_info/log_warning/log_error: atalhos padronizados (EVENTO | payload)

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'
LOG_DATEFMT = '%Y-%m-%d %H:%M:%S'
LOG_DIR = Path(__file__).resolve().parent.parent / 'logs'
LOG_FILE = LOG_DIR / 'vending_admin.log'
LOGGER_NAME = 'vending_admin'
CONFIG_STATE = {'logging': False}


def _is_serverless() -> bool:
    return os.environ.get('VERCEL') == '1' or 'AWS_LAMBDA' in os.environ.get('AWS_EXECUTION_ENV', '')


def setup_logging(level: str = 'INFO') -> None:
    if CONFIG_STATE['logging']:
        logging.getLogger().setLevel(level.upper())
        return

    root = logging.getLogger()
    root.setLevel(level.upper())

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATEFMT))
    root.addHandler(stream_handler)

    # Ambientes serverless não têm disco gravável
    if not _is_serverless():
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(LOG_FILE, maxBytes=5 * 1024 * 1024, backupCount=5, encoding='utf-8')
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATEFMT))
        root.addHandler(file_handler)

    CONFIG_STATE['logging'] = True


def _log(event: str, payload: dict[str, Any], level: str) -> None:
    logger = logging.getLogger(LOGGER_NAME)
    getattr(logger, level.lower())('%s | %s', event, payload)


def log_info(event: str, payload: dict[str, Any]) -> None:
    _log(event, payload, 'info')


def log_warning(event: str, payload: dict[str, Any]) -> None:
    _log(event, payload, 'warning')


def log_error(event: str, payload: dict[str, Any]) -> None:
    _log(event, payload, 'error')
