# -*- coding: utf-8 -*-
"""
Логирование Morabot.
Использует structlog для структурированного вывода в консоль и RotatingFileHandler для ротации.
"""

import os
import sys
import logging
import logging.handlers
import structlog

MAIN_LOG_NAME = "combined.log"
ERROR_LOG_NAME = "error.log"


def setup_logger(logs_dir: str = "logs", level: str = "INFO"):
    """Настройка структурированного логирования."""
    os.makedirs(logs_dir, exist_ok=True)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", utc=False),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.dev.ConsoleRenderer(),
    ]

    max_bytes = 10 * 1024 * 1024
    backup_count = 5

    # Основной лог
    main_handler = logging.handlers.RotatingFileHandler(
        os.path.join(logs_dir, MAIN_LOG_NAME), maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )

    # Лог ошибок
    error_handler = logging.handlers.RotatingFileHandler(
        os.path.join(logs_dir, ERROR_LOG_NAME), maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )
    error_handler.setLevel(logging.ERROR)

    log_level = getattr(logging, str(level).upper(), logging.INFO)
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    for h in [main_handler, error_handler]:
        h.setFormatter(formatter)
        root_logger.addHandler(h)

    # pyrogram очень шумный на INFO
    logging.getLogger("pyrogram").setLevel(logging.WARNING)

    logger = structlog.get_logger("Morabot")
    logger.info("logging_initialized", logs_dir=logs_dir, files=[MAIN_LOG_NAME, ERROR_LOG_NAME])
    return logger
