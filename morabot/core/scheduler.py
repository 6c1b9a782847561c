# -*- coding: utf-8 -*-
"""
Maintenance Scheduler.
Периодический сброс хранилищ на диск (история, кэш пользователей, флаги).
Работает в том же event loop, что и бот, и не блокирует обработку апдейтов.

Связь: запускается из bootstrap/runtime.py после успешного старта клиента.
"""

from typing import Callable

import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler

logger = structlog.get_logger(__name__)

FLUSH_INTERVAL_HOURS = 24


class MaintenanceScheduler:
    def __init__(self, flush: Callable[[], None], interval_hours: float = FLUSH_INTERVAL_HOURS):
        self.flush = flush
        self.interval_hours = interval_hours
        self.scheduler = AsyncIOScheduler()

    async def run_flush(self):
        """Плановый flush всех хранилищ."""
        logger.info("scheduled_flush_started")
        try:
            self.flush()
        except Exception as e:
            logger.error("scheduled_flush_failed", error=str(e), exc_info=True)
            return
        logger.info("scheduled_flush_done")

    def start(self):
        self.scheduler.add_job(
            self.run_flush,
            "interval",
            hours=self.interval_hours,
            id="store_flush",
        )
        self.scheduler.start()
        logger.info("scheduler_started", interval_hours=self.interval_hours)

    def shutdown(self):
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
