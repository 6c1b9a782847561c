# -*- coding: utf-8 -*-
"""
Жизненный цикл бота: папки → хранилища → клиент Telegram → планировщик →
ожидание сигнала (SIGINT/SIGTERM) → flush всех хранилищ → уведомление → выход.

Коды выхода: 0 — штатная остановка, 1 — ошибка старта.
"""
from __future__ import annotations

import asyncio
import os

import structlog
from pyrogram import Client, idle

from ..config import Config
from ..core.ai_proxy import AIProxy, CompletionClient
from ..core.config_manager import ConfigManager
from ..core.error_handler import ErrorReporter
from ..core.exceptions import StorageError
from ..core.feature_toggles import FeatureFlags
from ..core.history_store import ConversationStore
from ..core.json_store import JsonFileBackend
from ..core.logger_setup import setup_logger
from ..core.media_relay import MediaRelay, TelegramFileFetcher, UploadHostClient
from ..core.notifier import OperatorNotifier
from ..core.panel_service import PanelProvisioningService, build_backend
from ..core.persona_manager import PersonaManager
from ..core.scheduler import MaintenanceScheduler
from ..core.user_cache import UserCache
from ..core.vendor_api import VendorClient
from ..handlers import register_all_handlers

logger = structlog.get_logger(__name__)

SHUTDOWN_NOTIFY_TIMEOUT = 5

HISTORY_FILE = "otak.json"
USER_CACHE_FILE = "user_cache.json"
LEDGER_FILE = "panel_accounts.json"


def ensure_folders(config=Config) -> None:
    for folder in (config.DATA_DIR, config.LOGS_DIR, config.TEMP_DIR, config.BACKUPS_DIR):
        os.makedirs(folder, exist_ok=True)


def build_components(config=Config) -> dict:
    """
    Загружает хранилища и собирает сервисы в словарь зависимостей (deps).
    Клиент Telegram подключается позже: relay получает fetcher в run_bot.
    """
    store = ConversationStore(JsonFileBackend(config.data_path(HISTORY_FILE)))
    store.load()
    user_cache = UserCache(JsonFileBackend(config.data_path(USER_CACHE_FILE)))
    user_cache.load()
    flags = FeatureFlags.from_dir(config.DATA_DIR)
    flags.load()

    profile = ConfigManager(config.PROFILE_PATH)
    personas = PersonaManager(profile)
    notifier = OperatorNotifier(operator_id=config.OPERATOR_CHAT_ID)
    reporter = ErrorReporter(notifier, profile)

    return {
        "config": config,
        "store": store,
        "user_cache": user_cache,
        "flags": flags,
        "profile": profile,
        "personas": personas,
        "notifier": notifier,
        "reporter": reporter,
        "safe_handler": reporter.safe_handler,
        "ai_proxy": AIProxy(store, CompletionClient(config.AI_API_URL), flags, personas, profile),
        "uploader": UploadHostClient(config.UPLOAD_HOST_URL, config.UPLOAD_LINK_PREFIX, config.UPLOAD_USERHASH),
        "vendors": VendorClient(config.VENDOR_API_BASE, config.APIFY_API_KEY),
        "panel": PanelProvisioningService(
            build_backend(config),
            JsonFileBackend(config.data_path(LEDGER_FILE)),
            config.PANEL_URL,
            config.PANEL_PORT,
        ),
    }


def flush_all(deps: dict) -> None:
    """Синхронный сброс всех хранилищ. Ошибка одного не мешает остальным."""
    stores = (
        ("history", deps["store"].save),
        ("user_cache", deps["user_cache"].save),
        ("ai_toggle", deps["flags"].ai.save),
        ("upload_toggle", deps["flags"].upload.save),
    )
    for name, save in stores:
        try:
            save()
        except StorageError as e:
            logger.error("flush_failed", store=name, error=str(e))
    logger.info("stores_flushed")


async def _shutdown(app: Client, deps: dict, scheduler: MaintenanceScheduler | None) -> None:
    logger.info("shutdown_started")
    if scheduler:
        scheduler.shutdown()
    flush_all(deps)
    try:
        await asyncio.wait_for(deps["notifier"].notify_shutdown(), timeout=SHUTDOWN_NOTIFY_TIMEOUT)
    except asyncio.TimeoutError:
        logger.warning("shutdown_notify_timeout")
    try:
        await app.stop()
    except ConnectionError as e:
        logger.warning("client_stop_failed", error=str(e))
    logger.info("bot_stopped")


async def run_bot(config=Config) -> int:
    """Запускает бота и ждёт сигнала остановки. Возвращает код выхода."""
    errors = config.validate()
    if errors:
        for error in errors:
            logger.error("config_invalid", error=error)
        return 1

    ensure_folders(config)
    deps = build_components(config)

    app = Client(
        config.TELEGRAM_SESSION_NAME,
        api_id=config.TELEGRAM_API_ID,
        api_hash=config.TELEGRAM_API_HASH,
        bot_token=config.TELEGRAM_BOT_TOKEN,
        workdir=config.DATA_DIR,
    )
    deps["relay"] = MediaRelay(TelegramFileFetcher(app), deps["uploader"])
    deps["notifier"].set_client(app)
    register_all_handlers(app, deps)

    try:
        await app.start()
        me = await app.get_me()
    except Exception as e:
        logger.error("startup_failed", error=str(e), exc_info=True)
        return 1

    logger.info(
        "bot_started",
        name=me.first_name,
        username=me.username,
        ai_enabled=deps["flags"].ai.enabled,
        upload_enabled=deps["flags"].upload.enabled,
    )

    scheduler = MaintenanceScheduler(lambda: flush_all(deps))
    scheduler.start()
    await deps["notifier"].notify_startup(
        me.first_name, upload_enabled=deps["flags"].upload.enabled, ai_enabled=deps["flags"].ai.enabled
    )

    # idle() возвращается по SIGINT/SIGTERM
    await idle()
    await _shutdown(app, deps, scheduler)
    return 0


def main() -> int:
    setup_logger(Config.LOGS_DIR, Config.LOG_LEVEL)
    try:
        return asyncio.run(run_bot())
    except KeyboardInterrupt:
        return 0
