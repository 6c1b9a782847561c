# -*- coding: utf-8 -*-
"""
Handlers Package — модульная структура обработчиков Morabot.

Каждый модуль отвечает за свою область:
- commands: /start, /help, /stats, /clear, /bot, /createpanel
- tools: команды поверх внешних API (/pin, /ig, /yt, /play, /ssweb, /tiktok, /qr, /sc, /profil, /hentai)
- groups: вход/выход участников, добавление бота в группу
- media: загрузка вложений на файловый хостинг
- callbacks: inline-кнопки панели управления
- ai: свободный текст → AI

Все обработчики регистрируются через register_handlers(app, deps).
"""

import structlog

logger = structlog.get_logger(__name__)


def _register_or_skip(label: str, register_func, app, deps: dict):
    """
    Регистрирует обработчик и не валит запуск, если в deps нет нужной зависимости.
    """
    try:
        register_func(app, deps)
    except KeyError as exc:
        logger.warning("handler_module_skipped", module=label, missing=str(exc))


def register_all_handlers(app, deps: dict):
    """
    Регистрирует все обработчики на Pyrogram-клиент.

    deps — словарь зависимостей (store, flags, ai_proxy, relay, vendors...),
    чтобы обработчики не импортировали глобальные объекты напрямую.
    """
    from .commands import register_handlers as reg_commands
    from .tools import register_handlers as reg_tools
    from .groups import register_handlers as reg_groups
    from .media import register_handlers as reg_media
    from .callbacks import register_handlers as reg_callbacks
    from .ai import register_handlers as reg_ai

    # Порядок важен: ai ловит любой текст без "/" и регистрируется последним.
    _register_or_skip("commands", reg_commands, app, deps)
    _register_or_skip("tools", reg_tools, app, deps)
    _register_or_skip("groups", reg_groups, app, deps)
    _register_or_skip("media", reg_media, app, deps)
    _register_or_skip("callbacks", reg_callbacks, app, deps)
    _register_or_skip("ai", reg_ai, app, deps)
