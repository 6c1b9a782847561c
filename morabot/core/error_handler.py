# -*- coding: utf-8 -*-
"""
Модуль Error Handler.
Единый middleware для обработки ошибок во всех хэндлерах.

Обеспечивает:
- Подсказку пользователю при некорректном аргументе команды (UserInputError)
- Понятное сообщение при сбое внешнего API (UpstreamError) + уведомление оператора
- Разбор ошибок доставки Telegram (нет прав, бот заблокирован, чат не найден...)
- Логирование неожиданных ошибок с traceback и отчёт оператору
- FloodWait: ждём указанное время, но handler НЕ повторяем
- Статистику ошибок по типам

Повторов нет: любая ошибка завершает текущий вызов хэндлера.
"""

import asyncio
import functools
import traceback
from typing import Optional

import structlog
from pyrogram.errors import FloodWait, MessageNotModified
from pyrogram.types import CallbackQuery

from .exceptions import UpstreamError, UserInputError

logger = structlog.get_logger(__name__)

STACK_LIMIT = 1000

# Счётчик ошибок для мониторинга
_error_counts: dict[str, int] = {}

PLATFORM_TEXTS = {
    "forbidden": "⛔ У бота нет прав писать в этот чат.",
    "blocked": "🚫 Пользователь заблокировал бота.",
    "chat_not_found": "❓ Чат не найден.",
    "bad_format": "⚠️ Не удалось разобрать форматирование сообщения.",
}

_BLOCKED_IDS = {"USER_IS_BLOCKED", "INPUT_USER_DEACTIVATED"}
_CHAT_NOT_FOUND_IDS = {"PEER_ID_INVALID", "CHAT_ID_INVALID", "CHANNEL_INVALID"}
_STALE_EDIT_IDS = {"MESSAGE_ID_INVALID", "MESSAGE_NOT_MODIFIED"}
_BAD_FORMAT_IDS = {"ENTITY_BOUNDS_INVALID", "ENTITY_MENTION_USER_INVALID", "MESSAGE_EMPTY"}
_FORBIDDEN_IDS = {"CHAT_WRITE_FORBIDDEN", "CHAT_ADMIN_REQUIRED", "USER_BANNED_IN_CHANNEL"}


def _count(name: str) -> None:
    _error_counts[name] = _error_counts.get(name, 0) + 1


def describe_platform_error(exc: BaseException) -> tuple[bool, Optional[str]]:
    """
    Сопоставляет ошибку Telegram с текстом для пользователя.

    Возвращает (matched, text):
        (False, None) — это не ошибка платформы;
        (True, None)  — ошибка распознана, ответ подавляется (устаревшее редактирование);
        (True, text)  — ошибка распознана, text показываем пользователю.
    """
    code = getattr(exc, "CODE", None)
    error_id = str(getattr(exc, "ID", "") or "").upper()
    if code is None and not error_id:
        return False, None

    description = str(exc).lower()

    if error_id in _BLOCKED_IDS or "bot was blocked by the user" in description:
        return True, PLATFORM_TEXTS["blocked"]
    if error_id in _CHAT_NOT_FOUND_IDS or "chat not found" in description:
        return True, PLATFORM_TEXTS["chat_not_found"]
    if error_id in _STALE_EDIT_IDS or "message to edit not found" in description:
        return True, None
    if error_id in _BAD_FORMAT_IDS or "can't parse entities" in description:
        return True, PLATFORM_TEXTS["bad_format"]
    if code == 403 or error_id in _FORBIDDEN_IDS:
        return True, PLATFORM_TEXTS["forbidden"]
    return True, f"⚠️ Ошибка платформы ({code or error_id})."


def build_operator_report(exc: BaseException, context: dict) -> str:
    """Текст отчёта оператору: ошибка, обрезанный stack trace и контекст вызова."""
    stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    if len(stack) > STACK_LIMIT:
        stack = stack[:STACK_LIMIT] + "..."

    lines = [
        "⚠️ **Ошибка в боте**",
        f"• Сообщение: {exc}",
        f"• Тип: {type(exc).__name__}",
    ]
    labels = (
        ("chat_id", "Чат"),
        ("user_id", "Пользователь"),
        ("user_name", "Имя"),
        ("command", "Команда"),
        ("query", "Запрос"),
    )
    for key, label in labels:
        if context.get(key) not in (None, ""):
            lines.append(f"• {label}: {context[key]}")

    code = getattr(exc, "CODE", None)
    if code is not None:
        lines.append(f"• Код платформы: {code} {getattr(exc, 'ID', '') or ''}".rstrip())
    if isinstance(exc, UpstreamError) and exc.status is not None:
        lines.append(f"• HTTP статус: {exc.status}")

    lines.append(f"\n```\n{stack}\n```")
    return "\n".join(lines)


def extract_context(update) -> dict:
    """Контекст апдейта (Message или CallbackQuery) для логов и отчёта."""
    message = update.message if isinstance(update, CallbackQuery) else update
    chat = getattr(message, "chat", None)
    user = getattr(update, "from_user", None)

    context = {
        "chat_id": getattr(chat, "id", None),
        "user_id": getattr(user, "id", None),
        "user_name": getattr(user, "first_name", None),
    }
    if isinstance(update, CallbackQuery):
        context["command"] = "callback_query"
        context["query"] = update.data
        return context

    text = getattr(message, "text", None) or getattr(message, "caption", None)
    if isinstance(text, str) and text.startswith("/"):
        parts = text.split(maxsplit=1)
        context["command"] = parts[0].lstrip("/").split("@")[0]
        context["query"] = parts[1] if len(parts) > 1 else None
    return context


class ErrorReporter:
    """
    Обёртка хэндлеров: ловит всё на верхнем уровне.

    deps:
        notifier: OperatorNotifier
        messages: ConfigManager (текст общей ошибки errors.general)
    """

    def __init__(self, notifier, messages=None):
        self.notifier = notifier
        self.messages = messages

    @property
    def general_apology(self) -> str:
        if self.messages is None:
            return "😔 Произошла ошибка. Попробуй позже."
        return self.messages.message("errors.general")

    @staticmethod
    async def _reply(update, text: str) -> None:
        target = update.message if isinstance(update, CallbackQuery) else update
        if target is None or not hasattr(target, "reply_text"):
            return
        try:
            await target.reply_text(text)
        except Exception as e:
            # Ответить не удалось, остаётся лог
            logger.warning("error_reply_failed", error=str(e))

    async def report(self, exc: BaseException, context: dict) -> None:
        await self.notifier.notify(build_operator_report(exc, context))

    def safe_handler(self, func):
        """
        Декоратор-middleware для хэндлеров Pyrogram.

        - UserInputError: отвечаем подсказкой, оператора не беспокоим
        - UpstreamError: сообщение пользователю + уведомление оператора
        - FloodWait: ждём value + 1с, НО НЕ ПОВТОРЯЕМ handler
        - MessageNotModified: тихо игнорируем
        - Остальное: traceback в лог, отчёт оператору, ответ пользователю
        """

        @functools.wraps(func)
        async def wrapper(client, update, *args, **kwargs):
            try:
                return await func(client, update, *args, **kwargs)

            except UserInputError as e:
                await self._reply(update, e.user_message)

            except UpstreamError as e:
                _count("UpstreamError")
                context = extract_context(update)
                logger.warning("upstream_failed", handler=func.__name__, error=str(e), status=e.status, **context)
                await self._reply(update, e.user_message)
                await self.report(e, context)

            except FloodWait as e:
                wait_time = e.value + 1
                _count("FloodWait")
                logger.warning("flood_wait", handler=func.__name__, wait=wait_time)
                await asyncio.sleep(wait_time)

            except MessageNotModified:
                pass

            except Exception as e:
                error_name = type(e).__name__
                _count(error_name)
                context = extract_context(update)
                logger.error("handler_failed", handler=func.__name__, error_type=error_name, error=str(e),
                             exc_info=True, **context)
                await self.report(e, context)

                matched, text = describe_platform_error(e)
                if matched and text is None:
                    return None
                if context.get("chat_id") is not None:
                    await self._reply(update, text if matched else self.general_apology)

        return wrapper


def get_error_stats() -> dict:
    """Возвращает статистику ошибок для диагностики."""
    return dict(_error_counts)


def reset_error_stats():
    _error_counts.clear()
