# -*- coding: utf-8 -*-
"""
Auth Utilities — общие утилиты для обработчиков: проверка оператора
и разбор аргумента команды.
"""

from typing import Optional

from pyrogram.types import Message

from morabot.config import Config


def is_operator(update) -> bool:
    """
    Проверяет, что отправитель сообщения/нажатия кнопки — оператор бота.
    Если OPERATOR_CHAT_ID не задан, операторов нет.
    """
    user = getattr(update, "from_user", None)
    if not user or not Config.OPERATOR_CHAT_ID:
        return False
    return user.id == Config.OPERATOR_CHAT_ID


def command_argument(message: Message) -> Optional[str]:
    """Текст после команды (`/pin котики` → `котики`), None если аргумента нет."""
    text = message.text or message.caption or ""
    parts = text.split(maxsplit=1)
    if len(parts) < 2:
        return None
    return parts[1].strip() or None


def display_name(user) -> str:
    if user is None:
        return "Пользователь"
    return user.first_name or user.username or "Пользователь"
