# -*- coding: utf-8 -*-
"""
Иерархия исключений Morabot.

Базовый BotError с user_message для единообразной обработки и безопасного
отображения сообщений пользователю. Повторов нет нигде: любая ошибка
завершает текущий вызов обработчика.
"""

from typing import Optional


class BotError(Exception):
    """
    Базовое исключение приложения.

    Параметры:
        message: внутреннее сообщение для логов/отладки (первый позиционный аргумент).
        user_message: текст, безопасный для показа пользователю (по умолчанию = message).
    """

    def __init__(self, message: str = "", *, user_message: str = "") -> None:
        super().__init__(message)
        self.user_message = user_message or message


class UserInputError(BotError):
    """
    Не хватает обязательного аргумента команды или он некорректен.
    Отвечаем подсказкой по использованию, оператора не беспокоим.
    """


class UpstreamError(BotError):
    """
    Ошибка внешнего API: таймаут, не-2xx ответ или битое тело.
    """

    def __init__(
        self,
        message: str = "",
        *,
        status: Optional[int] = None,
        body: Optional[str] = None,
        user_message: str = "",
    ) -> None:
        super().__init__(
            message,
            user_message=user_message or "❌ Внешний сервис не ответил. Попробуй позже.",
        )
        self.status = status
        self.body = body


class StorageError(BotError):
    """
    Не удалось записать JSON-хранилище на диск.
    """

    def __init__(self, message: str = "", *, user_message: str = "") -> None:
        super().__init__(
            message,
            user_message=user_message or "❌ Ошибка хранилища. Попробуй позже.",
        )
