# -*- coding: utf-8 -*-
"""
AI Handler — свободный текст (не команда, не медиа) уходит в AIProxy.

Первое сообщение нового пользователя дополнительно отправляет
уведомление оператору.
"""

from pyrogram import enums, filters
from pyrogram.types import Message

from .auth import display_name

import structlog

logger = structlog.get_logger(__name__)


def register_handlers(app, deps: dict):
    safe_handler = deps["safe_handler"]
    ai_proxy = deps["ai_proxy"]
    user_cache = deps["user_cache"]
    notifier = deps["notifier"]

    @app.on_message(filters.text & ~filters.regex(r"^/"))
    @safe_handler
    async def auto_reply(client, message: Message):
        """Ответ AI на обычное сообщение."""
        user = message.from_user
        text = message.text or ""
        if not text.strip():
            return

        if user and user_cache.remember(user.id):
            logger.info("new_user", user_id=user.id)
            await notifier.notify_new_user(user.id, display_name(user), user.username, text)

        await client.send_chat_action(message.chat.id, enums.ChatAction.TYPING)
        reply = await ai_proxy.get_reply(message.chat.id, text)
        await message.reply_text(reply)
