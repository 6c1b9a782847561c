# -*- coding: utf-8 -*-
"""
Group Handler — события участников группы:
бота добавили (представление и статус функций), участник вошёл
(приветствие), участник вышел (прощание).
"""

from pyrogram import filters
from pyrogram.types import Message

from .keyboards import status_label

import structlog

logger = structlog.get_logger(__name__)


def build_intro(profile, flags) -> str:
    upload_hint = (
        "Присылайте файлы, и я верну на них публичную ссылку."
        if flags.upload.enabled
        else "Оператор может включить загрузку через /bot."
    )
    return (
        f"{profile.message('group.bot_added')}\n\n"
        f"📤 **Загрузка файлов:** {status_label(flags.upload.enabled)}\n{upload_hint}\n\n"
        "📱 /qr <текст> — QR-код\n"
        "🔍 /sc <запрос> — поиск файлов\n"
        "👤 /profil <username> — профиль TikTok"
    )


def member_name(user) -> str:
    return user.first_name or user.username or "Кто-то"


def register_handlers(app, deps: dict):
    safe_handler = deps["safe_handler"]
    profile = deps["profile"]
    flags = deps["flags"]

    @app.on_message(filters.new_chat_members)
    @safe_handler
    async def members_joined(client, message: Message):
        chat = message.chat
        me = await client.get_me()
        for member in message.new_chat_members:
            if member.id == me.id:
                logger.info("bot_added_to_group", chat_id=chat.id, title=chat.title)
                await client.send_message(chat.id, build_intro(profile, flags))
                continue
            name = member_name(member)
            await client.send_message(
                chat.id,
                profile.message("group.welcome", name=name, user_id=member.id, group_name=chat.title),
            )
            logger.info("member_joined", chat_id=chat.id, user_id=member.id)

    @app.on_message(filters.left_chat_member)
    @safe_handler
    async def member_left(client, message: Message):
        chat = message.chat
        member = message.left_chat_member
        me = await client.get_me()
        if member.id == me.id:
            logger.info("bot_removed_from_group", chat_id=chat.id, title=chat.title)
            return
        await client.send_message(
            chat.id,
            profile.message("group.farewell", name=member_name(member), user_id=member.id, group_name=chat.title),
        )
        logger.info("member_left", chat_id=chat.id, user_id=member.id)
