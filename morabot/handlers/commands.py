# -*- coding: utf-8 -*-
"""
Commands Handler — базовые команды бота: /start, /help, /stats, /clear,
/bot (панель управления), /createpanel (меню тарифов панели).
"""

import os
from typing import Optional

from pyrogram import filters
from pyrogram.types import InlineKeyboardMarkup, Message

from .auth import display_name
from .keyboards import render_control_panel, render_panel_plans, status_label

import structlog

logger = structlog.get_logger(__name__)


def build_stats_text(store, user_cache, flags, profile, chat_id: int = None, budget: int = 900) -> str:
    history_path = store.backend.path
    size_kb = round(os.path.getsize(history_path) / 1024) if os.path.isfile(history_path) else 0
    text = (
        "📊 **Статистика бота**\n"
        f"• 👥 Пользователей: {len(user_cache)}\n"
        f"• 💬 Активных диалогов: {store.chat_count()}\n"
        f"• 🧠 Размер памяти: {size_kb} KB\n"
        f"• ⚙️ Версия: {profile.get('bot.version')}\n"
        f"• 🤖 AI: {status_label(flags.ai.enabled)}\n"
        f"• 📤 Загрузка файлов: {status_label(flags.upload.enabled)}"
    )
    if chat_id is not None and store.has(chat_id):
        window = store.context(chat_id, budget)
        text += f"\n• 🪟 Окно контекста чата: {len(window)} из {len(store.get(chat_id))} сообщений"
    return text


def build_bot_info(profile, flags) -> str:
    return (
        "🤖 **О боте**\n\n"
        f"• **Имя:** {profile.bot_name()}\n"
        f"• **Версия:** {profile.get('bot.version')}\n"
        f"• **Описание:** {profile.get('bot.description')}\n"
        f"• **Обновлён:** {profile.get('bot.last_update')}\n"
        f"• **AI:** {status_label(flags.ai.enabled)}\n"
        f"• **Загрузка файлов:** {status_label(flags.upload.enabled)}"
    )


def build_upload_info(flags) -> str:
    header = f"📤 **Загрузка файлов**\n\nСтатус: {status_label(flags.upload.enabled)}\n\n"
    if not flags.upload.enabled:
        return header + "Загрузка сейчас выключена. Оператор может включить её через /bot."
    return header + (
        "Отправь боту фото, видео, аудио, документ или голосовое, и он вернёт "
        "прямую публичную ссылку на файл.\n\n"
        "**Ограничения:**\n"
        "• видео, аудио и документы до 200 MB\n"
        "• не загружай незаконный контент и чужие материалы"
    )


async def send_menu(client, chat_id: int, vendors, caption: str, markup: Optional[InlineKeyboardMarkup] = None):
    """Меню с картинкой; если картинку получить не удалось, отправляем текстом."""
    image = await vendors.random_image()
    if image:
        return await client.send_photo(chat_id, image, caption=caption, reply_markup=markup)
    return await client.send_message(chat_id, caption, reply_markup=markup)


async def send_panel_menu(client, chat_id: int, vendors):
    await send_menu(client, chat_id, vendors, "🔧 **Создание панели**\n\nВыбери тариф:", render_panel_plans())


def register_handlers(app, deps: dict):
    safe_handler = deps["safe_handler"]
    profile = deps["profile"]
    personas = deps["personas"]
    store = deps["store"]
    user_cache = deps["user_cache"]
    flags = deps["flags"]
    vendors = deps["vendors"]
    config = deps["config"]

    @app.on_message(filters.command("start"))
    @safe_handler
    async def start_command(client, message: Message):
        """Приветствие."""
        user = message.from_user
        text = profile.message("welcome", name=display_name(user), user_id=getattr(user, "id", None))
        await send_menu(
            client,
            message.chat.id,
            vendors,
            f"{text}\n\n📤 Загрузка файлов: {status_label(flags.upload.enabled)}",
        )

    @app.on_message(filters.command("help"))
    @safe_handler
    async def help_command(client, message: Message):
        await message.reply_text(profile.message("help", name=display_name(message.from_user)))

    @app.on_message(filters.command("stats"))
    @safe_handler
    async def stats_command(client, message: Message):
        await message.reply_text(build_stats_text(
            store, user_cache, flags, profile, chat_id=message.chat.id, budget=config.CONTEXT_TOKEN_BUDGET
        ))

    @app.on_message(filters.command("clear"))
    @safe_handler
    async def clear_command(client, message: Message):
        """Очистка памяти диалога (остаётся system-промпт по умолчанию)."""
        chat_id = message.chat.id
        async with store.lock(chat_id):
            store.reset(chat_id, personas.default_prompt())
            store.save()
        logger.info("history_cleared", chat_id=chat_id)
        await message.reply_text("🧹 Память диалога очищена!")

    @app.on_message(filters.command("bot"))
    @safe_handler
    async def bot_command(client, message: Message):
        """Панель управления."""
        await send_menu(
            client,
            message.chat.id,
            vendors,
            "🤖 **Панель управления**\n\nУправляй функциями бота:",
            render_control_panel(flags),
        )
        logger.info("control_panel_opened", user_id=getattr(message.from_user, "id", None))

    @app.on_message(filters.command("createpanel"))
    @safe_handler
    async def createpanel_command(client, message: Message):
        await send_panel_menu(client, message.chat.id, vendors)
        logger.info("panel_menu_opened", user_id=getattr(message.from_user, "id", None))
