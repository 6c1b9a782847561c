# -*- coding: utf-8 -*-
"""
Tools Handler — команды поверх внешних API: поиск картинок, загрузчики
Instagram/YouTube/TikTok, скриншоты сайтов, QR, поиск файлов, профиль TikTok.

Общий контракт хэндлера: нет аргумента → подсказка (UserInputError),
иначе один-два вызова VendorClient и ответ. Ошибки внешних API
(UpstreamError) разбирает safe_handler.
"""

import asyncio
import os
import time

from pyrogram import enums, filters
from pyrogram.types import InlineKeyboardButton, InlineKeyboardMarkup, Message

from morabot.core.exceptions import UserInputError
from morabot.core.vendor_api import clean_username, normalize_device

from .auth import command_argument, is_operator
from .keyboards import link_buttons

import structlog

logger = structlog.get_logger(__name__)

SFILE_LIMIT = 10
SLIDESHOW_DELAY = 1

USAGE = {
    "ig": "❌ Укажи ссылку на Instagram. Пример: `/ig https://www.instagram.com/reel/xxxx/`",
    "yt": "❌ Укажи ссылку на YouTube. Пример: `/yt https://youtu.be/dQw4w9WgXcQ`",
    "play": "🎵 Укажи название трека. Пример: `/play lofi hip hop`",
    "ssweb": (
        "📸 **Скриншот сайта**\n\n"
        "Формат: `/ssweb <url> [desktop|mobile|tablet]`\n"
        "Пример: `/ssweb https://github.com mobile`"
    ),
    "tiktok": "🔗 Укажи ссылку на TikTok. Пример: `/tiktok https://vt.tiktok.com/xxxx/`",
    "qr": "📱 **QR-код**\n\nУкажи текст или ссылку. Пример: `/qr https://google.com`",
    "sc": "🔍 **Поиск файлов**\n\nУкажи запрос. Пример: `/sc android apk`",
    "profil": "👤 **Профиль TikTok**\n\nУкажи username. Пример: `/profil @username`",
}


def require_argument(message: Message, usage: str) -> str:
    value = command_argument(message)
    if not value:
        raise UserInputError("missing command argument", user_message=usage)
    return value


def format_sfile_results(query: str, results: list[dict]) -> str:
    lines = [f"🔍 **Результаты поиска по «{query}»:**\n"]
    for index, item in enumerate(results[:SFILE_LIMIT], start=1):
        lines.append(
            f"{index}. **{item.get('title', '-')}**\n"
            f"   Размер: {item.get('size', '-')}\n"
            f"   Ссылка: {item.get('link', '-')}\n"
        )
    if len(results) > SFILE_LIMIT:
        lines.append(f"__Показаны первые {SFILE_LIMIT}, ещё {len(results) - SFILE_LIMIT} скрыто.__")
    return "\n".join(lines)


def format_tiktok_profile(profile: dict) -> str:
    user = profile["user"]
    stats = profile.get("stats") or {}
    return (
        "👤 **Профиль TikTok**\n\n"
        f"🆔 Username: @{user.get('uniqueId', '-')}\n"
        f"📝 Имя: {user.get('nickname') or 'нет'}\n"
        f"👥 Подписчики: {stats.get('followerCount', 0)}\n"
        f"➡️ Подписки: {stats.get('followingCount', 0)}\n"
        f"❤️ Лайки: {stats.get('heartCount', 0)}\n"
        f"🎥 Видео: {stats.get('videoCount', 0)}\n"
        f"📝 Био: {user.get('signature') or 'нет'}\n"
        f"✅ Верифицирован: {'да' if user.get('verified') else 'нет'}\n"
        f"🔒 Закрытый: {'да' if user.get('privateAccount') else 'нет'}"
    )


def register_handlers(app, deps: dict):
    safe_handler = deps["safe_handler"]
    vendors = deps["vendors"]
    profile = deps["profile"]
    config = deps["config"]

    @app.on_message(filters.command("pin"))
    @safe_handler
    async def pin_command(client, message: Message):
        """Поиск картинок: первая найденная."""
        query = require_argument(message, profile.message("errors.invalid_query"))
        await client.send_chat_action(message.chat.id, enums.ChatAction.UPLOAD_PHOTO)
        images = await vendors.pinterest_search(query)
        if not images:
            await message.reply_text(f"❌ Ничего не найдено по запросу «{query}»")
            return
        await message.reply_photo(images[0], caption=f"📌 Результат для: **{query}**")

    @app.on_message(filters.command("ig"))
    @safe_handler
    async def ig_command(client, message: Message):
        url = require_argument(message, USAGE["ig"])
        await client.send_chat_action(message.chat.id, enums.ChatAction.UPLOAD_VIDEO)
        media = await vendors.instagram_media(url)
        if not media:
            await message.reply_text("❌ Не удалось скачать медиа из Instagram. Проверь ссылку.")
            return
        caption = f"✅ Скачано из Instagram\nНазвание: {media.get('title') or 'без названия'}"
        if media["type"] == "video":
            await message.reply_video(media["url"], caption=caption)
        else:
            await message.reply_photo(media["url"], caption=caption)

    @app.on_message(filters.command("yt"))
    @safe_handler
    async def yt_command(client, message: Message):
        url = require_argument(message, USAGE["yt"])
        await client.send_chat_action(message.chat.id, enums.ChatAction.UPLOAD_VIDEO)
        video = await vendors.youtube_video(url)
        if not video:
            await message.reply_text("❌ Не удалось скачать видео с YouTube. Проверь ссылку или попробуй позже.")
            return
        await message.reply_video(
            video["url"], caption=f"✅ Скачано с YouTube\nНазвание: {video.get('title') or 'без названия'}"
        )

    @app.on_message(filters.command("play"))
    @safe_handler
    async def play_command(client, message: Message):
        query = require_argument(message, USAGE["play"])
        await client.send_chat_action(message.chat.id, enums.ChatAction.UPLOAD_AUDIO)
        audio = await vendors.youtube_audio(query)
        if not audio:
            await message.reply_text(f"❌ Трек «{query}» не найден или не скачался. Попробуй позже.")
            return
        await message.reply_audio(
            audio["url"], caption=f"✅ Аудио с YouTube\nНазвание: {audio.get('title') or 'без названия'}"
        )

    @app.on_message(filters.command("ssweb"))
    @safe_handler
    async def ssweb_command(client, message: Message):
        """Скриншот сайта: /ssweb <url> [desktop|mobile|tablet]."""
        raw = require_argument(message, USAGE["ssweb"])
        parts = raw.split()
        url = parts[0]
        device = normalize_device(parts[1] if len(parts) > 1 else None)
        if not url.startswith(("http://", "https://")):
            raise UserInputError("bad url", user_message="❌ URL должен начинаться с http:// или https://")

        await client.send_chat_action(message.chat.id, enums.ChatAction.UPLOAD_PHOTO)
        image = await vendors.screenshot(url, device)

        os.makedirs(config.TEMP_DIR, exist_ok=True)
        temp_file = os.path.join(config.TEMP_DIR, f"screenshot_{int(time.time() * 1000)}.jpg")
        with open(temp_file, "wb") as f:
            f.write(image)
        try:
            await message.reply_photo(temp_file, caption=f"📸 Скриншот {url}\nУстройство: {device}")
        finally:
            os.remove(temp_file)

    @app.on_message(filters.command("tiktok"))
    @safe_handler
    async def tiktok_command(client, message: Message):
        """Видео без водяного знака или фото слайдшоу (ссылки с /photo/)."""
        url = require_argument(message, USAGE["tiktok"])
        if "tiktok.com" not in url:
            raise UserInputError("not a tiktok url", user_message="❌ Это не ссылка на TikTok.")
        await message.reply_text("⏳ Обрабатываю, подожди...")

        if "/photo/" in url:
            images = await vendors.tiktok_slideshow(url)
            if not images:
                await message.reply_text("❌ Не удалось скачать слайдшоу. Попробуй другую ссылку.")
                return
            await message.reply_text(f"✅ Найдено фото в слайдшоу: {len(images)}. Отправляю...")
            for image_url in images:
                await client.send_photo(message.chat.id, image_url)
                await asyncio.sleep(SLIDESHOW_DELAY)
            return

        video = await vendors.tiktok_video(url)
        if not video:
            await message.reply_text("❌ Не удалось получить видео. Возможно, ссылка неверная.")
            return
        await message.reply_video(
            video["url"],
            caption=f"🎬 **{video.get('title') or 'Без названия'}**\n\n✅ Видео без водяного знака.",
        )

    @app.on_message(filters.command("hentai") & filters.private)
    @safe_handler
    async def adult_command(client, message: Message):
        """18+ видео: только оператор и только в личке."""
        if not is_operator(message):
            await message.reply_text("⛔ Команда доступна только оператору.")
            return
        await client.send_chat_action(message.chat.id, enums.ChatAction.UPLOAD_VIDEO)
        video_url = await vendors.random_adult_video()
        if not video_url:
            await message.reply_text("❌ Не удалось получить видео. Попробуй позже.")
            return
        await message.reply_video(video_url, caption="🔞 **Контент 18+**")
        logger.info("adult_video_sent", user_id=message.from_user.id)

    @app.on_message(filters.command("qr"))
    @safe_handler
    async def qr_command(client, message: Message):
        data = require_argument(message, USAGE["qr"])
        await client.send_chat_action(message.chat.id, enums.ChatAction.UPLOAD_PHOTO)
        qr_url = vendors.qr_code_url(data)
        await message.reply_photo(
            qr_url,
            caption=f"📱 **QR-код готов!**\n\n📝 Данные: `{data}`\n📏 Размер: 400x400 px",
            reply_markup=link_buttons(qr_url, "🔗 Открыть QR"),
        )
        logger.info("qr_created", user_id=getattr(message.from_user, "id", None), length=len(data))

    @app.on_message(filters.command("sc"))
    @safe_handler
    async def sfile_command(client, message: Message):
        query = require_argument(message, USAGE["sc"])
        await client.send_chat_action(message.chat.id, enums.ChatAction.TYPING)
        results = await vendors.sfile_search(query)
        if not results:
            await message.reply_text(f"❌ По запросу «{query}» ничего не найдено.")
            return
        await message.reply_text(format_sfile_results(query, results), disable_web_page_preview=True)
        logger.info("sfile_search", query=query, found=len(results))

    @app.on_message(filters.command("profil"))
    @safe_handler
    async def profile_command(client, message: Message):
        username = clean_username(require_argument(message, USAGE["profil"]))
        await client.send_chat_action(message.chat.id, enums.ChatAction.UPLOAD_PHOTO)
        tiktok = await vendors.tiktok_profile(username)
        if not tiktok:
            await message.reply_text(f"❌ Пользователь TikTok «{username}» не найден.")
            return
        if not tiktok.get("avatar"):
            await message.reply_text(f"❌ Не удалось получить фото профиля «{username}».")
            return
        unique_id = tiktok["user"].get("uniqueId") or username
        await message.reply_photo(
            tiktok["avatar"],
            caption=format_tiktok_profile(tiktok),
            reply_markup=InlineKeyboardMarkup([
                [InlineKeyboardButton("🔗 Профиль в TikTok", url=f"https://www.tiktok.com/@{unique_id}")]
            ]),
        )
