# -*- coding: utf-8 -*-
"""
Media Handler — фото, видео, аудио, документы и голосовые пересылаются
на публичный файловый хостинг (MediaRelay), пользователю уходит ссылка.
Работает только при включённом флаге загрузки.
"""

from typing import Optional

from pyrogram import filters
from pyrogram.types import Message

from morabot.core.media_relay import TOO_LARGE, exceeds_limit

from .keyboards import link_buttons

import structlog

logger = structlog.get_logger(__name__)

KIND_LABELS = {
    "photo": "Фото",
    "video": "Видео",
    "audio": "Аудио",
    "document": "Документ",
    "voice": "Голосовое",
}
DEFAULT_EXTENSIONS = {
    "photo": "jpg",
    "video": "mp4",
    "audio": "mp3",
    "document": "bin",
    "voice": "ogg",
}


def describe_attachment(message: Message) -> Optional[tuple[str, object]]:
    """(kind, media) для первого поддерживаемого вложения."""
    for kind in ("photo", "video", "audio", "document", "voice"):
        media = getattr(message, kind, None)
        if media:
            return kind, media
    return None


def attachment_file_name(kind: str, media, message_id: int) -> str:
    name = getattr(media, "file_name", None)
    if isinstance(name, str) and name:
        return name
    return f"{kind}_{message_id}.{DEFAULT_EXTENSIONS[kind]}"


def register_handlers(app, deps: dict):
    safe_handler = deps["safe_handler"]
    relay = deps["relay"]
    flags = deps["flags"]

    media_filter = filters.photo | filters.video | filters.audio | filters.document | filters.voice

    @app.on_message(media_filter)
    @safe_handler
    async def media_upload(client, message: Message):
        """Загрузка вложения на хостинг."""
        if not flags.upload.enabled:
            return

        attachment = describe_attachment(message)
        if attachment is None:
            return
        kind, media = attachment
        label = KIND_LABELS[kind]
        file_size = getattr(media, "file_size", None)
        if exceeds_limit(kind, file_size):
            await message.reply_text(f"❌ {label} слишком большое: максимум 200 MB.")
            return

        progress = await message.reply_text(f"⏳ Загружаю {label.lower()}...")
        result = await relay.relay(
            media.file_id,
            attachment_file_name(kind, media, message.id),
            kind,
            file_size,
        )

        if result.ok:
            await progress.edit_text(
                f"✅ {label} загружено!\n\n🔗 {result.url}",
                reply_markup=link_buttons(result.url),
                disable_web_page_preview=True,
            )
            return

        if result.error == TOO_LARGE:
            await progress.edit_text(f"❌ {label} слишком большое: максимум 200 MB.")
            return

        logger.warning("media_relay_failed", kind=kind, error=result.error)
        await progress.edit_text(f"❌ Не удалось загрузить файл: {result.error}")
