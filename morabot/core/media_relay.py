# -*- coding: utf-8 -*-
"""
Media Relay: вложение из Telegram → публичный файловый хостинг → ссылка.

Шаги:
1. Проверка размера (video/audio/document — не больше 200 MB) ДО скачивания.
2. Скачивание байтов из Telegram с таймаутом (без повторов).
3. Multipart-загрузка на хостинг. Успех — только если тело ответа само является
   URL на домене хостинга; иначе ошибка с сырым телом ответа.

Повторная пересылка того же файла даёт новую ссылку (идемпотентности нет).
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional
from urllib.parse import urlparse

import aiohttp
import structlog

logger = structlog.get_logger(__name__)

MAX_UPLOAD_BYTES = 200 * 1024 * 1024
# photo/voice не проверяем: полагаемся на лимиты Telegram
SIZE_CHECKED_KINDS = frozenset({"video", "audio", "document"})
TOO_LARGE = "too_large"


def exceeds_limit(kind: str, file_size: Optional[int]) -> bool:
    return kind in SIZE_CHECKED_KINDS and bool(file_size) and file_size > MAX_UPLOAD_BYTES


@dataclass
class RelayResult:
    ok: bool
    url: Optional[str] = None
    error: Optional[str] = None


def is_host_link(body: str, link_prefix: str) -> bool:
    """Ответ хостинга — это ровно одна ссылка на его домене."""
    candidate = (body or "").strip()
    if not candidate.startswith(link_prefix) or any(ch.isspace() for ch in candidate):
        return False
    parsed = urlparse(candidate)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc) and len(parsed.path) > 1


class UploadHostClient:
    """Клиент файлового хостинга (catbox-совместимый API)."""

    def __init__(
        self,
        upload_url: str = "https://catbox.moe/user/api.php",
        link_prefix: str = "https://files.catbox.moe/",
        userhash: Optional[str] = None,
        timeout: float = 30,
    ):
        self.upload_url = upload_url
        self.link_prefix = link_prefix
        self.userhash = (userhash or "").strip()
        self.timeout = timeout

    def _build_form(self, data: bytes, file_name: str) -> aiohttp.FormData:
        form = aiohttp.FormData()
        form.add_field("reqtype", "fileupload")
        if self.userhash:
            form.add_field("userhash", self.userhash)
        form.add_field("fileToUpload", data, filename=file_name)
        return form

    async def _post(self, data: bytes, file_name: str) -> str:
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.post(self.upload_url, data=self._build_form(data, file_name)) as resp:
                return await resp.text()

    async def upload(self, data: bytes, file_name: str) -> RelayResult:
        try:
            body = await self._post(data, file_name)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("upload_failed", file_name=file_name, error=str(e))
            return RelayResult(ok=False, error=str(e) or type(e).__name__)

        if is_host_link(body, self.link_prefix):
            return RelayResult(ok=True, url=body.strip())
        logger.warning("upload_rejected", file_name=file_name, body=(body or "")[:200])
        return RelayResult(ok=False, error=body or "Загрузка не удалась")


Fetcher = Callable[[str], Awaitable[bytes]]


class TelegramFileFetcher:
    """Скачивание вложения через pyrogram в память."""

    def __init__(self, client):
        self.client = client

    async def __call__(self, file_id: str) -> bytes:
        buffer = await self.client.download_media(file_id, in_memory=True)
        return bytes(buffer.getbuffer())


class MediaRelay:
    def __init__(self, fetcher: Fetcher, uploader: UploadHostClient, fetch_timeout: float = 30):
        self.fetcher = fetcher
        self.uploader = uploader
        self.fetch_timeout = fetch_timeout

    async def relay(
        self,
        file_ref: str,
        file_name: str,
        kind: str,
        file_size: Optional[int] = None,
    ) -> RelayResult:
        if exceeds_limit(kind, file_size):
            logger.info("relay_rejected_size", kind=kind, file_size=file_size)
            return RelayResult(ok=False, error=TOO_LARGE)

        try:
            data = await asyncio.wait_for(self.fetcher(file_ref), timeout=self.fetch_timeout)
        except asyncio.TimeoutError:
            logger.error("relay_fetch_timeout", kind=kind, timeout=self.fetch_timeout)
            return RelayResult(ok=False, error=f"download timed out after {self.fetch_timeout:.0f}s")
        except Exception as e:
            logger.error("relay_fetch_failed", kind=kind, error=str(e))
            return RelayResult(ok=False, error=str(e) or type(e).__name__)

        result = await self.uploader.upload(data, file_name)
        if result.ok:
            logger.info("relay_done", kind=kind, url=result.url, size=len(data))
        return result
