# -*- coding: utf-8 -*-
"""
Клиенты внешних вендорских API (поиск картинок, загрузчики видео/аудио,
скриншоты сайтов, TikTok, Sfile, QR).

Все вызовы идут через единый `_request`, поэтому в тестах достаточно
переопределить его в spy-подклассе. Любая сетевая ошибка, таймаут, не-2xx
или битое тело превращаются в UpstreamError. Повторов нет.
"""

from __future__ import annotations

import asyncio
import random
from typing import Any, Optional
from urllib.parse import quote

import aiohttp
import structlog
from bs4 import BeautifulSoup

from .exceptions import UpstreamError

logger = structlog.get_logger(__name__)

APIFY_BASE = "https://api.apify.com/v2/acts"
YOUTUBE_VIDEO_ACTOR = "streamers~youtube-video-downloader"
YOUTUBE_AUDIO_ACTOR = "scrapearchitect~youtube-audio-mp3-downloader"
TIKWM_URL = "https://tikwm.com/api/"
DLPANDA_URL = "https://dlpanda.com/id"
DLPANDA_TOKEN = "G7eRpMaa"
WAIFU_URL = "https://api.waifu.pics/sfw/neko"
QR_URL = "https://api.qrserver.com/v1/create-qr-code/"

DEVICES = ("desktop", "mobile", "tablet")
MOBILE_UA = "Mozilla/5.0 (Linux; Android 10)"


def normalize_device(device: Optional[str]) -> str:
    """Тип устройства для скриншота; неизвестное значение → desktop."""
    value = (device or "").strip().lower()
    return value if value in DEVICES else "desktop"


def clean_username(raw: str) -> str:
    return (raw or "").strip().replace("@", "")


def extract_slideshow_images(html: str) -> list[str]:
    """Достаёт http-ссылки на картинки слайдшоу из HTML страницы dlpanda."""
    soup = BeautifulSoup(html or "", "html.parser")
    images = []
    for img in soup.select("div.col-md-12 > img"):
        src = img.get("src")
        if src and src.startswith("http"):
            images.append(src)
    return images


def _first_item(data: Any) -> Optional[dict]:
    items = data.get("items") if isinstance(data, dict) else data
    if isinstance(items, list) and items and isinstance(items[0], dict):
        return items[0]
    return None


class VendorClient:
    """Async HTTP-клиент к вендорским API."""

    def __init__(
        self,
        base_url: str = "https://api.vreden.my.id/api",
        apify_key: Optional[str] = None,
        default_timeout: float = 30,
        long_timeout: float = 60,
    ):
        self.base_url = base_url.rstrip("/")
        self.apify_key = (apify_key or "").strip()
        self.default_timeout = default_timeout
        self.long_timeout = long_timeout

    # --- низкоуровневые вызовы ---

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[dict] = None,
        json_body: Any = None,
        form: Optional[dict] = None,
        headers: Optional[dict] = None,
        timeout: Optional[float] = None,
        expect: str = "json",
    ) -> Any:
        """Один HTTP-вызов. expect: json | bytes | text."""
        client_timeout = aiohttp.ClientTimeout(total=timeout or self.default_timeout)
        try:
            async with aiohttp.ClientSession(timeout=client_timeout) as session:
                async with session.request(
                    method, url, params=params, json=json_body, data=form, headers=headers
                ) as resp:
                    if resp.status < 200 or resp.status >= 300:
                        body = await resp.text(errors="replace")
                        raise UpstreamError(f"HTTP {resp.status} from {url}", status=resp.status, body=body[:500])
                    if expect == "bytes":
                        return await resp.read()
                    if expect == "text":
                        return await resp.text()
                    try:
                        return await resp.json(content_type=None)
                    except ValueError as e:
                        raise UpstreamError(f"malformed JSON from {url}: {e}", status=resp.status) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise UpstreamError(f"{type(e).__name__} calling {url}: {e}") from e

    async def _get_json(self, url: str, params: Optional[dict] = None, timeout: Optional[float] = None) -> Any:
        return await self._request("GET", url, params=params, timeout=timeout)

    async def _post_json(self, url: str, payload: Any, params: Optional[dict] = None, timeout: Optional[float] = None) -> Any:
        return await self._request("POST", url, params=params, json_body=payload, timeout=timeout)

    async def _post_form(self, url: str, form: dict, headers: Optional[dict] = None, timeout: Optional[float] = None) -> Any:
        return await self._request("POST", url, form=form, headers=headers, timeout=timeout)

    async def _get_bytes(self, url: str, params: Optional[dict] = None, timeout: Optional[float] = None) -> bytes:
        return await self._request("GET", url, params=params, timeout=timeout, expect="bytes")

    async def _get_text(self, url: str, params: Optional[dict] = None, timeout: Optional[float] = None) -> str:
        return await self._request("GET", url, params=params, timeout=timeout, expect="text")

    def _apify_url(self, actor: str) -> str:
        return f"{APIFY_BASE}/{actor}/run-sync-get-dataset-items"

    # --- операции ---

    async def pinterest_search(self, query: str) -> list[str]:
        data = await self._get_json(f"{self.base_url}/pinterest", {"query": query}, timeout=10)
        result = data.get("result") if isinstance(data, dict) else None
        return [url for url in result or [] if isinstance(url, str)]

    async def instagram_media(self, url: str) -> Optional[dict]:
        """
        Возвращает {"type": "video"|"image", "url": ..., "title": ...}
        (видео приоритетнее картинки) или None.
        """
        data = await self._get_json(f"{self.base_url}/download/instagram2", {"url": url})
        result = data.get("result") if isinstance(data, dict) else None
        if not isinstance(result, dict):
            return None
        media = result.get("media") or []
        for wanted in ("video", "image"):
            for item in media:
                if isinstance(item, dict) and item.get("type") == wanted and item.get("url"):
                    return {"type": wanted, "url": item["url"], "title": result.get("title")}
        return None

    async def youtube_video(self, url: str) -> Optional[dict]:
        data = await self._post_json(
            self._apify_url(YOUTUBE_VIDEO_ACTOR),
            {"videos": [{"url": url}]},
            params={"token": self.apify_key},
            timeout=self.long_timeout,
        )
        item = _first_item(data)
        if not item or not item.get("url"):
            return None
        return {"url": item["url"], "title": item.get("title")}

    async def youtube_audio(self, query: str) -> Optional[dict]:
        search_url = f"https://www.youtube.com/results?search_query={quote(query)}"
        data = await self._post_json(
            self._apify_url(YOUTUBE_AUDIO_ACTOR),
            {"video_urls": [{"url": search_url}]},
            params={"token": self.apify_key},
            timeout=self.long_timeout,
        )
        item = _first_item(data)
        if not item or not item.get("audio_url"):
            return None
        return {"url": item["audio_url"], "title": item.get("title")}

    async def screenshot(self, url: str, device: str = "desktop") -> bytes:
        return await self._get_bytes(
            f"{self.base_url}/ssweb", {"url": url, "type": normalize_device(device)}
        )

    async def tiktok_video(self, url: str) -> Optional[dict]:
        data = await self._post_form(
            TIKWM_URL,
            {"url": url, "hd": "1"},
            headers={"Cookie": "current_language=en", "User-Agent": MOBILE_UA},
        )
        result = data.get("data") if isinstance(data, dict) else None
        if not isinstance(result, dict) or not result.get("play"):
            return None
        return {"url": result["play"], "title": result.get("title")}

    async def tiktok_slideshow(self, url: str) -> list[str]:
        html = await self._get_text(DLPANDA_URL, {"url": url, "token": DLPANDA_TOKEN})
        return extract_slideshow_images(html)

    async def random_adult_video(self) -> Optional[str]:
        data = await self._get_json(f"{self.base_url}/hentaivid", timeout=15)
        result = data.get("result") if isinstance(data, dict) else None
        if isinstance(result, list) and result:
            item = random.choice(result)
            if isinstance(item, dict):
                return item.get("video_1") or item.get("video_2") or item.get("link")
            return None
        if isinstance(result, dict):
            return result.get("url")
        return None

    async def sfile_search(self, query: str) -> list[dict]:
        data = await self._get_json(f"{self.base_url}/sfile-search", {"query": query})
        result = data.get("result") if isinstance(data, dict) else None
        return [item for item in result or [] if isinstance(item, dict)]

    async def tiktok_profile(self, username: str) -> Optional[dict]:
        """Профиль TikTok: {"user": {...}, "stats": {...}, "avatar": url|None} или None."""
        data = await self._get_json(f"{self.base_url}/tiktokStalk", {"query": clean_username(username)})
        result = data.get("result") if isinstance(data, dict) else None
        if not isinstance(result, dict) or not isinstance(result.get("user"), dict):
            return None
        user = result["user"]
        return {
            "user": user,
            "stats": result.get("stats") or result.get("statsV2") or {},
            "avatar": user.get("avatarLarger") or user.get("avatarMedium") or user.get("avatarThumb"),
        }

    async def random_image(self) -> Optional[str]:
        """Случайная картинка для меню. Ошибка не критична: логируем и отдаём None."""
        try:
            data = await self._get_json(WAIFU_URL, timeout=10)
        except UpstreamError as e:
            logger.error("random_image_failed", error=str(e))
            return None
        url = data.get("url") if isinstance(data, dict) else None
        return url if isinstance(url, str) and url else None

    @staticmethod
    def qr_code_url(data: str, size: int = 400) -> str:
        return f"{QR_URL}?size={size}x{size}&data={quote(data, safe='')}"
