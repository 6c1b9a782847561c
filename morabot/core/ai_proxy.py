# -*- coding: utf-8 -*-
"""
AI Proxy: один ход диалога против внешнего completion-эндпоинта.

Эндпоинт stateless: на вход только сырой текст пользователя и непрозрачный
ключ сессии (chat id). История ведётся локально; при сбое вызова
добавленная реплика пользователя откатывается. Повторов нет.
"""

from __future__ import annotations

import asyncio

import aiohttp
import structlog

from .exceptions import StorageError, UpstreamError

logger = structlog.get_logger(__name__)


class CompletionClient:
    """Async HTTP-клиент к completion API (GET ?query=..&username=..)."""

    def __init__(self, api_url: str, timeout: float = 30):
        self.api_url = api_url
        self.timeout = timeout

    async def _request_json(self, params: dict[str, str]) -> object:
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(self.api_url, params=params) as resp:
                    body = await resp.text()
                    if resp.status < 200 or resp.status >= 300:
                        raise UpstreamError(f"HTTP {resp.status}", status=resp.status, body=body[:500])
                    try:
                        return await resp.json(content_type=None)
                    except ValueError as e:
                        raise UpstreamError(f"malformed body: {e}", status=resp.status, body=body[:500]) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise UpstreamError(f"{type(e).__name__}: {e}") from e

    async def complete(self, query: str, session_key: str) -> str:
        data = await self._request_json({"query": query, "username": str(session_key)})
        result = data.get("result") if isinstance(data, dict) else None
        if not isinstance(result, str) or not result.strip():
            raise UpstreamError("completion response has no text result")
        return result


class AIProxy:
    """
    Посредник между чатом и completion API.

    deps:
        store: ConversationStore
        client: CompletionClient
        flags: FeatureFlags
        personas: PersonaManager
        profile: ConfigManager (фиксированные тексты ошибок)
    """

    def __init__(self, store, client: CompletionClient, flags, personas, profile):
        self.store = store
        self.client = client
        self.flags = flags
        self.personas = personas
        self.profile = profile

    @property
    def disabled_notice(self) -> str:
        return self.profile.message("errors.ai_disabled")

    @property
    def failure_notice(self) -> str:
        return self.profile.message("errors.api_failure")

    async def get_reply(self, chat_id: int, user_text: str) -> str:
        """Возвращает ответ AI (или фиксированный текст, если AI выключен / вызов упал)."""
        if not self.flags.ai.enabled:
            return self.disabled_notice

        async with self.store.lock(chat_id):
            self.store.ensure(chat_id, self.personas.default_prompt())
            self.store.append(chat_id, "user", user_text)

            try:
                reply = await self.client.complete(user_text, str(chat_id))
            except UpstreamError as e:
                # Откат: история возвращается к состоянию до вызова
                self.store.pop_last(chat_id)
                logger.error("ai_call_failed", chat_id=chat_id, error=str(e), status=e.status)
                return self.failure_notice

            self.store.append(chat_id, "assistant", reply)
            try:
                self.store.save()
            except StorageError as e:
                # История остаётся в памяти, её сбросит плановый flush
                logger.error("history_save_failed", chat_id=chat_id, error=str(e))
            return reply

