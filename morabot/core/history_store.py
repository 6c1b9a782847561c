# -*- coding: utf-8 -*-
"""
Хранилище истории диалогов.

Структура: {chat_id: [{role, content, timestamp}, ...]} в порядке поступления.
На диске ключи — строки, в памяти — int. Документ читается при старте
и перезаписывается целиком при каждом save().

Связь: AIProxy (добавление/откат реплик), команды /clear и выбор личности (reset),
планировщик и shutdown (save).
"""

import asyncio
import json
import time
from typing import Any, Optional

import structlog

from .context_window import select_context
from .json_store import JsonFileBackend

logger = structlog.get_logger(__name__)

ROLES = ("system", "user", "assistant")


def now_ms() -> int:
    return int(time.time() * 1000)


def is_valid_message(message: Any) -> bool:
    """Сообщение сохраняется, только если есть и role, и content."""
    return isinstance(message, dict) and bool(message.get("role")) and bool(message.get("content"))


class ConversationStore:
    """История диалогов в памяти + JSON-бэкенд."""

    def __init__(self, backend: JsonFileBackend):
        self.backend = backend
        self._history: dict[int, list[dict]] = {}
        self._locks: dict[int, asyncio.Lock] = {}

    # ---------- persistence ----------
    def load(self) -> None:
        """Загружает историю. Битый файл уходит в карантин, история начинается пустой."""
        self._history = {}
        if not self.backend.exists():
            return

        try:
            data = self.backend.read()
            if not isinstance(data, dict):
                raise ValueError("conversation store root must be an object")
        except (json.JSONDecodeError, UnicodeDecodeError, ValueError) as e:
            logger.error("history_load_failed", path=self.backend.path, error=str(e))
            self.backend.quarantine()
            return

        for raw_chat_id, messages in data.items():
            try:
                chat_id = int(raw_chat_id)
            except (TypeError, ValueError):
                logger.warning("history_chat_id_skipped", chat_id=raw_chat_id)
                continue
            if not isinstance(messages, list):
                continue
            self._history[chat_id] = [
                {**msg, "timestamp": msg.get("timestamp") or now_ms()}
                for msg in messages
                if is_valid_message(msg)
            ]
        logger.info("history_loaded", chats=len(self._history))

    def save(self) -> None:
        """Перезаписывает документ целиком (битые сообщения отбрасываются)."""
        payload = {
            str(chat_id): [msg for msg in messages if is_valid_message(msg)]
            for chat_id, messages in self._history.items()
        }
        self.backend.write(payload)

    # ---------- access ----------
    def has(self, chat_id: int) -> bool:
        return chat_id in self._history

    def get(self, chat_id: int) -> list[dict]:
        """Копия истории чата (пустой список, если чата нет)."""
        return list(self._history.get(chat_id, []))

    def chat_count(self) -> int:
        return len(self._history)

    def context(self, chat_id: int, budget: int) -> list[dict]:
        """Окно контекста для чата (см. context_window.select_context)."""
        return select_context(self._history.get(chat_id, []), budget)

    def lock(self, chat_id: int) -> asyncio.Lock:
        """Лок на чат: ходы AI в одном чате выполняются строго по очереди."""
        lock = self._locks.get(chat_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[chat_id] = lock
        return lock

    # ---------- mutations ----------
    def ensure(self, chat_id: int, system_prompt: Optional[str] = None) -> list[dict]:
        """Лениво создаёт историю чата; новую историю открывает system-сообщение (если есть промпт)."""
        history = self._history.get(chat_id)
        if history is None:
            history = []
            if system_prompt:
                history.append(self._make("system", system_prompt))
            self._history[chat_id] = history
        return history

    def append(self, chat_id: int, role: str, content: str) -> dict:
        if role not in ROLES:
            raise ValueError(f"unknown role: {role}")
        message = self._make(role, content)
        self.ensure(chat_id).append(message)
        return message

    def pop_last(self, chat_id: int) -> Optional[dict]:
        history = self._history.get(chat_id)
        if not history:
            return None
        return history.pop()

    def reset(self, chat_id: int, system_prompt: Optional[str] = None) -> None:
        """Полный сброс: остаётся одно свежее system-сообщение (или ничего)."""
        self._history[chat_id] = [self._make("system", system_prompt)] if system_prompt else []

    @staticmethod
    def _make(role: str, content: str) -> dict:
        return {"role": role, "content": content, "timestamp": now_ms()}
