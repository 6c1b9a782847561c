# -*- coding: utf-8 -*-
"""
Кэш известных пользователей: только растёт, нужен для уведомления
оператора о первом сообщении нового пользователя.
"""

import json

import structlog

from .json_store import JsonFileBackend

logger = structlog.get_logger(__name__)


class UserCache:
    def __init__(self, backend: JsonFileBackend):
        self.backend = backend
        self._users: set[int] = set()

    def load(self) -> None:
        if not self.backend.exists():
            return
        try:
            data = self.backend.read()
            self._users = {int(uid) for uid in data}
            logger.info("user_cache_loaded", users=len(self._users))
        except (json.JSONDecodeError, TypeError, ValueError) as e:
            logger.error("user_cache_load_failed", path=self.backend.path, error=str(e))

    def save(self) -> None:
        self.backend.write(sorted(self._users))

    def remember(self, user_id: int) -> bool:
        """Добавляет пользователя. True — если он новый (сразу сохраняем)."""
        if user_id in self._users:
            return False
        self._users.add(user_id)
        self.save()
        return True

    def __contains__(self, user_id) -> bool:
        return user_id in self._users

    def __len__(self) -> int:
        return len(self._users)
