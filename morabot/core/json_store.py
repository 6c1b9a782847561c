# -*- coding: utf-8 -*-
"""
JSON-бэкенд для персистентных хранилищ.

Каждый документ читается целиком при старте и перезаписывается целиком
при каждом сохранении (UTF-8, indent=2). Запись атомарная: temp-файл + os.replace.
"""

import json
import os
import time
from typing import Any

import structlog

from .exceptions import StorageError

logger = structlog.get_logger(__name__)


class JsonFileBackend:
    """Один JSON-документ на диске."""

    def __init__(self, path: str):
        self.path = path

    def exists(self) -> bool:
        return os.path.isfile(self.path)

    def read(self) -> Any:
        """Читает документ. Ошибки парсинга/IO отдаются вызывающему."""
        with open(self.path, "r", encoding="utf-8") as f:
            return json.load(f)

    def write(self, data: Any) -> None:
        """Перезаписывает документ целиком."""
        parent = os.path.dirname(self.path)
        tmp = self.path + ".tmp"
        try:
            if parent:
                os.makedirs(parent, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp, self.path)
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"write failed for {self.path}: {e}") from e

    def quarantine(self) -> str:
        """Переименовывает битый файл в <path>.corrupted-<epoch-ms>, возвращает новый путь."""
        target = f"{self.path}.corrupted-{int(time.time() * 1000)}"
        os.replace(self.path, target)
        logger.warning("store_quarantined", path=self.path, moved_to=target)
        return target

    def append(self, item: Any) -> None:
        """Дописывает элемент в документ-массив (журнал)."""
        items = []
        if self.exists():
            try:
                loaded = self.read()
            except (OSError, json.JSONDecodeError) as e:
                raise StorageError(f"ledger unreadable {self.path}: {e}") from e
            if isinstance(loaded, list):
                items = loaded
            else:
                logger.warning("ledger_not_a_list", path=self.path)
        items.append(item)
        self.write(items)
