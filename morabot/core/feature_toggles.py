# -*- coding: utf-8 -*-
"""
Переключатели функций (AI, Upload).

Каждый флаг живёт в своём файле ({"aiEnabled": true}), читается при старте
(по умолчанию True) и сразу пишется на диск при переключении.
Локов нет: все чтения/записи идут из одного event loop.
"""

import os
from dataclasses import dataclass

import structlog

from .json_store import JsonFileBackend

logger = structlog.get_logger(__name__)


class FeatureToggle:
    def __init__(self, name: str, key: str, backend: JsonFileBackend, default: bool = True):
        self.name = name
        self.key = key
        self.backend = backend
        self.default = default
        self.enabled = default

    def load(self) -> bool:
        if not self.backend.exists():
            return self.enabled
        try:
            data = self.backend.read()
            value = data[self.key]
            if not isinstance(value, bool):
                raise TypeError(f"{self.key} must be boolean, got {type(value).__name__}")
            self.enabled = value
            logger.info("toggle_loaded", flag=self.name, enabled=self.enabled)
        except (ValueError, OSError, KeyError, TypeError) as e:
            logger.error("toggle_load_failed", flag=self.name, path=self.backend.path, error=str(e))
        return self.enabled

    def save(self) -> None:
        self.backend.write({self.key: self.enabled})

    def flip(self) -> bool:
        """Инвертирует флаг и синхронно сохраняет."""
        self.enabled = not self.enabled
        self.save()
        logger.info("toggle_flipped", flag=self.name, enabled=self.enabled)
        return self.enabled

    def __bool__(self) -> bool:
        return self.enabled


@dataclass
class FeatureFlags:
    ai: FeatureToggle
    upload: FeatureToggle

    @classmethod
    def from_dir(cls, data_dir: str) -> "FeatureFlags":
        return cls(
            ai=FeatureToggle("ai", "aiEnabled", JsonFileBackend(os.path.join(data_dir, "ai_status.json"))),
            upload=FeatureToggle(
                "upload", "uploadEnabled", JsonFileBackend(os.path.join(data_dir, "upload_status.json"))
            ),
        )

    def load(self) -> None:
        self.ai.load()
        self.upload.load()

    def save(self) -> None:
        self.ai.save()
        self.upload.save()
