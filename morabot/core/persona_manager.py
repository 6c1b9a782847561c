# -*- coding: utf-8 -*-
"""
Persona Manager.
Личности бота (system-промпт + подписи для кнопок) из профиля config.yaml.
Личность выбирается на уровне чата: выбор сбрасывает историю до одного
system-сообщения (см. handlers/callbacks.py).
"""

from typing import Optional

import structlog

logger = structlog.get_logger("PersonaManager")


class PersonaManager:
    """Менеджер личностей."""

    def __init__(self, config_manager):
        self.cfg = config_manager
        self.personas: dict[str, dict] = {}
        self.reload()

    def reload(self) -> None:
        raw = self.cfg.get("personalities", {}) or {}
        self.personas = {
            str(key): info for key, info in raw.items()
            if isinstance(info, dict) and info.get("system_message")
        }
        skipped = len(raw) - len(self.personas)
        if skipped:
            logger.warning("personas_skipped_without_prompt", count=skipped)

    def get_persona_list(self) -> dict[str, dict]:
        """Возвращает словарь всех доступных личностей."""
        return self.personas

    def has(self, persona_id: str) -> bool:
        return persona_id in self.personas

    def get_persona_info(self, persona_id: str) -> Optional[dict]:
        return self.personas.get(persona_id)

    @property
    def default_persona(self) -> Optional[str]:
        key = self.cfg.get("default_personality")
        return key if key and key in self.personas else None

    def default_prompt(self) -> Optional[str]:
        """System-промпт личности по умолчанию (None, если она не настроена)."""
        key = self.default_persona
        return self.personas[key]["system_message"] if key else None

    def button_label(self, persona_id: str) -> str:
        info = self.personas.get(persona_id, {})
        return info.get("button_label") or info.get("name") or persona_id
