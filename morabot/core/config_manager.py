# -*- coding: utf-8 -*-
"""
Config Manager (профиль бота).
Читает YAML-профиль: метаданные бота, шаблоны сообщений, личности.
Секреты и URL живут отдельно, в morabot/config.py (.env).
"""

import copy
import os
import re

import structlog
import yaml

logger = structlog.get_logger("ConfigManager")

# Путь к профилю
CONFIG_PATH = "config.yaml"

# Дефолтные значения
DEFAULTS = {
    "bot": {
        "name": "Mora Bot",
        "version": "2.1.0",
        "description": "AI-собеседник, загрузчик медиа и набор полезных команд.",
        "last_update": "2026-10-01",
    },
    "messages": {
        "welcome": (
            "👋 Привет, **{name}**!\n\n"
            "Я — **{botName}**. Просто напиши мне что-нибудь, и я отвечу.\n"
            "Список команд: /help"
        ),
        "help": (
            "📖 **Команды {botName}:**\n\n"
            "/pin <запрос> — поиск картинок\n"
            "/ig <url> — скачать из Instagram\n"
            "/yt <url> — скачать видео с YouTube\n"
            "/play <название> — найти трек\n"
            "/ssweb <url> [desktop|mobile|tablet] — скриншот сайта\n"
            "/tiktok <url> — скачать из TikTok\n"
            "/qr <текст> — QR-код\n"
            "/sc <запрос> — поиск файлов\n"
            "/profil <username> — профиль TikTok\n"
            "/createpanel — аккаунт панели\n"
            "/stats — статистика\n"
            "/clear — очистить память диалога\n"
            "/bot — панель управления"
        ),
        "errors": {
            "ai_disabled": "🤖 AI сейчас выключен. Оператор может включить его через /bot.",
            "api_failure": "❌ AI-сервис не ответил. Попробуй ещё раз чуть позже.",
            "general": "⚠️ Что-то пошло не так. Мы уже разбираемся.",
            "invalid_query": "❌ Укажи запрос после команды. Пример: `/pin котики`",
        },
        "group": {
            "bot_added": "👋 Всем привет! Я — {botName}. Пишите /help, чтобы узнать, что я умею.",
            "welcome": "🎉 Добро пожаловать в **{groupName}**, {name}!",
            "farewell": "👋 {name} покинул(а) **{groupName}**.",
        },
    },
    "default_personality": "friendly",
    "personalities": {
        "friendly": {
            "name": "Дружелюбный",
            "button_label": "😊 Дружелюбный",
            "description": "Тёплый и вежливый собеседник.",
            "system_message": "Ты — дружелюбный ассистент. Отвечай тепло, коротко и по делу.",
        },
        "coder": {
            "name": "Программист",
            "button_label": "💻 Программист",
            "description": "Отвечает как опытный разработчик: минимум воды, максимум кода.",
            "system_message": "Ты — senior-разработчик. Отвечай кратко, приводи код, если он уместен.",
        },
        "joker": {
            "name": "Шутник",
            "button_label": "🤡 Шутник",
            "description": "Отвечает с юмором.",
            "system_message": "Ты — весёлый собеседник. Отвечай с юмором, но не обижай пользователя.",
        },
        "poet": {
            "name": "Поэт",
            "button_label": "🪶 Поэт",
            "description": "Все ответы в рифму.",
            "system_message": "Ты — поэт. Все ответы давай в рифму.",
        },
    },
}

_PLACEHOLDER = re.compile(r"\{(name|botName|userId|groupName)\}")


class ConfigManager:
    """
    Профиль бота поверх YAML.

    Использование:
        cfg = ConfigManager()
        cfg.get("bot.name")                      # → "Mora Bot"
        cfg.get("messages.errors.ai_disabled")
    """

    def __init__(self, path: str = CONFIG_PATH):
        self.path = path
        self.data = {}
        self._load()

    def _load(self):
        """Загрузка профиля из файла или создание нового."""
        if os.path.exists(self.path):
            try:
                with open(self.path, "r", encoding="utf-8") as f:
                    loaded = yaml.safe_load(f) or {}
                if not isinstance(loaded, dict):
                    raise ValueError("корень профиля должен быть словарём")
                self.data = loaded
                logger.info("profile_loaded", path=self.path)
            except (OSError, yaml.YAMLError, ValueError) as e:
                logger.error("profile_load_failed", path=self.path, error=str(e))
                self.data = {}
        else:
            # Создаём профиль с дефолтами
            self.data = copy.deepcopy(DEFAULTS)
            self._save()
            logger.info("profile_created", path=self.path)

    def _save(self):
        """Сохранение текущего профиля в файл."""
        try:
            parent = os.path.dirname(self.path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                yaml.dump(self.data, f, default_flow_style=False, allow_unicode=True, sort_keys=False)
        except OSError as e:
            logger.error("profile_save_failed", path=self.path, error=str(e))

    @staticmethod
    def _lookup(tree, keys):
        value = tree
        for k in keys:
            if not isinstance(value, dict):
                return None
            value = value.get(k)
            if value is None:
                return None
        return value

    def get(self, key: str, default=None):
        """
        Получить значение по dot-нотации.
        Если в YAML ключа нет — берём из DEFAULTS.
        """
        keys = key.split(".")
        value = self._lookup(self.data, keys)
        if value is None:
            value = self._lookup(DEFAULTS, keys)
        return default if value is None else value

    def reload(self):
        """Перечитать профиль с диска."""
        self._load()

    def bot_name(self) -> str:
        return str(self.get("bot.name", "Bot AI"))

    def message(self, key: str, **context) -> str:
        """Шаблон сообщения из секции messages с подставленными плейсхолдерами."""
        template = self.get(f"messages.{key}", "")
        return format_message(str(template), bot_name=self.bot_name(), **context)


def format_message(text: str, bot_name: str = "Bot AI", **context) -> str:
    """
    Подставляет {name}, {botName}, {userId}, {groupName}.
    Неизвестные плейсхолдеры остаются как есть.
    """
    values = {
        "name": context.get("name") or "Пользователь",
        "botName": bot_name or "Bot AI",
        "userId": context.get("user_id") or "N/A",
        "groupName": context.get("group_name") or "",
    }
    return _PLACEHOLDER.sub(lambda m: str(values[m.group(1)]), text)
