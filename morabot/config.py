"""
Конфигурация проекта Morabot (секреты и пути из окружения / .env).
"""
import os
from pathlib import Path

from dotenv import load_dotenv

# Загрузить .env файл
load_dotenv()


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except (TypeError, ValueError):
        return default


class Config:
    """Центральная конфигурация приложения"""

    # Paths
    BASE_DIR: Path = Path(__file__).parent.parent
    DATA_DIR: str = os.getenv("DATA_DIR", "data")
    LOGS_DIR: str = os.getenv("LOGS_DIR", "logs")
    TEMP_DIR: str = os.getenv("TEMP_DIR", "temp")
    BACKUPS_DIR: str = os.getenv("BACKUPS_DIR", "backups")
    PROFILE_PATH: str = os.getenv("BOT_PROFILE_PATH", "config.yaml")

    # Telegram
    TELEGRAM_API_ID: int = _int_env("TELEGRAM_API_ID", 0)
    TELEGRAM_API_HASH: str = os.getenv("TELEGRAM_API_HASH", "")
    TELEGRAM_BOT_TOKEN: str = os.getenv("TELEGRAM_BOT_TOKEN", "")
    TELEGRAM_SESSION_NAME: str = os.getenv("TELEGRAM_SESSION_NAME", "morabot")

    # Оператор (чат для уведомлений и админских команд)
    OPERATOR_CHAT_ID: int = _int_env("OPERATOR_CHAT_ID", 0)

    # AI endpoint (stateless, ключ сессии = chat id)
    AI_API_URL: str = os.getenv("AI_API_URL", "https://api.vreden.my.id/api/mora")
    CONTEXT_TOKEN_BUDGET: int = _int_env("CONTEXT_TOKEN_BUDGET", 900)

    # Vendor APIs
    VENDOR_API_BASE: str = os.getenv("VENDOR_API_BASE", "https://api.vreden.my.id/api")
    APIFY_API_KEY: str = os.getenv("APIFY_API_KEY", "")

    # Файловый хостинг
    UPLOAD_HOST_URL: str = os.getenv("UPLOAD_HOST_URL", "https://catbox.moe/user/api.php")
    UPLOAD_LINK_PREFIX: str = os.getenv("UPLOAD_LINK_PREFIX", "https://files.catbox.moe/")
    UPLOAD_USERHASH: str = os.getenv("UPLOAD_USERHASH", "")

    # Панель (без ключа работает симуляция)
    PANEL_API_URL: str = os.getenv("PANEL_API_URL", "")
    PANEL_API_KEY: str = os.getenv("PANEL_API_KEY", "")
    PANEL_URL: str = os.getenv("PANEL_URL", "https://panel.example.com")
    PANEL_PORT: str = os.getenv("PANEL_PORT", "2083")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def validate(cls) -> list[str]:
        """Проверяет обязательные настройки и возвращает список ошибок"""
        errors = []

        if not cls.TELEGRAM_API_ID:
            errors.append("TELEGRAM_API_ID не установлен")
        if not cls.TELEGRAM_API_HASH:
            errors.append("TELEGRAM_API_HASH не установлен")
        if not cls.TELEGRAM_BOT_TOKEN:
            errors.append("TELEGRAM_BOT_TOKEN не установлен")

        return errors

    @classmethod
    def is_valid(cls) -> bool:
        """Проверяет валидность конфигурации"""
        return len(cls.validate()) == 0

    @classmethod
    def data_path(cls, file_name: str) -> str:
        return os.path.join(cls.DATA_DIR, file_name)


# Синглтон для удобства
config = Config()
