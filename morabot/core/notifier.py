# -*- coding: utf-8 -*-
"""
Notification Engine
Отвечает за отправку уведомлений оператору бота (OPERATOR_CHAT_ID).
Доставка best-effort: ошибки логируются и никогда не пробрасываются.
"""

import structlog

logger = structlog.get_logger(__name__)

NOTICE_PREFIX = "🔔 **Уведомление оператору**"


class OperatorNotifier:
    def __init__(self, client=None, operator_id: int = 0):
        self.client = client
        self.operator_id = operator_id

    def set_client(self, client, operator_id: int = None):
        """Привязка Pyrogram клиента (и, опционально, ID оператора)."""
        self.client = client
        if operator_id is not None:
            self.operator_id = operator_id
        logger.info("notifier_linked", operator_id=self.operator_id)

    @property
    def ready(self) -> bool:
        return bool(self.client and self.operator_id)

    async def notify(self, text: str) -> bool:
        if not self.ready:
            logger.warning("notifier_not_ready", text=text[:200])
            return False

        try:
            await self.client.send_message(chat_id=self.operator_id, text=f"{NOTICE_PREFIX}\n\n{text}")
            return True
        except Exception as e:
            logger.error("notification_failed", error=str(e))
            return False

    async def notify_new_user(self, user_id: int, name: str, username: str = None, first_text: str = ""):
        """Первое сообщение от нового пользователя."""
        handle = f"@{username}" if username else "-"
        msg = (
            f"👤 **Новый пользователь**\n"
            f"• Имя: {name}\n"
            f"• Username: {handle}\n"
            f"• ID: `{user_id}`\n"
            f"• Сообщение: {first_text[:200]}"
        )
        return await self.notify(msg)

    async def notify_startup(self, bot_name: str, upload_enabled: bool, ai_enabled: bool):
        msg = (
            f"🚀 Бот запущен! {bot_name} готов к работе\n"
            f"🧠 AI: {'вкл' if ai_enabled else 'выкл'}\n"
            f"📤 Загрузка файлов: {'вкл' if upload_enabled else 'выкл'}"
        )
        return await self.notify(msg)

    async def notify_shutdown(self):
        return await self.notify("🔴 Бот остановлен.")
