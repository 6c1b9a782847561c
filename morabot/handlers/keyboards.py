# -*- coding: utf-8 -*-
"""
Inline-клавиатуры бота.
Панель управления рендерится в одном месте и вызывается везде, где её
нужно показать или перерисовать (/bot, toggle_*, back_to_main).
"""

from pyrogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from morabot.core.panel_service import PANEL_PLANS


def status_label(enabled: bool) -> str:
    return "✅ Вкл" if enabled else "❌ Выкл"


def render_control_panel(flags) -> InlineKeyboardMarkup:
    """Панель управления для текущего состояния флагов."""
    return InlineKeyboardMarkup([
        [
            InlineKeyboardButton(f"AI: {status_label(flags.ai.enabled)}", callback_data="toggle_ai"),
            InlineKeyboardButton(f"Upload: {status_label(flags.upload.enabled)}", callback_data="toggle_upload"),
        ],
        [
            InlineKeyboardButton("✨ Личность", callback_data="set_personality"),
            InlineKeyboardButton("🔄 Сброс диалога", callback_data="reset_conversation"),
        ],
        [
            InlineKeyboardButton("📸 Скриншот сайта", callback_data="screenshot_web"),
            InlineKeyboardButton("ℹ️ О боте", callback_data="bot_info"),
        ],
        [
            InlineKeyboardButton("🖼️ Случайная картинка", callback_data="random_image"),
            InlineKeyboardButton("🔧 Создать панель", callback_data="create_panel_menu"),
        ],
        [
            InlineKeyboardButton("📤 Про загрузку", callback_data="upload_info"),
        ],
    ])


def _rows_of_two(buttons: list) -> list[list]:
    return [buttons[i:i + 2] for i in range(0, len(buttons), 2)]


def render_personality_menu(personas) -> InlineKeyboardMarkup:
    """Меню личностей: по две кнопки в ряд + «назад»."""
    buttons = [
        InlineKeyboardButton(personas.button_label(key), callback_data=f"set_personality_{key}")
        for key in personas.get_persona_list()
    ]
    rows = _rows_of_two(buttons)
    rows.append([InlineKeyboardButton("🔙 Назад", callback_data="back_to_main")])
    return InlineKeyboardMarkup(rows)


def render_panel_plans() -> InlineKeyboardMarkup:
    """Тарифы панели: пакеты по объёму парами, затем unli и admin отдельными рядами."""
    sized = [
        InlineKeyboardButton(f"📦 {plan.size}", callback_data=f"create_panel_{key}")
        for key, plan in PANEL_PLANS.items()
        if key.endswith("gb")
    ]
    rows = _rows_of_two(sized)
    rows.append([InlineKeyboardButton("📦 Unlimited", callback_data="create_panel_unli")])
    rows.append([InlineKeyboardButton("👑 Admin", callback_data="create_panel_admin")])
    return InlineKeyboardMarkup(rows)


def link_buttons(url: str, label: str = "🔗 Открыть ссылку") -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([[InlineKeyboardButton(label, url=url)]])
