# -*- coding: utf-8 -*-
"""
Callbacks Handler — нажатия inline-кнопок.

Маршрутизация двухуровневая: сначала точное совпадение callback_data
(CALLBACK_ROUTES), затем префиксы с аргументом (PREFIX_ROUTES).
Неизвестные данные просто подтверждаются без действия.
"""

from typing import Optional

from pyrogram.types import CallbackQuery

from .auth import display_name, is_operator
from .commands import build_bot_info, build_upload_info, send_panel_menu
from .keyboards import link_buttons, render_control_panel, render_personality_menu

import structlog

logger = structlog.get_logger(__name__)

CALLBACK_ROUTES = {
    "toggle_ai": "toggle_ai",
    "toggle_upload": "toggle_upload",
    "set_personality": "personality_menu",
    "reset_conversation": "reset_conversation",
    "back_to_main": "back_to_main",
    "bot_info": "bot_info",
    "upload_info": "upload_info",
    "create_panel_menu": "panel_menu",
    "screenshot_web": "screenshot_hint",
    "random_image": "random_image",
}

PREFIX_ROUTES = (
    ("set_personality_", "apply_personality"),
    ("create_panel_", "create_panel"),
)


def resolve_callback(data: str) -> tuple[Optional[str], Optional[str]]:
    """callback_data → (действие, аргумент). (None, None), если маршрута нет."""
    data = data or ""
    if data in CALLBACK_ROUTES:
        return CALLBACK_ROUTES[data], None
    for prefix, action in PREFIX_ROUTES:
        if data.startswith(prefix) and len(data) > len(prefix):
            return action, data[len(prefix):]
    return None, None


def build_panel_account_text(result) -> str:
    return (
        "✅ **Аккаунт панели создан**\n\n"
        "👤 **Данные для входа:**\n"
        f"• Логин: `{result.username}`\n"
        f"• Пароль: `{result.password}`\n"
        f"• Тариф: {result.plan.size}\n"
        f"• Срок: {result.plan.duration} дн.\n\n"
        "🌐 **Панель:**\n"
        f"• URL: {result.panel_url}\n"
        f"• Порт: {result.panel_port}\n\n"
        "⚠️ Сохрани данные и никому их не передавай."
    )


def register_handlers(app, deps: dict):
    safe_handler = deps["safe_handler"]
    flags = deps["flags"]
    store = deps["store"]
    personas = deps["personas"]
    profile = deps["profile"]
    vendors = deps["vendors"]
    panel = deps["panel"]
    notifier = deps["notifier"]

    async def _toggle(query: CallbackQuery, toggle, label: str) -> str:
        if not is_operator(query):
            return "⛔ Только для оператора"
        enabled = toggle.flip()
        await query.message.edit_reply_markup(render_control_panel(flags))
        return f"{label} {'включён' if enabled else 'выключен'}!"

    async def toggle_ai(client, query, arg):
        return await _toggle(query, flags.ai, "AI")

    async def toggle_upload(client, query, arg):
        return await _toggle(query, flags.upload, "Upload")

    async def personality_menu(client, query, arg):
        await query.message.edit_reply_markup(render_personality_menu(personas))

    async def apply_personality(client, query, key):
        info = personas.get_persona_info(key)
        if info is None:
            return "Неизвестная личность"
        chat_id = query.message.chat.id
        async with store.lock(chat_id):
            store.reset(chat_id, info["system_message"])
            store.save()
        logger.info("personality_set", chat_id=chat_id, personality=key)
        await client.send_message(
            chat_id, f"🎭 **Личность:** {info.get('name', key)}\n\n{info.get('description', '')}".rstrip()
        )

    async def reset_conversation(client, query, arg):
        chat_id = query.message.chat.id
        async with store.lock(chat_id):
            store.reset(chat_id, personas.default_prompt())
            store.save()
        await client.send_message(chat_id, "🧹 Память диалога сброшена!")

    async def back_to_main(client, query, arg):
        await query.message.edit_reply_markup(render_control_panel(flags))

    async def bot_info(client, query, arg):
        await client.send_message(query.message.chat.id, build_bot_info(profile, flags))

    async def upload_info(client, query, arg):
        await client.send_message(query.message.chat.id, build_upload_info(flags))

    async def panel_menu(client, query, arg):
        await send_panel_menu(client, query.message.chat.id, vendors)

    async def screenshot_hint(client, query, arg):
        await client.send_message(
            query.message.chat.id,
            "📸 Отправь `/ssweb <url> [desktop|mobile|tablet]`, например `/ssweb https://github.com mobile`",
        )

    async def random_image(client, query, arg):
        image = await vendors.random_image()
        if not image:
            return "Картинка не загрузилась, попробуй ещё раз"
        await client.send_photo(query.message.chat.id, image, caption="🖼️ Случайная картинка")

    async def create_panel(client, query, plan_key):
        user = query.from_user
        user_name = display_name(user)
        result = await panel.create_account(plan_key, user.id, user_name)
        chat_id = query.message.chat.id
        if not result.success:
            await client.send_message(chat_id, f"❌ Не удалось создать аккаунт панели: {result.error}")
            return
        await client.send_message(
            chat_id,
            build_panel_account_text(result),
            reply_markup=link_buttons(result.panel_link, "🌐 Открыть панель"),
        )
        await notifier.notify(
            "🆕 **Новый аккаунт панели**\n"
            f"👤 {user_name} ({user.id})\n"
            f"📦 Тариф: {result.plan.size}\n"
            f"🔑 Логин: {result.username}"
        )

    actions = {
        "toggle_ai": toggle_ai,
        "toggle_upload": toggle_upload,
        "personality_menu": personality_menu,
        "apply_personality": apply_personality,
        "reset_conversation": reset_conversation,
        "back_to_main": back_to_main,
        "bot_info": bot_info,
        "upload_info": upload_info,
        "panel_menu": panel_menu,
        "screenshot_hint": screenshot_hint,
        "random_image": random_image,
        "create_panel": create_panel,
    }

    @app.on_callback_query()
    @safe_handler
    async def on_callback(client, query: CallbackQuery):
        action, arg = resolve_callback(query.data)
        if action is None:
            logger.warning("unknown_callback", data=query.data)
            await query.answer()
            return

        notice = await actions[action](client, query, arg)
        await query.answer(notice or "", show_alert=bool(notice))
