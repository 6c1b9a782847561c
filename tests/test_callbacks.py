# -*- coding: utf-8 -*-
"""Тесты маршрутизации callback_data и действий inline-кнопок."""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from morabot.config import Config
from morabot.handlers.callbacks import register_handlers, resolve_callback


@pytest.mark.parametrize("data, expected", [
    ("toggle_ai", ("toggle_ai", None)),
    ("toggle_upload", ("toggle_upload", None)),
    ("set_personality", ("personality_menu", None)),
    ("create_panel_menu", ("panel_menu", None)),
    ("screenshot_web", ("screenshot_hint", None)),
    ("set_personality_coder", ("apply_personality", "coder")),
    ("create_panel_5gb", ("create_panel", "5gb")),
    ("create_panel_unli", ("create_panel", "unli")),
])
def test_known_routes(data, expected):
    assert resolve_callback(data) == expected


@pytest.mark.parametrize("data", ["", None, "nonsense", "set_personality_", "create_panel_"])
def test_unknown_routes(data):
    assert resolve_callback(data) == (None, None)


# === DISPATCHER ===


class CallbackApp:
    """Подменяет pyrogram.Client: запоминает обработчик нажатий."""

    def __init__(self):
        self.callbacks = []

    def on_message(self, *args, **kwargs):
        return lambda func: func

    def on_callback_query(self, *args, **kwargs):
        def decorator(func):
            self.callbacks.append(func)
            return func
        return decorator


def _dispatcher(store, flags, personas=None):
    app = CallbackApp()
    register_handlers(app, {
        "safe_handler": lambda func: func,
        "flags": flags,
        "store": store,
        "personas": personas or MagicMock(),
        "profile": MagicMock(),
        "vendors": MagicMock(),
        "panel": MagicMock(),
        "notifier": MagicMock(),
    })
    assert len(app.callbacks) == 1
    return app.callbacks[0]


def _query(data, user_id=7, chat_id=100):
    return SimpleNamespace(
        data=data,
        from_user=SimpleNamespace(id=user_id, first_name="Alice", username="alice"),
        message=SimpleNamespace(chat=SimpleNamespace(id=chat_id), edit_reply_markup=AsyncMock()),
        answer=AsyncMock(),
    )


def _client():
    client = MagicMock()
    client.send_message = AsyncMock()
    return client


@pytest.mark.asyncio
async def test_operator_toggle_flips_persists_and_rerenders(tmp_path, store, flags):
    on_callback = _dispatcher(store, flags)
    query = _query("toggle_ai")

    with patch.object(Config, "OPERATOR_CHAT_ID", 7):
        await on_callback(_client(), query)

    assert flags.ai.enabled is False
    assert '"aiEnabled": false' in (tmp_path / "ai_status.json").read_text(encoding="utf-8")
    markup = query.message.edit_reply_markup.await_args.args[0]
    assert markup.inline_keyboard[0][0].text == "AI: ❌ Выкл"
    query.answer.assert_awaited_once_with("AI выключен!", show_alert=True)


@pytest.mark.asyncio
async def test_non_operator_toggle_is_refused(tmp_path, store, flags):
    on_callback = _dispatcher(store, flags)
    query = _query("toggle_upload", user_id=8)

    with patch.object(Config, "OPERATOR_CHAT_ID", 7):
        await on_callback(_client(), query)

    assert flags.upload.enabled is True
    assert not (tmp_path / "upload_status.json").exists()
    query.message.edit_reply_markup.assert_not_awaited()
    query.answer.assert_awaited_once_with("⛔ Только для оператора", show_alert=True)


@pytest.mark.asyncio
async def test_personality_switch_leaves_single_system_message(store, flags, history_path):
    personas = MagicMock()
    personas.get_persona_info.return_value = {
        "name": "Программист", "description": "Кратко", "system_message": "Ты разработчик.",
    }
    store.reset(100, "старый промпт")
    store.append(100, "user", "привет")
    store.append(100, "assistant", "здравствуй")
    on_callback = _dispatcher(store, flags, personas)
    client = _client()
    query = _query("set_personality_coder")

    await on_callback(client, query)

    personas.get_persona_info.assert_called_once_with("coder")
    history = store.get(100)
    assert [(m["role"], m["content"]) for m in history] == [("system", "Ты разработчик.")]
    with open(history_path, encoding="utf-8") as f:
        assert json.load(f)["100"][0]["content"] == "Ты разработчик."
    client.send_message.assert_awaited_once()
    query.answer.assert_awaited_once_with("", show_alert=False)


@pytest.mark.asyncio
async def test_unknown_personality_alerts_and_keeps_history(store, flags):
    personas = MagicMock()
    personas.get_persona_info.return_value = None
    store.append(100, "user", "привет")
    on_callback = _dispatcher(store, flags, personas)
    query = _query("set_personality_ghost")

    await on_callback(_client(), query)

    assert [m["content"] for m in store.get(100)] == ["привет"]
    query.answer.assert_awaited_once_with("Неизвестная личность", show_alert=True)


@pytest.mark.asyncio
async def test_reset_conversation_restores_default_prompt(store, flags):
    personas = MagicMock()
    personas.default_prompt.return_value = "Будь добрым"
    store.append(100, "user", "привет")
    on_callback = _dispatcher(store, flags, personas)
    client = _client()

    await on_callback(client, _query("reset_conversation"))

    assert [(m["role"], m["content"]) for m in store.get(100)] == [("system", "Будь добрым")]
    client.send_message.assert_awaited_once_with(100, "🧹 Память диалога сброшена!")


@pytest.mark.asyncio
async def test_unknown_data_is_acknowledged(store, flags):
    on_callback = _dispatcher(store, flags)
    query = _query("nonsense")
    await on_callback(_client(), query)
    query.answer.assert_awaited_once_with()
